"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from ledgerwatch.models.config import NETWORK_HORIZON_URLS, WatcherConfig

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "LEDGERWATCH_",
) -> WatcherConfig:
    """Load watcher configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (LEDGERWATCH_HORIZON_URL, etc.)
        2. TOML config file
        3. Defaults from WatcherConfig

    When only a network is given, its public Horizon URL is used.
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = WatcherConfig()
    horizon_url: str | None = None

    # ── Watcher section ────────────────────────────────────
    watcher = raw.get("watcher", {})
    if v := watcher.get("block_interval"):
        cfg.block_interval = float(v)
    if "watch_blocks" in watcher:
        cfg.watch_blocks = bool(watcher["watch_blocks"])
    if "watch_transactions" in watcher:
        cfg.watch_transactions = bool(watcher["watch_transactions"])
    if v := watcher.get("log_level"):
        cfg.log_level = str(v)

    # ── Stellar section ────────────────────────────────────
    stellar = raw.get("stellar", {})
    if v := stellar.get("network"):
        cfg.network = str(v)
    if v := stellar.get("horizon_url"):
        horizon_url = str(v)
    if v := stellar.get("page_limit"):
        cfg.page_limit = int(v)
    if "include_failed" in stellar:
        cfg.include_failed = bool(stellar["include_failed"])

    # ── Environment variable overrides (highest priority) ──
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = net
    if url := os.environ.get(f"{env_prefix}HORIZON_URL"):
        horizon_url = url
    if interval := os.environ.get(f"{env_prefix}BLOCK_INTERVAL"):
        cfg.block_interval = float(interval)
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    if horizon_url is None:
        if cfg.network not in NETWORK_HORIZON_URLS:
            raise ValueError(
                f"Unknown network {cfg.network!r}; set horizon_url explicitly "
                f"or use one of: {', '.join(NETWORK_HORIZON_URLS)}"
            )
        horizon_url = NETWORK_HORIZON_URLS[cfg.network]
    cfg.horizon_url = horizon_url

    if cfg.block_interval <= 0:
        raise ValueError(f"block_interval must be positive, got {cfg.block_interval}")

    cfg.log_level = cfg.log_level.lower()
    if cfg.log_level not in LOG_LEVELS:
        raise ValueError(
            f"Unknown log_level {cfg.log_level!r}; use one of: {', '.join(LOG_LEVELS)}"
        )

    return cfg

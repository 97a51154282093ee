"""Configuration models for the watcher."""

from __future__ import annotations

from dataclasses import dataclass

NETWORK_HORIZON_URLS = {
    "testnet": "https://horizon-testnet.stellar.org",
    "mainnet": "https://horizon.stellar.org",
}


@dataclass
class WatcherConfig:
    """Complete watcher configuration."""

    # Watcher
    block_interval: float = 5.0  # seconds, Stellar closes a ledger every ~5s
    watch_blocks: bool = True
    watch_transactions: bool = True
    log_level: str = "info"

    # Stellar
    network: str = "testnet"
    horizon_url: str = NETWORK_HORIZON_URLS["testnet"]
    page_limit: int = 200  # Horizon max records per page
    include_failed: bool = True

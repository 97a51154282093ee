"""Shared fixtures for ledgerwatch tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from ledgerwatch.models.config import NETWORK_HORIZON_URLS, WatcherConfig
from ledgerwatch.subscription import Subscription

from tests.factories import make_block
from tests.mocks import MockLedger, Recorder

HORIZON_URL = NETWORK_HORIZON_URLS["testnet"]


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add network info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "Stellar Testnet"
    meta["Horizon"] = HORIZON_URL


def make_test_config(**overrides) -> WatcherConfig:
    """Build a WatcherConfig suitable for testing."""
    defaults = dict(
        block_interval=0.01,
        watch_blocks=True,
        watch_transactions=True,
        network="testnet",
        horizon_url=HORIZON_URL,
        page_limit=200,
        include_failed=True,
    )
    defaults.update(overrides)
    return WatcherConfig(**defaults)


@pytest.fixture
def mock_ledger():
    """Ledger whose head is block #5."""
    return MockLedger(head=make_block(5))


@pytest.fixture
async def subscription(mock_ledger):
    """Subscription with a long interval: only ticks the test drives run."""
    sub = Subscription(mock_ledger)
    yield sub
    await sub.close()


@pytest.fixture
def errors():
    return []


@pytest.fixture
async def observed_subscription(mock_ledger, errors):
    """Subscription that records absorbed ledger errors."""
    sub = Subscription(mock_ledger, on_error=errors.append)
    yield sub
    await sub.close()


@pytest.fixture
async def fast_subscription(mock_ledger):
    """Subscription that really polls, every 10ms."""
    sub = Subscription(mock_ledger, poll_interval=0.01)
    yield sub
    await sub.close()


@pytest.fixture
def recorder():
    return Recorder()

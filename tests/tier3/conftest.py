"""Tier 3 fixtures: the public Stellar testnet Horizon."""

from __future__ import annotations

import httpx
import pytest

from ledgerwatch.stellar.client import HorizonLedgerClient
from tests.conftest import HORIZON_URL


@pytest.fixture(scope="session")
def horizon_available():
    """Check the testnet Horizon is reachable. Skip tier3 tests if not."""
    try:
        r = httpx.get(HORIZON_URL, timeout=5)
        if r.status_code == 200:
            return True
        pytest.skip(f"Horizon returned {r.status_code} at {HORIZON_URL}")
    except httpx.HTTPError:
        pytest.skip(f"Horizon not reachable at {HORIZON_URL}")


@pytest.fixture
async def testnet_client(horizon_available):
    """Real HorizonLedgerClient against testnet."""
    client = HorizonLedgerClient(HORIZON_URL, block_interval=1.0)
    yield client
    await client.close()

"""LedgerClient protocol - read access to the head of a ledger."""

from __future__ import annotations

from typing import Protocol

from ledgerwatch.models.ledger import Block, LedgerConfig


class LedgerUnavailableError(Exception):
    """The ledger could not be queried (network failure, bad response)."""


class LedgerClient(Protocol):
    """Queries a ledger that only exposes its latest block."""

    async def get_latest_block(self) -> Block:
        """Return the current head block.

        Raises LedgerUnavailableError if the ledger cannot be reached.
        """
        ...

    def get_config(self) -> LedgerConfig:
        """Return static ledger parameters such as the block interval."""
        ...

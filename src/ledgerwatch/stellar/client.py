"""Horizon ledger client - reads the latest closed Stellar ledger."""

from __future__ import annotations

import logging
from typing import Any

from stellar_sdk import ServerAsync
from stellar_sdk.client.aiohttp_client import AiohttpClient
from stellar_sdk.exceptions import BaseRequestError

from ledgerwatch.interfaces.ledger import LedgerUnavailableError
from ledgerwatch.models.ledger import Block, LedgerConfig, Transaction

log = logging.getLogger(__name__)


def _records(response: dict[str, Any]) -> list[dict[str, Any]]:
    """Pull the record list out of a Horizon HAL collection response."""
    return response["_embedded"]["records"]


def _to_transaction(record: dict[str, Any]) -> Transaction:
    return Transaction(
        hash=record["hash"],
        ledger=int(record["ledger"]),
        source_account=record["source_account"],
        successful=bool(record.get("successful", True)),
        operation_count=int(record.get("operation_count", 0)),
        fee_charged=int(record.get("fee_charged") or 0),
        created_at=record.get("created_at", ""),
    )


def _to_block(record: dict[str, Any], transactions: list[Transaction]) -> Block:
    return Block(
        sequence=int(record["sequence"]),
        hash=record["hash"],
        prev_hash=record.get("prev_hash"),
        closed_at=record.get("closed_at", ""),
        transactions=tuple(transactions),
    )


class HorizonLedgerClient:
    """LedgerClient backed by a Stellar Horizon server.

    A Stellar ledger is the block: the head is the most recently closed
    ledger and its transactions are fetched from
    ``/ledgers/{sequence}/transactions``. The last block built is kept so
    that polling an unchanged head costs a single request.
    """

    def __init__(
        self,
        horizon_url: str,
        block_interval: float = 5.0,
        page_limit: int = 200,
        include_failed: bool = True,
    ) -> None:
        self._server = ServerAsync(horizon_url=horizon_url, client=AiohttpClient())
        self._horizon_url = horizon_url
        self._block_interval = block_interval
        self._page_limit = page_limit
        self._include_failed = include_failed
        self._last_block: Block | None = None

    async def close(self) -> None:
        """Close the underlying aiohttp session."""
        await self._server.close()

    def get_config(self) -> LedgerConfig:
        return LedgerConfig(block_interval=self._block_interval)

    async def get_latest_block(self) -> Block:
        """Fetch the latest closed ledger with its transactions."""
        try:
            response = await self._server.ledgers().order(desc=True).limit(1).call()
            records = _records(response)
            if not records:
                raise LedgerUnavailableError(f"Horizon {self._horizon_url} returned no ledgers")
            ledger = records[0]

            if self._last_block is not None and self._last_block.hash == ledger["hash"]:
                return self._last_block

            transactions: list[Transaction] = []
            if self._transaction_count(ledger) > 0:
                transactions = await self._fetch_transactions(int(ledger["sequence"]))
            block = _to_block(ledger, transactions)

        except BaseRequestError as exc:
            log.warning("Latest ledger query failed: %s", exc)
            raise LedgerUnavailableError(str(exc)) from exc
        except (KeyError, TypeError, ValueError) as exc:
            log.warning("Malformed Horizon response: %s", exc)
            raise LedgerUnavailableError(f"malformed Horizon response: {exc}") from exc

        log.debug("Head ledger %d (%d transactions)", block.sequence, len(block.transactions))
        self._last_block = block
        return block

    def _transaction_count(self, ledger: dict[str, Any]) -> int:
        count = int(ledger.get("successful_transaction_count") or 0)
        if self._include_failed:
            count += int(ledger.get("failed_transaction_count") or 0)
        return count

    async def _fetch_transactions(self, sequence: int) -> list[Transaction]:
        """Page through every transaction of one ledger, oldest first."""
        transactions: list[Transaction] = []
        cursor: str | None = None
        while True:
            builder = (
                self._server.transactions()
                .for_ledger(sequence)
                .include_failed(self._include_failed)
                .limit(self._page_limit)
            )
            if cursor is not None:
                builder = builder.cursor(cursor)
            page = _records(await builder.call())
            transactions.extend(_to_transaction(r) for r in page)

            if len(page) < self._page_limit:
                return transactions
            cursor = page[-1]["paging_token"]

"""Receiver protocols for block and transaction notifications."""

from __future__ import annotations

from typing import Awaitable, Protocol, Union

from ledgerwatch.interfaces.ledger import LedgerUnavailableError
from ledgerwatch.models.ledger import Block, Transaction


class BlockReceiver(Protocol):
    """Called with the new blocks found by one poll."""

    def __call__(self, blocks: list[Block]) -> Union[None, Awaitable[None]]:
        ...


class TransactionReceiver(Protocol):
    """Called with the transactions of the new blocks found by one poll."""

    def __call__(self, transactions: list[Transaction]) -> Union[None, Awaitable[None]]:
        ...


class ErrorObserver(Protocol):
    """Notified of ledger query failures that polling absorbed."""

    def __call__(self, error: LedgerUnavailableError) -> None:
        ...

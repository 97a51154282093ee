"""Protocol interfaces for ledgerwatch components."""

from ledgerwatch.interfaces.ledger import LedgerClient, LedgerUnavailableError
from ledgerwatch.interfaces.receivers import (
    BlockReceiver,
    ErrorObserver,
    TransactionReceiver,
)

__all__ = [
    "LedgerClient", "LedgerUnavailableError",
    "BlockReceiver", "TransactionReceiver", "ErrorObserver",
]

"""ledgerwatch - push notifications for new Stellar ledgers."""

from ledgerwatch.interfaces.ledger import LedgerClient, LedgerUnavailableError
from ledgerwatch.models.ledger import Block, LedgerConfig, Transaction
from ledgerwatch.models.subscription import ReceiverKind, SubscriptionHandle
from ledgerwatch.subscription import Subscription

__all__ = [
    "Subscription",
    "LedgerClient", "LedgerUnavailableError",
    "Block", "LedgerConfig", "Transaction",
    "ReceiverKind", "SubscriptionHandle",
]

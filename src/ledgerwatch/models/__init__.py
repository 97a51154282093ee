"""Data models for ledgerwatch."""

from ledgerwatch.models.config import NETWORK_HORIZON_URLS, WatcherConfig
from ledgerwatch.models.ledger import Block, LedgerConfig, Transaction
from ledgerwatch.models.subscription import ReceiverKind, SubscriptionHandle

__all__ = [
    "Block", "LedgerConfig", "Transaction",
    "ReceiverKind", "SubscriptionHandle",
    "NETWORK_HORIZON_URLS", "WatcherConfig",
]

"""Stellar integration components."""

from ledgerwatch.stellar.client import HorizonLedgerClient

__all__ = ["HorizonLedgerClient"]

"""Ledger models: blocks and the transactions they carry."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Transaction:
    """A transaction applied in a closed ledger."""

    hash: str
    ledger: int
    source_account: str
    successful: bool = True
    operation_count: int = 0
    fee_charged: int = 0  # stroops
    created_at: str = ""


@dataclass(frozen=True)
class Block:
    """One closed ledger and its transactions, in application order.

    Two blocks are equal when every field matches, so a head that has not
    moved compares equal to the cursor.
    """

    sequence: int
    hash: str
    prev_hash: str | None = None
    closed_at: str = ""
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LedgerConfig:
    """Static parameters reported by a ledger client."""

    block_interval: float = 5.0  # seconds between ledger closes

"""Subscription handle returned to receivers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class ReceiverKind(str, Enum):
    """What a receiver is subscribed to."""

    BLOCK = "block"
    TRANSACTION = "transaction"


@dataclass(frozen=True)
class SubscriptionHandle:
    """Token for a registered receiver.

    Subscribing the same callable twice yields equal handles, so either the
    handle or the callable itself can be passed back to unsubscribe.
    """

    kind: ReceiverKind
    receiver: Callable[[list[Any]], Any]

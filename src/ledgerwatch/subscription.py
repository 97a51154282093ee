"""Block subscription - turns head-of-ledger polling into push notifications."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Union

from ledgerwatch.interfaces.ledger import LedgerClient, LedgerUnavailableError
from ledgerwatch.interfaces.receivers import (
    BlockReceiver,
    ErrorObserver,
    TransactionReceiver,
)
from ledgerwatch.models.ledger import Block, Transaction
from ledgerwatch.models.subscription import ReceiverKind, SubscriptionHandle

log = logging.getLogger(__name__)


class Subscription:
    """Notifies receivers of new blocks and transactions on a ledger.

    The ledger only answers "what is the latest block", so a background
    task polls it once per block interval and compares the answer with the
    last block seen (the cursor). A changed head is delivered to every
    block receiver as ``[block]`` and its transactions to every
    transaction receiver as one list.

    The poll task only runs while at least one receiver is registered: it
    starts on the first subscribe and is stopped, after its in-flight poll
    completes, when the last receiver unsubscribes.

    All state lives on the event loop that calls the subscribe methods.
    Callers on other threads should go through
    ``asyncio.run_coroutine_threadsafe``.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        on_error: ErrorObserver | None = None,
        poll_interval: float | None = None,
    ) -> None:
        self._ledger = ledger
        self._on_error = on_error
        self._poll_interval = poll_interval
        self._block_receivers: dict[BlockReceiver, SubscriptionHandle] = {}
        self._transaction_receivers: dict[TransactionReceiver, SubscriptionHandle] = {}
        self._latest_block: Block | None = None
        self._poll_task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None
        self._stopping_task: asyncio.Task | None = None
        self._joining = False
        self._workers: set[asyncio.Task] = set()
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    @property
    def latest_block(self) -> Block | None:
        """The last block seen, or None before the first successful poll."""
        return self._latest_block

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None

    @property
    def receiver_count(self) -> int:
        return len(self._block_receivers) + len(self._transaction_receivers)

    # ── Subscribers ───────────────────────────────────────

    async def subscribe_blocks(self, receiver: BlockReceiver) -> SubscriptionHandle:
        """Register a block receiver and make sure polling is running."""
        handle = self._block_receivers.setdefault(
            receiver, SubscriptionHandle(ReceiverKind.BLOCK, receiver),
        )
        await self._update_polling()
        return handle

    async def unsubscribe_blocks(
        self, receiver: Union[BlockReceiver, SubscriptionHandle],
    ) -> None:
        """Remove a block receiver; stops polling if none are left."""
        self._block_receivers.pop(_unwrap(receiver, ReceiverKind.BLOCK), None)
        await self._update_polling()

    async def subscribe_transactions(
        self, receiver: TransactionReceiver,
    ) -> SubscriptionHandle:
        """Register a transaction receiver and make sure polling is running."""
        handle = self._transaction_receivers.setdefault(
            receiver, SubscriptionHandle(ReceiverKind.TRANSACTION, receiver),
        )
        await self._update_polling()
        return handle

    async def unsubscribe_transactions(
        self, receiver: Union[TransactionReceiver, SubscriptionHandle],
    ) -> None:
        """Remove a transaction receiver; stops polling if none are left."""
        self._transaction_receivers.pop(
            _unwrap(receiver, ReceiverKind.TRANSACTION), None,
        )
        await self._update_polling()

    async def close(self) -> None:
        """Drop every receiver and stop polling."""
        self._block_receivers.clear()
        self._transaction_receivers.clear()
        await self._update_polling()

    # ── Timer lifecycle ───────────────────────────────────

    async def _update_polling(self) -> None:
        if asyncio.current_task() in self._workers:
            # A receiver (un)subscribing from inside a dispatch. The poll
            # task cannot wait on itself: stops are only requested, and a
            # pending one is withdrawn if receivers come back.
            if self.receiver_count == 0:
                self._request_stop()
            elif self._stopping_task is asyncio.current_task() and not self._joining:
                self._resume()
            return

        async with self._lock:
            if self.receiver_count == 0:
                await self._stop_timer()
            # Receivers may have subscribed while the stop was in progress
            if self.receiver_count > 0:
                await self._start_timer()

    async def _start_timer(self) -> None:
        if self._poll_task is not None:
            return

        # A stop requested from inside a dispatch may still be winding down
        await self._join_stopping()

        # Priming poll: seed the cursor so the current head is not
        # reported as new to the first subscribers.
        try:
            self._latest_block = await self._ledger.get_latest_block()
        except LedgerUnavailableError as exc:
            self._report_error(exc)
        except Exception:
            log.exception("Unexpected error while priming the ledger cursor")

        interval = self._poll_interval
        if interval is None:
            interval = self._ledger.get_config().block_interval

        self._stop_event = asyncio.Event()
        task = asyncio.create_task(self._run(interval, self._stop_event))
        self._workers.add(task)
        task.add_done_callback(self._workers.discard)
        self._poll_task = task
        log.debug("Polling started (interval %.2fs)", interval)

    async def _stop_timer(self) -> None:
        if self._poll_task is None and self._stopping_task is None:
            return

        self._request_stop()
        await self._join_stopping()
        log.debug("Polling stopped")

    def _request_stop(self) -> None:
        if self._poll_task is None:
            return
        self._stop_event.set()
        self._stopping_task = self._poll_task
        self._poll_task = None

    def _resume(self) -> None:
        """Withdraw a stop that has not taken effect yet."""
        self._stop_event.clear()
        self._poll_task = self._stopping_task
        self._stopping_task = None

    async def _join_stopping(self) -> None:
        task = self._stopping_task
        if task is None:
            return

        # No resume while someone waits, so the task is sure to exit.
        # Shielded: the in-flight tick finishes even if our caller is cancelled.
        self._joining = True
        try:
            await asyncio.shield(task)
        finally:
            self._joining = False
        if self._stopping_task is task:
            self._stopping_task = None

    async def _run(self, interval: float, stop: asyncio.Event) -> None:
        """Tick now, then once per interval after each tick completes."""
        while not stop.is_set():
            try:
                await self._tick()
            except Exception:
                log.exception("Unexpected error while polling the ledger")

            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    # ── Polling ───────────────────────────────────────────

    async def _tick(self) -> None:
        """Fetch the head block and dispatch it if it moved."""
        try:
            block = await self._ledger.get_latest_block()
        except LedgerUnavailableError as exc:
            self._report_error(exc)
            return

        new_blocks: list[Block] = []
        if block != self._latest_block:
            self._latest_block = block
            new_blocks.append(block)

        if not new_blocks:
            return

        transactions: list[Transaction] = []
        for b in new_blocks:
            transactions.extend(b.transactions)

        for receiver in list(self._block_receivers):
            if receiver not in self._block_receivers:
                continue  # unsubscribed during this dispatch
            await self._deliver(receiver, list(new_blocks))
        for receiver in list(self._transaction_receivers):
            if receiver not in self._transaction_receivers:
                continue
            await self._deliver(receiver, list(transactions))

    async def _deliver(self, receiver: Callable[[list[Any]], Any], batch: list[Any]) -> None:
        try:
            result = receiver(batch)
            if inspect.isawaitable(result):
                await result
        except Exception:
            log.exception("Receiver %r failed", receiver)

    def _report_error(self, exc: LedgerUnavailableError) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(exc)
        except Exception:
            log.exception("Error observer %r failed", self._on_error)


def _unwrap(
    receiver: Union[Callable[[list[Any]], Any], SubscriptionHandle],
    kind: ReceiverKind,
) -> Callable[[list[Any]], Any]:
    """Return the callable behind a handle, checking it is the right kind."""
    if isinstance(receiver, SubscriptionHandle):
        if receiver.kind != kind:
            raise ValueError(
                f"Handle is for {receiver.kind.value} receivers, not {kind.value}"
            )
        return receiver.receiver
    return receiver

"""Watch daemon - wires the ledger client and subscription together."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Callable

from ledgerwatch.interfaces.ledger import LedgerUnavailableError
from ledgerwatch.models.config import WatcherConfig
from ledgerwatch.models.ledger import Block, Transaction
from ledgerwatch.stellar.client import HorizonLedgerClient
from ledgerwatch.subscription import Subscription

log = logging.getLogger(__name__)


def format_block(block: Block) -> str:
    return (
        f"ledger {block.sequence} {block.hash[:12]} "
        f"closed {block.closed_at or '?'} ({len(block.transactions)} txs)"
    )


def format_transaction(tx: Transaction) -> str:
    status = "ok" if tx.successful else "failed"
    return (
        f"tx {tx.hash[:12]} ledger={tx.ledger} source={tx.source_account[:8]}... "
        f"ops={tx.operation_count} fee={tx.fee_charged} {status}"
    )


class WatchDaemon:
    """Subscribes to new ledgers and reports them until stopped.

    Every notification is logged and, if given, passed to ``sink`` as a
    formatted line (the CLI uses this to echo to stdout).
    """

    def __init__(
        self,
        cfg: WatcherConfig,
        sink: Callable[[str], None] | None = None,
    ) -> None:
        self._cfg = cfg
        self._sink = sink
        self._stop_event = asyncio.Event()

        self.ledger = HorizonLedgerClient(
            cfg.horizon_url, cfg.block_interval, cfg.page_limit, cfg.include_failed,
        )
        self.subscription = Subscription(self.ledger, on_error=self._on_error)

        self.blocks_seen = 0
        self.transactions_seen = 0
        self.errors_seen = 0

    async def start(self) -> None:
        """Subscribe and wait until stop() is called."""
        log.info("Starting ledgerwatch daemon")
        log.info("  Network: %s", self._cfg.network)
        log.info("  Horizon: %s", self._cfg.horizon_url)
        log.info("  Interval: %.1fs", self._cfg.block_interval)

        try:
            if self._cfg.watch_blocks:
                await self.subscription.subscribe_blocks(self._on_blocks)
            if self._cfg.watch_transactions:
                await self.subscription.subscribe_transactions(self._on_transactions)

            if self.subscription.receiver_count == 0:
                log.warning("Neither blocks nor transactions are watched, nothing to do")
                return

            head = self.subscription.latest_block
            if head is not None:
                log.info("Current head: ledger %d", head.sequence)

            await self._stop_event.wait()
        finally:
            await self.subscription.close()
            await self.ledger.close()
            log.info(
                "Daemon shut down cleanly (%d blocks, %d transactions, %d poll errors)",
                self.blocks_seen, self.transactions_seen, self.errors_seen,
            )

    async def stop(self) -> None:
        """Signal the daemon to stop gracefully."""
        log.info("Stop requested")
        self._stop_event.set()

    def _emit(self, line: str) -> None:
        if self._sink is not None:
            self._sink(line)

    def _on_blocks(self, blocks: list[Block]) -> None:
        for block in blocks:
            self.blocks_seen += 1
            log.info("New %s", format_block(block))
            self._emit(format_block(block))

    def _on_transactions(self, transactions: list[Transaction]) -> None:
        self.transactions_seen += len(transactions)
        for tx in transactions:
            log.debug("New %s", format_transaction(tx))
            self._emit(format_transaction(tx))

    def _on_error(self, error: LedgerUnavailableError) -> None:
        self.errors_seen += 1
        log.debug("Poll skipped: %s", error)


async def run_daemon(
    cfg: WatcherConfig,
    sink: Callable[[str], None] | None = None,
) -> None:
    """Entry point for running the daemon."""
    daemon = WatchDaemon(cfg, sink)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await daemon.start()

"""CLI entry point for ledgerwatch."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from ledgerwatch.config import load_config
from ledgerwatch.daemon import format_block, format_transaction, run_daemon
from ledgerwatch.interfaces.ledger import LedgerUnavailableError
from ledgerwatch.stellar.client import HorizonLedgerClient


def _load(ctx: click.Context):
    """Load config, exiting with a readable message if it is invalid."""
    try:
        cfg = load_config(ctx.obj["config_path"])
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    # -v wins over the configured level
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())
    return cfg


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """ledgerwatch - push notifications for new Stellar ledgers."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Watch ──────────────────────────────────────────────


@cli.command()
@click.option("--blocks/--no-blocks", default=None, help="Report new ledgers")
@click.option("--transactions/--no-transactions", default=None, help="Report their transactions")
@click.pass_context
def watch(ctx: click.Context, blocks: bool | None, transactions: bool | None) -> None:
    """Watch the ledger and print new blocks and transactions."""
    cfg = _load(ctx)
    if blocks is not None:
        cfg.watch_blocks = blocks
    if transactions is not None:
        cfg.watch_transactions = transactions

    if not (cfg.watch_blocks or cfg.watch_transactions):
        click.echo("Error: nothing to watch (both blocks and transactions disabled).", err=True)
        sys.exit(1)

    click.echo(f"Watching {cfg.network} via {cfg.horizon_url} (Ctrl+C to stop)")
    asyncio.run(run_daemon(cfg, sink=click.echo))


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.option("--transactions", "show_txs", is_flag=True, help="List the head's transactions")
@click.pass_context
def head(ctx: click.Context, show_txs: bool) -> None:
    """Show the current head ledger."""
    cfg = _load(ctx)

    async def _head():
        client = HorizonLedgerClient(
            cfg.horizon_url, cfg.block_interval, cfg.page_limit, cfg.include_failed,
        )
        try:
            return await client.get_latest_block()
        finally:
            await client.close()

    try:
        block = asyncio.run(_head())
    except LedgerUnavailableError as exc:
        click.echo(f"Error: ledger unavailable: {exc}", err=True)
        sys.exit(1)

    click.echo(format_block(block))
    if show_txs:
        for tx in block.transactions:
            click.echo(f"  {format_transaction(tx)}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show watcher configuration."""
    cfg = _load(ctx)
    click.echo(f"Network:       {cfg.network}")
    click.echo(f"Horizon URL:   {cfg.horizon_url}")
    click.echo(f"Interval:      {cfg.block_interval}s")
    click.echo(f"Blocks:        {'yes' if cfg.watch_blocks else 'no'}")
    click.echo(f"Transactions:  {'yes' if cfg.watch_transactions else 'no'}")
    click.echo(f"Failed txs:    {'included' if cfg.include_failed else 'skipped'}")
    click.echo(f"Page limit:    {cfg.page_limit}")
    click.echo(f"Log level:     {cfg.log_level}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

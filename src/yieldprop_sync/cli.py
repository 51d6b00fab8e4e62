"""CLI entry point for the yieldprop_sync daemon."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from eth_account import Account

from yieldprop_sync.abis import load_abis
from yieldprop_sync.config import load_config
from yieldprop_sync.daemon import run_daemon
from yieldprop_sync.evm.client import close_web3, make_web3
from yieldprop_sync.evm.explorer import address_url
from yieldprop_sync.evm.reader import Web3ContractReader
from yieldprop_sync.storage.sqlite import SQLiteStateStore
from yieldprop_sync.sync.roles import RoleGate


def _require_secret(cfg):
    """Exit with error if no private key is configured."""
    if not cfg.private_key:
        click.echo("Error: No private key configured.", err=True)
        click.echo("Set YIELDPROP_SYNC_SECRET env var or private_key in config.", err=True)
        sys.exit(1)


def _require_contracts(cfg):
    """Exit with error if any contract address is missing."""
    missing = cfg.contracts.missing()
    if missing:
        click.echo(f"Error: Missing contract addresses: {', '.join(missing)}", err=True)
        click.echo("Set them under [contracts] or point properties_path at a properties file.", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """yieldprop-sync - contract event sync and holder auto-registration."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Daemon ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the sync daemon."""
    cfg = load_config(ctx.obj["config_path"])
    _require_secret(cfg)
    _require_contracts(cfg)

    click.echo(f"Starting yieldprop_sync daemon (property: {cfg.property_id})")
    asyncio.run(run_daemon(cfg))


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show daemon configuration."""
    cfg = load_config(ctx.obj["config_path"])
    account = Account.from_key(cfg.private_key).address if cfg.private_key else None
    click.echo(f"Property:     {cfg.property_id}")
    click.echo(f"Network:      {cfg.network} (chain {cfg.chain_id})")
    click.echo(f"RPC URL:      {cfg.rpc_url}")
    click.echo(f"Account:      {account or '(not set)'}")
    click.echo(f"Token:        {cfg.contracts.PropertyToken or '(not set)'}")
    click.echo(f"PriceManager: {cfg.contracts.PriceManager or '(not set)'}")
    click.echo(f"Distributor:  {cfg.contracts.YieldDistributor or '(not set)'}")
    click.echo(f"Sale:         {cfg.contracts.PropertySale or '(not set)'}")
    click.echo(f"Watchdog:     {cfg.registration_timeout or 'disabled'}s")
    click.echo(f"DB path:      {cfg.db_path}")


@cli.command()
@click.option("--address", default=None, help="Address to check (defaults to the configured account)")
@click.pass_context
def role(ctx: click.Context, address: str | None) -> None:
    """Check whether an address holds the property manager role."""
    cfg = load_config(ctx.obj["config_path"])
    _require_contracts(cfg)
    if address is None:
        _require_secret(cfg)
        address = Account.from_key(cfg.private_key).address

    async def _role():
        w3 = make_web3(cfg.rpc_url)
        try:
            abis = load_abis(cfg.abi_dir)
            gate = RoleGate(Web3ContractReader(w3), cfg.contracts.YieldDistributor, abis["YieldDistributor"])
            role_id = await gate.manager_role()
            held = await gate.has_role(role_id, address)
            click.echo(f"Address:     {address}")
            click.echo(f"Explorer:    {address_url(cfg.explorer_url, address)}")
            click.echo(f"Role id:     {role_id.hex() if role_id else '(unresolved)'}")
            click.echo(f"Manager:     {'YES' if held else 'NO'}")
            if not held:
                click.echo("  Holders will not be auto-registered by this account.")
        finally:
            await close_web3(w3)

    asyncio.run(_role())


# ── History ────────────────────────────────────────────


@cli.command()
@click.option("-n", "--limit", type=int, default=20, help="Number of entries to show")
@click.pass_context
def activity(ctx: click.Context, limit: int) -> None:
    """Show recent notifications."""
    cfg = load_config(ctx.obj["config_path"])

    async def _activity():
        store = SQLiteStateStore(cfg.db_path)
        await store.initialize()
        try:
            entries = await store.get_recent_activity(limit)
            if not entries:
                click.echo("No activity recorded.")
                return
            for a in entries:
                link = f" {a.link}" if a.link else ""
                click.echo(f"  {a.created_at} [{a.level:7s}] {a.message}{link}")
        finally:
            await store.close()

    asyncio.run(_activity())


@cli.command()
@click.option("-n", "--limit", type=int, default=20, help="Number of entries to show")
@click.pass_context
def registrations(ctx: click.Context, limit: int) -> None:
    """Show settled holder registration attempts."""
    cfg = load_config(ctx.obj["config_path"])

    async def _registrations():
        store = SQLiteStateStore(cfg.db_path)
        await store.initialize()
        try:
            records = await store.get_registrations(limit)
            if not records:
                click.echo("No registrations recorded.")
                return
            for r in records:
                detail = f"tx={r.tx_hash[:18]}..." if r.tx_hash else f"error={r.error}"
                click.echo(f"  {r.settled_at} [{r.outcome:9s}] holder={r.holder} {detail}")
        finally:
            await store.close()

    asyncio.run(_registrations())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

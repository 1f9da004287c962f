#!/usr/bin/env python3
"""
ethgate_cli.py - Command line entry point.

Usage:
    python ethgate_cli.py --rpc-url http://localhost:8545 info
    python ethgate_cli.py balance 0x742d35Cc6634C0532925a3b844Bc454e4438f44e
    python ethgate_cli.py wait 0xabc... --timeout 120
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable

import click

from chains.client import ChainClient
from config import ClientConfig, load_client_config
from core.exceptions import EthGateError
from core.logging import get_logger, log_error, set_global_context, setup_logging

logger = get_logger("ethgate.cli")


def _build_client(config: ClientConfig) -> ChainClient:
    client = ChainClient(
        poll_interval_ms=config.poll_interval_ms,
        timeout_seconds=config.timeout_seconds,
    )
    if config.rpc_url:
        client.initialize(config.rpc_url)
    return client


def _run(config: ClientConfig, action: Callable[[ChainClient], Awaitable[Any]]) -> Any:
    """Run one async action against a fresh client, closing it afterwards."""

    async def runner() -> Any:
        client = _build_client(config)
        try:
            return await action(client)
        finally:
            await client.close()

    try:
        return asyncio.run(runner())
    except EthGateError as e:
        log_error(logger, e.code.value, e.message, details=e.details)
        click.echo(str(e), err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--rpc-url",
    "-u",
    default=None,
    help="JSON-RPC endpoint (overrides config and ETHGATE_RPC_URL)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to YAML config (default: config/ethgate.yaml)",
)
@click.option(
    "--log-level",
    "-l",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON log format",
)
@click.pass_context
def main(
    ctx: click.Context,
    rpc_url: str | None,
    config_path: Path | None,
    log_level: str,
    json_logs: bool,
) -> None:
    """ethgate - query an Ethereum node over JSON-RPC."""
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="ethgate", version="0.1.0")

    try:
        config = load_client_config(config_path)
    except EthGateError as e:
        raise click.UsageError(str(e)) from e
    if rpc_url:
        config.rpc_url = rpc_url

    ctx.obj = config


@main.command()
@click.pass_obj
def info(config: ClientConfig) -> None:
    """Show network, node and latest block."""

    async def action(client: ChainClient) -> dict:
        return {
            "network_id": await client.get_network(),
            "network_name": await client.get_network_name(),
            "node": await client.get_node(),
            "test_rpc_node": await client.is_test_rpc_node(),
            "latest_block": await client.get_latest_block_number(),
        }

    click.echo(json.dumps(_run(config, action), indent=2))


@main.command()
@click.argument("address")
@click.pass_obj
def balance(config: ClientConfig, address: str) -> None:
    """Print the balance of ADDRESS in wei."""
    click.echo(_run(config, lambda client: client.get_balance(address)))


@main.command()
@click.argument("address")
@click.pass_obj
def code(config: ClientConfig, address: str) -> None:
    """Report whether ADDRESS holds contract code."""

    async def action(client: ChainClient) -> bool:
        return await client.has_bytecode(address)

    click.echo("contract" if _run(config, action) else "no code")


@main.command()
@click.argument("tx_hash")
@click.option(
    "--timeout",
    "-t",
    default=None,
    type=int,
    help="Timeout in seconds (default: receipt_timeout_ms from config, 0 = forever)",
)
@click.pass_obj
def wait(config: ClientConfig, tx_hash: str, timeout: int | None) -> None:
    """Wait for TX_HASH to be mined and print its receipt."""
    timeout_ms = config.receipt_timeout_ms if timeout is None else timeout * 1000
    receipt = _run(config, lambda client: client.wait_for_receipt(tx_hash, timeout_ms))
    click.echo(json.dumps(receipt, indent=2))


if __name__ == "__main__":
    main()

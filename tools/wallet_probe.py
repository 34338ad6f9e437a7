#!/usr/bin/env python3
"""
Exercise a running Electrum-style wallet through the typed client.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from swaprpc.config import ConfigError, load_config
from swaprpc.core.amount import Amount
from swaprpc.logging import setup_logging
from swaprpc.rpc import Client, ClientError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Probe a swap wallet backend")
    parser.add_argument("--config", type=Path, help="Path to client config JSON")
    parser.add_argument("--rpc-host", help="Override RPC host")
    parser.add_argument("--rpc-port", type=int, help="Override RPC port")
    parser.add_argument("--rpc-user", help="Override RPC username")
    parser.add_argument("--rpc-password", help="Override RPC password")
    parser.add_argument("--network", help="mainnet, testnet or regtest")
    parser.add_argument("--amount", default="0.01", help="Amount for the unsigned payto probe")
    parser.add_argument("--log-level", default="info", help="Log level (debug, info, warning, error)")
    return parser.parse_args()


def build_overrides(args: argparse.Namespace) -> dict:
    overrides = {}
    for key, value in (
        ("host", args.rpc_host),
        ("port", args.rpc_port),
        ("username", args.rpc_user),
        ("password", args.rpc_password),
        ("network", args.network),
    ):
        if value is not None:
            overrides[key] = value
    return overrides


def main() -> None:
    args = parse_args()
    try:
        config = load_config(args.config, overrides=build_overrides(args))
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logger = setup_logging(level=getattr(logging, args.log_level.upper(), logging.INFO))
    with Client.from_config(config) as client:
        try:
            address = client.get_unused_address()
            logger.info("Unused address: %s", address)
            fee_rate = client.get_fee_rate()
            logger.info("Fee rate: %s sat/kB", int(fee_rate))
            tx, complete = client.pay_to(address, Amount.from_coins(args.amount), True)
            logger.info("Funded transaction %s (complete=%s)", tx.txid(), complete)
            for txin in tx.inputs:
                logger.info("  spends %s", txin.outpoint)
            for utxo in client.list_unspent():
                logger.info("Unspent output for %s: %s, outpoint %s", utxo.address, utxo.value.format(), utxo.outpoint)
        except ClientError as exc:
            logger.error("Wallet probe failed: %s", exc)
            raise SystemExit(1) from exc


if __name__ == "__main__":
    main()

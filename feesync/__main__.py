"""Command line entry point: inspect or reconcile a cart headlessly.

Usage:
    python -m feesync snapshot
    python -m feesync reconcile [--wants-fee | --clear]
"""
from __future__ import annotations

import argparse
import asyncio
import sys

from feesync.core.config import load_settings
from feesync.core.exceptions import ConfigurationException
from feesync.core.fee_math import format_money
from feesync.core.logging_config import setup_logging
from feesync.handler import FeeHandler
from feesync.interfaces.page import HeadlessPage


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="feesync", description="PayPal fee cart reconciliation")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("snapshot", help="Print the current cart snapshot")

    reconcile_parser = sub.add_parser("reconcile", help="Run one reconciliation pass")
    group = reconcile_parser.add_mutually_exclusive_group()
    group.add_argument("--wants-fee", action="store_true", help="Opt in before reconciling")
    group.add_argument("--clear", action="store_true", help="Clear the preference first")
    return parser


async def _snapshot(handler: FeeHandler) -> int:
    snapshot = await handler.read_snapshot()
    if snapshot is None:
        print("Cart store unavailable")
        return 1
    print(f"Subtotal (excluding fee): {format_money(snapshot.subtotal_excluding_fee)}")
    print(f"Items (excluding fee):    {snapshot.item_count_excluding_fee}")
    if snapshot.existing_fee:
        print(f"Fee line {snapshot.existing_fee.key}: {format_money(snapshot.existing_fee.quantity)}")
    else:
        print("Fee line: none")
    print(f"Expected fee:             {format_money(handler.calculate_fee(snapshot.subtotal_excluding_fee))}")
    return 0


async def _reconcile(handler: FeeHandler, args: argparse.Namespace) -> int:
    if args.wants_fee:
        handler.preferences.set_wants_fee()
    elif args.clear:
        handler.preferences.clear()
    outcome = await handler.runner.run()
    if not outcome.ok:
        print(f"Reconciliation failed: {outcome.error_key}")
        return 1
    print(f"Action: {outcome.action.kind} {outcome.action.amount if outcome.action.amount else ''}".strip())
    return 0


async def _main(args: argparse.Namespace) -> int:
    settings = load_settings()
    setup_logging(settings.log_level)
    handler = FeeHandler(settings, page=HeadlessPage())
    try:
        if args.command == "snapshot":
            return await _snapshot(handler)
        return await _reconcile(handler, args)
    finally:
        await handler.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(_main(args))
    except ConfigurationException as exc:
        print(f"Configuration error: {exc.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

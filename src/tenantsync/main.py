#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import sys
from signal import SIGINT, SIGTERM, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from tenantsync.app import build_sync_engine, run_once, serve
from tenantsync.common.logging import configure_logging
from tenantsync.config import ConfigurationError, get_sync_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from tenantsync.domain.model import PassResult

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Keep the local store in sync with the tenant and device registries"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single reconciliation pass and exit",
    )
    parser.add_argument(
        "--cron",
        type=str,
        help="Crontab expression for recurring passes (overrides SYNC_CRON_EXPRESSION)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: %(default)s)",
    )
    return parser.parse_args(list(argv))


def _print_summary(result: PassResult) -> None:
    if result.error is not None:
        print(f"Synchronization aborted: {result.error}", file=sys.stderr)
        return
    print(
        f"Synchronized {len(result.synced)}/{len(result.tenants)} tenants, "
        f"{result.devices_written} devices"
    )
    for tenant_id, message in result.failed.items():
        print(f"  {tenant_id}: {message}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=parsed_args.log_level)

    try:
        engine = build_sync_engine(sync=get_sync_config(cron_expression=parsed_args.cron))
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    try:
        if parsed_args.once:
            result = asyncio.run(run_once(engine))
            _print_summary(result)
            if result.error is not None:
                sys.exit(1)
        else:
            asyncio.run(serve(engine))
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def shutdown_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT/SIGTERM gracefully."""
    print("\nStopped by signal")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, shutdown_handler)
    signal(SIGTERM, shutdown_handler)
    main()


if __name__ == "__main__":
    run()

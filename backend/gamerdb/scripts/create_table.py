#!/usr/bin/env python3
"""
Provision the gamer table and wait until it is ACTIVE.

Region, table name and capacity come from settings (AWS_REGION,
DDB_TABLE_NAME, DDB_READ_CAPACITY, DDB_WRITE_CAPACITY). An existing table is
not an error.

Exit codes:
    0  table created and ACTIVE, or it already existed
    1  any other failure (including a timeout or interrupt while waiting)

Usage:
    python -m gamerdb.scripts.create_table [--table-name NAME] [--timeout S] [--no-wait]
"""

from __future__ import annotations

import argparse
import sys

from ..db.dynamodb.admin import TableManager
from ..db.dynamodb.errors import DdbError
from ..observability.logging import configure_logging, get_logger
from ..settings import Settings, get_settings
from ._common import build_table_manager, cancel_on_signals, positive_float

log = get_logger("create_table")


def _parse_args(argv: list[str] | None, settings: Settings) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create the gamer DynamoDB table.")
    p.add_argument("--table-name", default=settings.ddb_table_name)
    p.add_argument(
        "--timeout",
        type=float,
        default=settings.table_ready_timeout_seconds,
        help="Seconds to wait for the table to become ACTIVE.",
    )
    p.add_argument(
        "--poll-interval",
        type=positive_float,
        default=settings.table_poll_interval_seconds,
        help="Seconds between DescribeTable calls.",
    )
    p.add_argument("--no-wait", action="store_true", help="Return once CreateTable is accepted.")
    return p.parse_args(argv)


def main(
    argv: list[str] | None = None,
    *,
    settings: Settings | None = None,
    manager: TableManager | None = None,
) -> int:
    settings = settings or get_settings()
    configure_logging(level=settings.log_level)
    args = _parse_args(argv, settings)

    descriptor = settings.table_descriptor()
    if args.table_name != descriptor.name:
        descriptor = settings.model_copy(update={"ddb_table_name": args.table_name}).table_descriptor()

    manager = manager or build_table_manager(settings)

    log.info("table_create_starting", table=descriptor.name, region=settings.aws_region)
    try:
        created = manager.ensure_table(descriptor)
        if not created:
            return 0
        if args.no_wait:
            log.info("table_create_accepted", table=descriptor.name)
            return 0

        log.info("table_waiting", table=descriptor.name, timeout_s=args.timeout)
        with cancel_on_signals() as cancel:
            manager.await_ready(
                descriptor.name,
                poll_interval=args.poll_interval,
                timeout=args.timeout,
                cancel=cancel,
            )
    except DdbError as e:
        log.error(
            "table_create_failed",
            table=descriptor.name,
            operation=e.operation,
            kind=e.kind.value if e.kind else None,
            code=e.code,
            error=str(e),
        )
        return 1

    log.info("table_created", table=descriptor.name)
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Delete the gamer table.

A table that does not exist is reported as a failure: run this only against a
table you know is there.

Usage:
    python -m gamerdb.scripts.delete_table [--table-name NAME] [--wait] [--timeout S]
"""

from __future__ import annotations

import argparse
import sys

from ..db.dynamodb.admin import TableManager
from ..db.dynamodb.errors import DdbError
from ..observability.logging import configure_logging, get_logger
from ..settings import Settings, get_settings
from ._common import build_table_manager, cancel_on_signals

log = get_logger("delete_table")


def main(
    argv: list[str] | None = None,
    *,
    settings: Settings | None = None,
    manager: TableManager | None = None,
) -> int:
    settings = settings or get_settings()
    configure_logging(level=settings.log_level)

    p = argparse.ArgumentParser(description="Delete the gamer DynamoDB table.")
    p.add_argument("--table-name", default=settings.ddb_table_name)
    p.add_argument("--wait", action="store_true", help="Block until the table is gone.")
    p.add_argument("--timeout", type=float, default=settings.table_ready_timeout_seconds)
    args = p.parse_args(argv)

    manager = manager or build_table_manager(settings)
    table_name = args.table_name

    try:
        manager.delete_table(table_name)
        if args.wait:
            with cancel_on_signals() as cancel:
                manager.await_deleted(
                    table_name,
                    poll_interval=settings.table_poll_interval_seconds,
                    timeout=args.timeout,
                    cancel=cancel,
                )
    except DdbError as e:
        log.error(
            "table_delete_failed",
            table=table_name,
            operation=e.operation,
            kind=e.kind.value if e.kind else None,
            code=e.code,
            error=str(e),
        )
        return 1

    log.info("table_deleted", table=table_name, waited=bool(args.wait))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Table lifecycle: idempotent create, wait-for-ready, delete.

The manager observes the table state machine (CREATING -> ACTIVE,
ACTIVE -> DELETING -> gone) but never owns it; every transition is driven by
DynamoDB and read back through DescribeTable.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ...observability.logging import get_logger
from .classify import ddb_call
from .errors import (
    DdbAlreadyExists,
    DdbNotFound,
    DdbUnknown,
    TableWaitCancelled,
    TableWaitTimeout,
)

DEFAULT_POLL_INTERVAL_S = 5.0


class TableStatus(str, Enum):
    CREATING = "CREATING"
    ACTIVE = "ACTIVE"
    UPDATING = "UPDATING"
    DELETING = "DELETING"
    ARCHIVING = "ARCHIVING"
    INACCESSIBLE_ENCRYPTION_CREDENTIALS = "INACCESSIBLE_ENCRYPTION_CREDENTIALS"
    ARCHIVED = "ARCHIVED"
    ABSENT = "ABSENT"


@dataclass(frozen=True, slots=True)
class TableDescriptor:
    name: str
    partition_key: str
    partition_key_type: str = "S"
    sort_key: str | None = None
    sort_key_type: str = "S"
    read_capacity: int = 1
    write_capacity: int = 1

    def create_table_input(self) -> dict[str, Any]:
        attrs = [{"AttributeName": self.partition_key, "AttributeType": self.partition_key_type}]
        schema = [{"AttributeName": self.partition_key, "KeyType": "HASH"}]
        if self.sort_key:
            attrs.append({"AttributeName": self.sort_key, "AttributeType": self.sort_key_type})
            schema.append({"AttributeName": self.sort_key, "KeyType": "RANGE"})
        return {
            "TableName": self.name,
            "AttributeDefinitions": attrs,
            "KeySchema": schema,
            "ProvisionedThroughput": {
                "ReadCapacityUnits": int(self.read_capacity),
                "WriteCapacityUnits": int(self.write_capacity),
            },
        }


class TableManager:
    def __init__(
        self,
        *,
        client,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self._clock = clock
        self._log = get_logger("table_manager")

    def describe_status(self, table_name: str) -> TableStatus:
        """Current status, or ABSENT when DynamoDB reports the table missing."""
        try:
            resp = ddb_call(
                "DescribeTable",
                lambda: self._client.describe_table(TableName=table_name),
                table_name=table_name,
            )
        except DdbNotFound:
            return TableStatus.ABSENT
        raw = str(((resp or {}).get("Table") or {}).get("TableStatus") or "")
        try:
            return TableStatus(raw)
        except ValueError:
            raise DdbUnknown(
                message=f"Unexpected status for table {table_name}: {raw or '<missing>'}",
                operation="DescribeTable",
                table_name=table_name,
            ) from None

    def ensure_table(self, descriptor: TableDescriptor) -> bool:
        """Create the table unless it already exists.

        Returns True when a CreateTable request was accepted, False when the
        table was already there. Every other failure propagates.
        """
        try:
            ddb_call(
                "CreateTable",
                lambda: self._client.create_table(**descriptor.create_table_input()),
                table_name=descriptor.name,
            )
        except DdbAlreadyExists as e:
            self._log.info("table_already_exists", table=descriptor.name, detail=e.message)
            return False
        self._log.info(
            "table_create_requested",
            table=descriptor.name,
            read_capacity=descriptor.read_capacity,
            write_capacity=descriptor.write_capacity,
        )
        return True

    def await_ready(
        self,
        table_name: str,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_S,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        """Block until the table is ACTIVE.

        A failing DescribeTable (including NOT_FOUND) stops the wait and is
        raised as-is.
        """

        def _done() -> bool:
            resp = ddb_call(
                "DescribeTable",
                lambda: self._client.describe_table(TableName=table_name),
                table_name=table_name,
            )
            status = str(((resp or {}).get("Table") or {}).get("TableStatus") or "")
            self._log.info("table_status", table=table_name, status=status)
            return status == TableStatus.ACTIVE.value

        self._poll(
            _done,
            table_name=table_name,
            waiting_for="ACTIVE",
            poll_interval=poll_interval,
            timeout=timeout,
            cancel=cancel,
        )

    def delete_table(self, table_name: str) -> None:
        """Delete the table. A missing table is an error, not a no-op."""
        ddb_call(
            "DeleteTable",
            lambda: self._client.delete_table(TableName=table_name),
            table_name=table_name,
        )
        self._log.info("table_delete_requested", table=table_name)

    def await_deleted(
        self,
        table_name: str,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_S,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        def _done() -> bool:
            status = self.describe_status(table_name)
            self._log.info("table_status", table=table_name, status=status.value)
            return status is TableStatus.ABSENT

        self._poll(
            _done,
            table_name=table_name,
            waiting_for="ABSENT",
            poll_interval=poll_interval,
            timeout=timeout,
            cancel=cancel,
        )

    def _poll(
        self,
        done: Callable[[], bool],
        *,
        table_name: str,
        waiting_for: str,
        poll_interval: float,
        timeout: float | None,
        cancel: threading.Event | None,
    ) -> None:
        interval = max(0.0, float(poll_interval))
        deadline = None if timeout is None else self._clock() + max(0.0, float(timeout))
        # An Event we never set doubles as an interruptible sleep.
        waiter = cancel or threading.Event()

        while True:
            if waiter.is_set():
                raise TableWaitCancelled(
                    message=f"Stopped waiting for table {table_name} to become {waiting_for}",
                    operation="DescribeTable",
                    table_name=table_name,
                )
            if done():
                return

            pause = interval
            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    raise TableWaitTimeout(
                        message=f"Timed out waiting for table {table_name} to become {waiting_for}",
                        operation="DescribeTable",
                        table_name=table_name,
                    )
                pause = min(pause, remaining)

            waiter.wait(pause)

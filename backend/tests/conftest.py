from __future__ import annotations

import copy
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError

# Ensure `backend/` is on sys.path so `import gamerdb.*` works in tests.
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))


def make_client_error(code: str, message: str = "", operation: str = "Op", request_id: str = "req-1") -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": message},
            "ResponseMetadata": {"RequestId": request_id, "HTTPStatusCode": 400},
        },
        operation,
    )


class FakeTable:
    """In-memory stand-in for a boto3 `Table` resource keyed by (id, createdAt)."""

    def __init__(self, name: str = "gamerDetails"):
        self.name = name
        self.items: dict[tuple[str, Any], dict[str, Any]] = {}
        self.fail_with: dict[str, Exception] = {}
        self.calls: list[str] = []

    def _maybe_fail(self, op: str) -> None:
        self.calls.append(op)
        exc = self.fail_with.get(op)
        if exc is not None:
            raise exc

    def put_item(self, *, Item: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail("PutItem")
        stored = copy.deepcopy(Item)
        # The resource layer hands numbers back as Decimal.
        if isinstance(stored.get("createdAt"), int):
            stored["createdAt"] = Decimal(stored["createdAt"])
        self.items[(stored["id"], stored["createdAt"])] = stored
        return {}

    def get_item(self, *, Key: dict[str, Any], ConsistentRead: bool = False) -> dict[str, Any]:
        self._maybe_fail("GetItem")
        if set(Key) != {"id", "createdAt"}:
            raise make_client_error(
                "ValidationException",
                "The provided key element does not match the schema",
                "GetItem",
            )
        item = self.items.get((Key["id"], Decimal(Key["createdAt"])))
        return {"Item": copy.deepcopy(item)} if item else {}

    def query(self, *, KeyConditionExpression, ScanIndexForward: bool = True, ConsistentRead: bool = False, Limit: int = 100):
        self._maybe_fail("Query")
        expr = KeyConditionExpression.get_expression()
        key, value = expr["values"]
        assert key.name == "id"
        assert expr["operator"] == "="
        matches = sorted(
            (it for (pk, _), it in self.items.items() if pk == value),
            key=lambda it: it["createdAt"],
            reverse=not ScanIndexForward,
        )
        return {"Items": [copy.deepcopy(it) for it in matches[:Limit]], "Count": min(len(matches), Limit)}


class FakeDynamoClient:
    """Fake DynamoDB control plane.

    Each table walks a status schedule: every DescribeTable consumes one entry
    and the last one sticks. `None` in a schedule means the table is gone.
    """

    def __init__(self, *, creating_polls: int = 2, deleting_polls: int = 1):
        self.creating_polls = creating_polls
        self.deleting_polls = deleting_polls
        self.schedules: dict[str, list[str | None]] = {}
        self.create_calls: list[dict[str, Any]] = []
        self.describe_calls = 0
        self.fail_with: dict[str, Exception] = {}

    def _exists(self, name: str) -> bool:
        sched = self.schedules.get(name)
        return bool(sched) and sched[0] is not None

    def _not_found(self, name: str, op: str) -> ClientError:
        return make_client_error("ResourceNotFoundException", f"Requested resource not found: Table: {name} not found", op)

    def add_table(self, name: str, status: str = "ACTIVE") -> None:
        self.schedules[name] = [status]

    def create_table(self, **kwargs):
        if "CreateTable" in self.fail_with:
            raise self.fail_with["CreateTable"]
        name = kwargs["TableName"]
        if self._exists(name):
            raise make_client_error("ResourceInUseException", f"Table already exists: {name}", "CreateTable")
        self.create_calls.append(kwargs)
        self.schedules[name] = ["CREATING"] * self.creating_polls + ["ACTIVE"]
        return {"TableDescription": {"TableName": name, "TableStatus": "CREATING"}}

    def describe_table(self, *, TableName: str):
        self.describe_calls += 1
        if "DescribeTable" in self.fail_with:
            raise self.fail_with["DescribeTable"]
        if not self._exists(TableName):
            raise self._not_found(TableName, "DescribeTable")
        sched = self.schedules[TableName]
        status = sched.pop(0) if len(sched) > 1 else sched[0]
        if status is None:
            raise self._not_found(TableName, "DescribeTable")
        return {"Table": {"TableName": TableName, "TableStatus": status}}

    def delete_table(self, *, TableName: str):
        if "DeleteTable" in self.fail_with:
            raise self.fail_with["DeleteTable"]
        if not self._exists(TableName):
            raise self._not_found(TableName, "DeleteTable")
        self.schedules[TableName] = ["DELETING"] * self.deleting_polls + [None]
        return {"TableDescription": {"TableName": TableName, "TableStatus": "DELETING"}}


@pytest.fixture
def client_error():
    return make_client_error


@pytest.fixture
def fake_table() -> FakeTable:
    return FakeTable()


@pytest.fixture
def fake_client() -> FakeDynamoClient:
    return FakeDynamoClient()


@pytest.fixture
def settings(monkeypatch):
    from gamerdb.settings import Settings

    for var in ("ENVIRONMENT", "DDB_TABLE_NAME", "DDB_ENDPOINT_URL", "AWS_REGION"):
        monkeypatch.delenv(var, raising=False)
    return Settings(
        TABLE_POLL_INTERVAL_SECONDS=0.001,
        TABLE_READY_TIMEOUT_SECONDS=5,
    )


@pytest.fixture
def gamer_repo(fake_table):
    from gamerdb.db.dynamodb.table import DynamoTable
    from gamerdb.repositories.gamers_repo import GamerRepository

    return GamerRepository(table=DynamoTable(table=fake_table))

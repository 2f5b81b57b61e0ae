from __future__ import annotations

from typing import Any

from boto3.dynamodb.conditions import Key

from ...settings import Settings
from .classify import ddb_call
from .client import table_resource


class DynamoTable:
    """Thin wrapper over a boto3 Table resource.

    Every call goes through `ddb_call`, so callers only ever see `DdbError`.
    """

    def __init__(self, *, table):
        self._table = table
        self.table_name = str(table.name)

    # --- basic operations ---

    def get_item(self, *, key: dict[str, Any], consistent_read: bool = False) -> dict[str, Any] | None:
        def _op():
            resp = self._table.get_item(Key=key, ConsistentRead=bool(consistent_read))
            return resp.get("Item")

        return ddb_call("GetItem", _op, table_name=self.table_name, key=key)

    def put_item(self, *, item: dict[str, Any]) -> dict[str, Any]:
        # Unconditional write: last write wins.
        def _op():
            return self._table.put_item(Item=item)

        return ddb_call("PutItem", _op, table_name=self.table_name)

    # --- query ---

    def query_partition(
        self,
        *,
        partition_key: str,
        value: Any,
        limit: int = 1,
        scan_index_forward: bool = True,
        consistent_read: bool = False,
    ) -> list[dict[str, Any]]:
        lim = max(1, int(limit or 1))

        def _op():
            resp = self._table.query(
                KeyConditionExpression=Key(partition_key).eq(value),
                ScanIndexForward=bool(scan_index_forward),
                ConsistentRead=bool(consistent_read),
                Limit=lim,
            )
            return resp.get("Items") or []

        return ddb_call("Query", _op, table_name=self.table_name, key={partition_key: value})


def get_table(settings: Settings, table_name: str | None = None) -> DynamoTable:
    return DynamoTable(table=table_resource(settings, table_name))

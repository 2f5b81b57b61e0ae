from __future__ import annotations

import time
import uuid
from typing import Any, Callable

from ..db.dynamodb.errors import DdbInternal
from ..db.dynamodb.table import DynamoTable, get_table
from ..domain.gamer import GamerRecord, parse_gamer_input
from ..settings import Settings
from .base_repository import Repository

PARTITION_KEY = "id"
SORT_KEY = "createdAt"


def new_gamer_id() -> str:
    return str(uuid.uuid4())


def now_epoch_seconds() -> int:
    return int(time.time())


class GamerRepository(Repository[GamerRecord]):
    """Create/get gamer profiles in a table keyed by (id, createdAt)."""

    def __init__(
        self,
        *,
        table: DynamoTable,
        clock: Callable[[], int] = now_epoch_seconds,
        id_factory: Callable[[], str] = new_gamer_id,
    ):
        self._table = table
        self._clock = clock
        self._id_factory = id_factory

    @property
    def table_name(self) -> str:
        return self._table.table_name

    def create(self, payload: str | bytes | dict[str, Any] | None) -> GamerRecord:
        # Raises InvalidGamerInput before anything touches the network.
        data = parse_gamer_input(payload)
        record = GamerRecord(
            id=self._id_factory(),
            createdAt=int(self._clock()),
            name=data.name,
            phoneNumber=data.phone_number,
            attribute=data.attribute,
        )
        self._table.put_item(item=record.to_item())
        return record

    def get(self, id: str, created_at: int | None = None) -> GamerRecord | None:
        gamer_id = str(id or "").strip()
        if not gamer_id:
            return None

        if created_at is not None:
            key = {PARTITION_KEY: gamer_id, SORT_KEY: int(created_at)}
            item = self._table.get_item(key=key)
        else:
            # One record per id, so the partition holds a single sort-key value.
            items = self._table.query_partition(
                partition_key=PARTITION_KEY,
                value=gamer_id,
                limit=1,
                scan_index_forward=True,
            )
            key = {PARTITION_KEY: gamer_id}
            item = items[0] if items else None

        if not item:
            return None
        return self._decode(item, key=key)

    def _decode(self, item: dict[str, Any], *, key: dict[str, Any]) -> GamerRecord:
        try:
            return GamerRecord.from_item(item)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise DdbInternal(
                message="Stored gamer item could not be decoded",
                operation="Decode",
                table_name=self.table_name,
                key=key,
                cause=e,
            ) from e


def build_gamer_repository(settings: Settings) -> GamerRepository:
    return GamerRepository(table=get_table(settings))

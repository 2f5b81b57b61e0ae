from __future__ import annotations

import time
import uuid
from decimal import Decimal

import pytest

from gamerdb.db.dynamodb.errors import DdbInternal, DdbThrottled, DdbUnavailable
from gamerdb.db.dynamodb.table import DynamoTable
from gamerdb.domain.gamer import GamerRecord, InvalidGamerInput
from gamerdb.repositories.gamers_repo import GamerRepository


def test_create_then_get_round_trips(gamer_repo):
    created = gamer_repo.create('{"name": "Ada", "phoneNumber": "+1-555-0100", "attribute": "chess"}')

    fetched = gamer_repo.get(created.id)
    assert fetched == created
    assert fetched.name == "Ada"
    assert fetched.phone_number == "+1-555-0100"


def test_create_assigns_server_identity(gamer_repo):
    before = int(time.time())
    rec = gamer_repo.create({"name": "Ada", "attribute": "chess"})
    after = int(time.time())

    assert uuid.UUID(rec.id).version == 4
    assert before <= rec.created_at <= after
    assert rec.phone_number == ""


def test_create_ignores_client_supplied_identity(gamer_repo):
    rec = gamer_repo.create({"id": "mine", "createdAt": 1, "name": "Ada"})
    assert rec.id != "mine"
    assert rec.created_at != 1


def test_create_uses_injected_clock_and_ids(fake_table):
    repo = GamerRepository(
        table=DynamoTable(table=fake_table),
        clock=lambda: 1_700_000_000,
        id_factory=lambda: "gamer-1",
    )
    rec = repo.create("{}")

    assert rec == GamerRecord(id="gamer-1", createdAt=1_700_000_000)
    stored = fake_table.items[("gamer-1", Decimal(1_700_000_000))]
    assert stored == {
        "id": "gamer-1",
        "createdAt": Decimal(1_700_000_000),
        "name": "",
        "phoneNumber": "",
        "attribute": "",
    }


def test_null_fields_become_empty_strings(gamer_repo):
    rec = gamer_repo.create({"name": None, "attribute": "go"})
    assert rec.name == ""
    assert rec.attribute == "go"


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        "",
        None,
        "[]",
        '"just a string"',
        '{"name": 42}',
        '{"phoneNumber": {"n": 1}}',
    ],
)
def test_malformed_input_is_rejected_before_any_call(fake_table, gamer_repo, payload):
    with pytest.raises(InvalidGamerInput):
        gamer_repo.create(payload)
    assert fake_table.calls == []


def test_get_unknown_id_is_absent_not_error(gamer_repo, fake_table):
    assert gamer_repo.get("does-not-exist") is None
    assert fake_table.calls == ["Query"]


def test_get_blank_id_is_absent(gamer_repo, fake_table):
    assert gamer_repo.get("  ") is None
    assert fake_table.calls == []


def test_get_with_created_at_uses_full_key(gamer_repo, fake_table):
    rec = gamer_repo.create({"name": "Ada"})

    assert gamer_repo.get(rec.id, created_at=rec.created_at) == rec
    assert gamer_repo.get(rec.id, created_at=rec.created_at + 1) is None
    assert fake_table.calls[-2:] == ["GetItem", "GetItem"]


def test_get_surfaces_store_failures(gamer_repo, fake_table, client_error):
    fake_table.fail_with["Query"] = client_error("ProvisionedThroughputExceededException", "slow down", "Query")

    with pytest.raises(DdbThrottled) as ei:
        gamer_repo.get("abc")
    assert ei.value.operation == "Query"
    assert ei.value.table_name == "gamerDetails"


def test_create_surfaces_store_failures(gamer_repo, fake_table):
    fake_table.fail_with["PutItem"] = OSError("no such host")

    with pytest.raises(DdbUnavailable):
        gamer_repo.create({"name": "Ada"})


def test_malformed_stored_item_is_internal_error(gamer_repo, fake_table):
    fake_table.items[("broken", Decimal(1))] = {"id": "broken", "createdAt": "yesterday"}

    with pytest.raises(DdbInternal) as ei:
        gamer_repo.get("broken")
    assert ei.value.operation == "Decode"


@pytest.mark.parametrize("stored", [Decimal("1.7"), "1.5", Decimal("NaN")])
def test_fractional_stored_created_at_is_internal_error(gamer_repo, fake_table, stored):
    fake_table.items[("frac", Decimal(1))] = {"id": "frac", "createdAt": stored}

    with pytest.raises(DdbInternal) as ei:
        gamer_repo.get("frac")
    assert ei.value.operation == "Decode"


def test_integral_decimal_created_at_decodes():
    rec = GamerRecord.from_item({"id": "g", "createdAt": Decimal("1700000000.0")})
    assert rec.created_at == 1_700_000_000


def test_get_returns_earliest_record_for_partition(gamer_repo, fake_table):
    fake_table.items[("dup", Decimal(20))] = {"id": "dup", "createdAt": Decimal(20), "name": "later"}
    fake_table.items[("dup", Decimal(10))] = {"id": "dup", "createdAt": Decimal(10), "name": "first"}

    rec = gamer_repo.get("dup")
    assert rec is not None
    assert rec.name == "first"
    assert rec.created_at == 10

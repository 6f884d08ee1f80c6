"""Tests for split/member persistence and schema migration."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from receiptsplit.domain.item import Item, ItemAssignment, SplitMode
from receiptsplit.domain.member import MemberRegistry
from receiptsplit.domain.split import Split, SplitBook
from receiptsplit.runtime import get_paths
from receiptsplit.runtime.split_storage import (
    SPLITS_SCHEMA_VERSION,
    load_member_registry,
    load_split_book,
    migrate_splits_payload,
    save_member_registry,
    save_split_book,
    split_to_dict,
)


def _split() -> Split:
    item = Item(
        id="chips",
        name="Chips",
        price=Decimal("20.99"),
        quantity=3,
        has_tax=True,
        tax_amount=Decimal("2.2347"),
        discount=Decimal("4"),
        deposit=Decimal("0.2"),
        split_mode=SplitMode.QUANTITY,
        assignments=[ItemAssignment("alice", quantity=2), ItemAssignment("bob", ratio=Decimal("1.5"), quantity=1)],
    )
    return Split(
        id="s1",
        name="Alice & Bob's Split",
        items=[item],
        members=["alice", "bob"],
        payer="alice",
        region="on",
        total_tax_from_receipt=Decimal("2.23"),
        paid_members={"bob"},
    )


def test_save_and_load_round_trip() -> None:
    book = SplitBook()
    book.save(_split())
    path = save_split_book(book)

    assert path == get_paths().splits_file
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["version"] == SPLITS_SCHEMA_VERSION
    record = raw["splits"][0]["items"][0]
    assert record["splitMode"] == "quantity"
    assert record["taxAmount"] == "2.2347"
    assert record["assignments"][1] == {"memberId": "bob", "ratio": "1.5", "quantity": 1}

    loaded = load_split_book().find("s1")
    assert loaded is not None
    assert split_to_dict(loaded) == split_to_dict(book.find("s1"))
    assert loaded.items[0].price == Decimal("20.99")
    assert loaded.paid_members == {"bob"}


def test_missing_files_load_empty() -> None:
    assert len(load_split_book()) == 0
    assert len(load_member_registry()) == 0


def test_bare_list_is_migrated_to_current_version() -> None:
    legacy = [
        {
            "id": "old",
            "name": "Lunch",
            "items": [{"id": "i1", "name": "Soup", "price": 8, "quantity": 1, "hasTax": False}],
            "members": ["alice"],
            "payer": "alice",
            "status": "completed",
            "createdAt": "2024-03-01T12:00:00.000Z",
            "updatedAt": "2024-03-01T12:30:00.000Z",
        }
    ]

    migrated = migrate_splits_payload(legacy)
    assert migrated["version"] == SPLITS_SCHEMA_VERSION
    item = migrated["splits"][0]["items"][0]
    assert item["splitMode"] == "equal"
    assert item["assignments"] == []


def test_v1_items_keep_existing_modes(tmp_path: Path) -> None:
    payload = {
        "version": 1,
        "splits": [
            {
                "id": "v1",
                "items": [
                    {"id": "a", "name": "A", "price": "3", "splitMode": "ratio", "assignments": [{"memberId": "m", "ratio": 2}]},
                    {"id": "b", "name": "B", "price": "4"},
                ],
                "createdAt": "2024-05-02T09:00:00Z",
            }
        ],
    }
    path = tmp_path / "splits.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    split = load_split_book(path).find("v1")
    assert split is not None
    assert [item.split_mode for item in split.items] == [SplitMode.RATIO, SplitMode.EQUAL]
    assert split.items[0].assignments[0].ratio == Decimal("2")
    assert split.created_at.tzinfo is not None
    assert split.status == "draft"


def test_newer_schema_is_refused() -> None:
    with pytest.raises(ValueError, match="schema version 99"):
        migrate_splits_payload({"version": 99, "splits": []})


def test_corrupt_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "splits.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Corrupt"):
        load_split_book(path)


def test_bad_records_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "splits.json"
    payload = {
        "version": 2,
        "splits": [
            {"name": "no id", "items": []},
            {"id": "ok", "items": [{"id": "x", "name": "X", "price": "1", "splitMode": "equal", "assignments": []}]},
        ],
    }
    path.write_text(json.dumps(payload), encoding="utf-8")

    book = load_split_book(path)
    assert [split.id for split in book.splits] == ["ok"]


def test_unknown_split_mode_survives_loading(tmp_path: Path) -> None:
    path = tmp_path / "splits.json"
    payload = {
        "version": 2,
        "splits": [{"id": "s", "items": [{"id": "x", "name": "X", "price": "1", "splitMode": "weight", "assignments": []}]}],
    }
    path.write_text(json.dumps(payload), encoding="utf-8")

    item = load_split_book(path).find("s").items[0]
    assert item.split_mode == "weight"


def test_member_registry_round_trip() -> None:
    registry = MemberRegistry()
    alice = registry.add("Alice", is_frequent=True)
    registry.add("Bob")
    save_member_registry(registry)

    loaded = load_member_registry()
    assert [m.name for m in loaded.members] == ["Alice", "Bob"]
    assert loaded.get(alice.id).is_frequent
    assert loaded.get(alice.id).color == alice.color


def test_non_object_records_are_skipped(tmp_path: Path) -> None:
    splits_path = tmp_path / "splits.json"
    ok = {"id": "ok", "items": [{"id": "x", "name": "X", "price": "1"}, "junk"]}
    splits_path.write_text(json.dumps({"version": 1, "splits": ["junk", 42, ok]}), encoding="utf-8")
    assert [split.id for split in load_split_book(splits_path).splits] == []

    ok["items"] = [{"id": "x", "name": "X", "price": "1"}]
    splits_path.write_text(json.dumps(["junk", ok]), encoding="utf-8")
    assert [split.id for split in load_split_book(splits_path).splits] == ["ok"]

    members_path = tmp_path / "members.json"
    members_path.write_text(json.dumps({"version": 1, "members": ["junk", {"id": "m1", "name": "Alice"}]}), encoding="utf-8")
    assert [member.id for member in load_member_registry(members_path).members] == ["m1"]


def test_scalar_payload_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "splits.json"
    path.write_text('"nope"', encoding="utf-8")
    with pytest.raises(ValueError, match="JSON list or object"):
        load_split_book(path)

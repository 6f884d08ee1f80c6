"""JSON persistence for splits and members.

Files live under the data root:
    data/
    ├── splits.json   - {"version": 2, "splits": [...]}
    └── members.json  - {"version": 1, "members": [...]}

Keys are camelCase so records written by the web client load
unchanged. Older split files are upgraded step by step on load:
    v0  bare JSON list of splits
    v1  {"version": 1, "splits": [...]}, items may lack splitMode/assignments
    v2  every item carries splitMode and assignments
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from receiptsplit.domain.item import Item, ItemAssignment, SplitMode, parse_split_mode
from receiptsplit.domain.member import Member, MemberRegistry, color_for_index
from receiptsplit.domain.money import to_decimal
from receiptsplit.domain.split import UNTITLED_SPLIT, Split, SplitBook
from receiptsplit.runtime.logging import get_logger
from receiptsplit.runtime.paths import get_paths

logger = get_logger(__name__)

SPLITS_SCHEMA_VERSION = 2
MEMBERS_SCHEMA_VERSION = 1


# --- Value helpers ---


def _amount_out(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _amount_in(value: Any) -> Decimal | None:
    return None if value is None else to_decimal(value)


def _record_id(record: Any) -> Any:
    return record.get("id", "<no id>") if isinstance(record, dict) else "<no id>"


def _datetime_out(value: datetime) -> str:
    return value.isoformat()


def _datetime_in(value: Any) -> datetime:
    if not value:
        return datetime.now()
    # JavaScript Date JSON uses a trailing Z
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# --- Items ---


def item_to_dict(item: Item) -> dict[str, Any]:
    mode = item.split_mode.value if isinstance(item.split_mode, SplitMode) else item.split_mode
    return {
        "id": item.id,
        "name": item.name,
        "price": _amount_out(item.price),
        "quantity": item.quantity,
        "hasTax": item.has_tax,
        "taxAmount": _amount_out(item.tax_amount),
        "discount": _amount_out(item.discount),
        "deposit": _amount_out(item.deposit),
        "splitMode": mode,
        "assignments": [
            {
                "memberId": a.member_id,
                "ratio": _amount_out(a.ratio),
                "quantity": a.quantity,
            }
            for a in item.assignments
        ],
    }


def item_from_dict(data: dict[str, Any]) -> Item:
    """Rebuild an Item from a v2 record."""
    assignments = [
        ItemAssignment(
            member_id=str(a["memberId"]),
            ratio=_amount_in(a.get("ratio")),
            quantity=int(a["quantity"]) if a.get("quantity") is not None else None,
        )
        for a in data.get("assignments", [])
    ]
    quantity = data.get("quantity")
    split_mode = parse_split_mode(data.get("splitMode"))
    if not isinstance(split_mode, SplitMode):
        logger.warning("Item %s has unknown split mode %r; its shares will be zero", data.get("id"), split_mode)
    return Item(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        price=to_decimal(data.get("price")),
        quantity=int(quantity) if quantity is not None else None,
        has_tax=bool(data.get("hasTax", False)),
        tax_amount=_amount_in(data.get("taxAmount")),
        discount=_amount_in(data.get("discount")),
        deposit=_amount_in(data.get("deposit")),
        split_mode=split_mode,
        assignments=assignments,
    )


# --- Splits ---


def split_to_dict(split: Split) -> dict[str, Any]:
    return {
        "id": split.id,
        "name": split.name,
        "items": [item_to_dict(item) for item in split.items],
        "members": list(split.members),
        "payer": split.payer,
        "status": split.status,
        "createdAt": _datetime_out(split.created_at),
        "updatedAt": _datetime_out(split.updated_at),
        "region": split.region,
        "totalTaxFromReceipt": _amount_out(split.total_tax_from_receipt),
        "paidMembers": sorted(split.paid_members),
    }


def split_from_dict(data: dict[str, Any]) -> Split:
    return Split(
        id=str(data["id"]),
        name=str(data.get("name") or UNTITLED_SPLIT),
        items=[item_from_dict(item) for item in data.get("items", [])],
        members=[str(m) for m in data.get("members", [])],
        payer=str(data.get("payer") or ""),
        status=data.get("status", "draft"),
        created_at=_datetime_in(data.get("createdAt")),
        updated_at=_datetime_in(data.get("updatedAt")),
        region=data.get("region"),
        total_tax_from_receipt=_amount_in(data.get("totalTaxFromReceipt")),
        paid_members=set(data.get("paidMembers", [])),
    )


# --- Schema migration ---


def _migrate_v0_to_v1(data: Any) -> dict[str, Any]:
    return {"version": 1, "splits": list(data)}


def _migrate_v1_to_v2(data: dict[str, Any]) -> dict[str, Any]:
    splits = []
    for split in data.get("splits", []):
        if not isinstance(split, dict):
            # left for splits_from_payload to report and skip
            splits.append(split)
            continue
        items = [
            {
                **item,
                "splitMode": item.get("splitMode") or SplitMode.EQUAL.value,
                "assignments": item.get("assignments") or [],
            }
            if isinstance(item, dict)
            else item
            for item in split.get("items", [])
        ]
        splits.append({**split, "items": items})
    return {**data, "version": 2, "splits": splits}


_SPLIT_MIGRATIONS: dict[int, Callable[[Any], dict[str, Any]]] = {
    0: _migrate_v0_to_v1,
    1: _migrate_v1_to_v2,
}


def migrate_splits_payload(data: Any) -> dict[str, Any]:
    """Upgrade a decoded splits file to the current schema version.

    Raises:
        ValueError: If the payload is from a newer, unknown version.
    """
    if not isinstance(data, (list, dict)):
        raise ValueError(f"Splits file must hold a JSON list or object, got {type(data).__name__}")
    version = 0 if isinstance(data, list) else int(data.get("version", 1))
    if version > SPLITS_SCHEMA_VERSION:
        raise ValueError(
            f"Splits file has schema version {version}; this build supports up to {SPLITS_SCHEMA_VERSION}"
        )

    while version < SPLITS_SCHEMA_VERSION:
        logger.info("Migrating splits data from schema v%d to v%d", version, version + 1)
        data = _SPLIT_MIGRATIONS[version](data)
        version = data["version"]
    return data


def splits_from_payload(data: Any) -> list[Split]:
    """Migrate then decode splits, skipping records that fail to parse."""
    payload = migrate_splits_payload(data)
    splits: list[Split] = []
    for record in payload.get("splits", []):
        try:
            splits.append(split_from_dict(record))
        except (KeyError, TypeError, ValueError, ArithmeticError, AttributeError) as e:
            logger.warning("Failed to load split %s: %s", _record_id(record), e)
    return splits


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Corrupt data file {path}: {exc}") from exc


def load_split_book(path: Path | None = None) -> SplitBook:
    """Load all splits; a missing file is an empty book."""
    path = path or get_paths().splits_file
    if not path.exists():
        return SplitBook()
    book = SplitBook(splits_from_payload(_read_json(path)))
    logger.debug("Loaded %d splits from %s", len(book), path)
    return book


def save_split_book(book: SplitBook, path: Path | None = None) -> Path:
    path = path or get_paths().splits_file
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "version": SPLITS_SCHEMA_VERSION,
        "splits": [split_to_dict(split) for split in book.splits],
    }
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved %d splits to %s", len(book), path)
    return path


# --- Members ---


def member_to_dict(member: Member) -> dict[str, Any]:
    return {
        "id": member.id,
        "name": member.name,
        "color": member.color,
        "isFrequent": member.is_frequent,
        "avatar": member.avatar,
        "createdAt": _datetime_out(member.created_at),
    }


def member_from_dict(data: dict[str, Any], index: int = 0) -> Member:
    return Member(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        color=str(data.get("color") or color_for_index(index)),
        is_frequent=bool(data.get("isFrequent", False)),
        avatar=data.get("avatar"),
        created_at=_datetime_in(data.get("createdAt")),
    )


def load_member_registry(path: Path | None = None) -> MemberRegistry:
    """Load members; a missing file is an empty registry."""
    path = path or get_paths().members_file
    if not path.exists():
        return MemberRegistry()

    data = _read_json(path)
    if not isinstance(data, (list, dict)):
        raise ValueError(f"Members file must hold a JSON list or object, got {type(data).__name__}")
    records = data if isinstance(data, list) else data.get("members", [])
    members: list[Member] = []
    for index, record in enumerate(records):
        try:
            members.append(member_from_dict(record, index))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Failed to load member %s: %s", _record_id(record), e)
    return MemberRegistry(members)


def save_member_registry(registry: MemberRegistry, path: Path | None = None) -> Path:
    path = path or get_paths().members_file
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "version": MEMBERS_SCHEMA_VERSION,
        "members": [member_to_dict(member) for member in registry.members],
    }
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved %d members to %s", len(registry), path)
    return path

"""Receipt import workflow: raw item JSON -> new draft split."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Literal

from receiptsplit.domain.member import MemberRegistry
from receiptsplit.domain.money import to_decimal
from receiptsplit.domain.split import Split, generate_split_name
from receiptsplit.receipt.converter import ReceiptSummary, convert_raw_items, parse_raw_items, summarize_raw_items
from receiptsplit.runtime import get_logger, load_settings
from receiptsplit.runtime.split_storage import (
    load_member_registry,
    load_split_book,
    save_member_registry,
    save_split_book,
)

logger = get_logger(__name__)

ImportStatus = Literal["file_not_found", "invalid_items", "imported"]


@dataclass(frozen=True)
class ImportReceiptRequest:
    """Inputs for importing one receipt's items."""

    items_path: Path
    member_names: list[str] = field(default_factory=list)
    name: str | None = None
    payer_name: str | None = None
    tax_rate: Decimal | None = None  # overrides the configured estimate rate
    splits_path: Path | None = None
    members_path: Path | None = None


@dataclass(frozen=True)
class ImportReceiptResult:
    """Outcome of a receipt import."""

    status: ImportStatus
    split: Split | None = None
    summary: ReceiptSummary | None = None
    error: str | None = None


def parse_receipt_tax(payload: Any) -> Decimal | None:
    """Receipt-level tax printed on the receipt, when the source reports one."""
    if not isinstance(payload, dict):
        return None
    value = payload.get("totalTax", payload.get("tax"))
    return None if value is None else to_decimal(value)


def resolve_member_ids(registry: MemberRegistry, names: list[str]) -> list[str]:
    """Map display names to member ids, registering unknown names."""
    member_ids: list[str] = []
    for name in names:
        member = registry.find_by_name(name)
        if member is None:
            member = registry.add(name)
            logger.info("Registered new member %s", name)
        if member.id not in member_ids:
            member_ids.append(member.id)
    return member_ids


def run_import_receipt(request: ImportReceiptRequest) -> ImportReceiptResult:
    """Convert raw items into a new draft split and save it."""
    if not request.items_path.exists():
        return ImportReceiptResult(status="file_not_found", error=f"Items file not found: {request.items_path}")

    try:
        payload = json.loads(request.items_path.read_text(encoding="utf-8"))
        raw_items = parse_raw_items(payload)
        receipt_tax = parse_receipt_tax(payload)
    except (json.JSONDecodeError, ValueError, TypeError) as e:
        return ImportReceiptResult(status="invalid_items", error=f"Invalid items in {request.items_path}: {e}")

    settings = load_settings()
    tax_rate = request.tax_rate if request.tax_rate is not None else settings.default_tax_rate

    registry = load_member_registry(request.members_path)
    member_ids = resolve_member_ids(registry, request.member_names)

    book = load_split_book(request.splits_path)
    name = request.name or generate_split_name([registry.display_name(m) for m in member_ids])
    split = book.create(items=convert_raw_items(raw_items, default_tax_rate=tax_rate), members=member_ids, name=name)
    split.region = settings.region.id if settings.region else None
    if request.payer_name:
        split.payer = resolve_member_ids(registry, [request.payer_name])[0]
        split.add_member(split.payer)

    split.total_tax_from_receipt = receipt_tax
    summary = summarize_raw_items(raw_items, default_tax_rate=tax_rate)

    book.save(split)
    save_split_book(book, request.splits_path)
    save_member_registry(registry, request.members_path)
    logger.info("Imported %d items into split %s", len(split.items), split.id)

    return ImportReceiptResult(status="imported", split=split, summary=summary)

"""Assignment edit workflows for stored splits."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Literal

from receiptsplit.domain.allocation import split_evenly
from receiptsplit.domain.item import (
    Item,
    SplitMode,
    assign_member,
    set_split_mode,
    toggle_assignment,
    unassign_member,
    update_assignment,
)
from receiptsplit.domain.member import MemberRegistry
from receiptsplit.domain.split import Split
from receiptsplit.runtime import get_logger
from receiptsplit.runtime.split_storage import load_member_registry, load_split_book, save_split_book

logger = get_logger(__name__)

EditAction = Literal[
    "assign",
    "unassign",
    "toggle",
    "weights",
    "mode",
    "split_evenly",
    "paid",
    "unpaid",
    "delete_item",
    "delete_split",
]

EditStatus = Literal[
    "split_not_found",
    "item_not_found",
    "member_not_found",
    "unchanged",
    "updated",
    "deleted",
]

_ITEM_ACTIONS = {"assign", "unassign", "toggle", "weights", "mode", "delete_item"}
_MEMBER_ACTIONS = {"assign", "unassign", "toggle", "weights", "paid", "unpaid"}


@dataclass(frozen=True)
class EditSplitRequest:
    """One edit to one split."""

    split_id: str
    action: EditAction
    item_id: str | None = None
    member: str | None = None  # display name or member id
    ratio: Decimal | None = None
    quantity: int | None = None
    mode: SplitMode | None = None
    splits_path: Path | None = None
    members_path: Path | None = None


@dataclass(frozen=True)
class EditSplitResult:
    """Outcome of one edit."""

    status: EditStatus
    split: Split | None = None
    error: str | None = None


def _resolve_member(registry: MemberRegistry, split: Split, member: str) -> str | None:
    """Find a member id by id, then by name; split members may be unregistered ids."""
    if member in split.members or registry.get(member) is not None:
        return member
    found = registry.find_by_name(member)
    return found.id if found is not None else None


def _find_item(split: Split, item_id: str) -> Item | None:
    """Resolve an item by id or unique id prefix."""
    item = split.get_item(item_id)
    if item is not None:
        return item
    matches = [candidate for candidate in split.items if candidate.id.startswith(item_id)]
    return matches[0] if len(matches) == 1 else None


def run_edit_split(request: EditSplitRequest) -> EditSplitResult:
    """Apply one edit and save the split when something changed."""
    book = load_split_book(request.splits_path)
    split = book.find_by_prefix(request.split_id)
    if split is None:
        return EditSplitResult(status="split_not_found", error=f"Split not found: {request.split_id}")

    if request.action == "delete_split":
        book.delete(split.id)
        save_split_book(book, request.splits_path)
        logger.info("Deleted split %s", split.id)
        return EditSplitResult(status="deleted", split=split)

    if request.action == "split_evenly":
        split_evenly(split.items, split.members)
        book.save(split)
        save_split_book(book, request.splits_path)
        return EditSplitResult(status="updated", split=split)

    item = None
    if request.action in _ITEM_ACTIONS:
        item = _find_item(split, request.item_id or "")
        if item is None:
            return EditSplitResult(status="item_not_found", split=split, error=f"Item not found: {request.item_id}")

    member_id = None
    if request.action in _MEMBER_ACTIONS:
        registry = load_member_registry(request.members_path)
        member_id = _resolve_member(registry, split, request.member or "")
        if member_id is None:
            return EditSplitResult(
                status="member_not_found", split=split, error=f"Member not found: {request.member}"
            )

    changed = False
    if request.action == "assign":
        assert item is not None and member_id is not None
        changed = assign_member(item, member_id, ratio=request.ratio, quantity=request.quantity)
        changed = split.add_member(member_id) or changed
    elif request.action == "unassign":
        assert item is not None and member_id is not None
        changed = unassign_member(item, member_id)
    elif request.action == "toggle":
        assert item is not None and member_id is not None
        toggle_assignment(item, member_id)
        split.add_member(member_id)
        changed = True
    elif request.action == "weights":
        assert item is not None and member_id is not None
        changed = update_assignment(item, member_id, ratio=request.ratio, quantity=request.quantity)
    elif request.action == "mode":
        assert item is not None
        if request.mode is None:
            return EditSplitResult(status="unchanged", split=split, error="No split mode given")
        changed = set_split_mode(item, request.mode)
    elif request.action == "delete_item":
        assert item is not None
        changed = split.delete_item(item.id)
    elif request.action in ("paid", "unpaid"):
        assert member_id is not None
        was_paid = member_id in split.paid_members
        split.set_paid(member_id, request.action == "paid")
        changed = was_paid != (member_id in split.paid_members)

    if not changed:
        return EditSplitResult(status="unchanged", split=split)

    book.save(split)
    save_split_book(book, request.splits_path)
    logger.debug("Applied %s to split %s", request.action, split.id)
    return EditSplitResult(status="updated", split=split)

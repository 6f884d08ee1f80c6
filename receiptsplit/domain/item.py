"""Receipt line items, member assignments and per-item share math.

Every calculation here works on the item's effective price
(``price - discount + deposit``), never the raw price. All share and tax
helpers fail closed: a missing assignment, an empty weight sum or a
non-positive effective price yields ``Decimal("0")`` instead of raising.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from receiptsplit.domain.money import ZERO


class SplitMode(str, Enum):
    """How an item's effective price is divided between its assignees."""

    EQUAL = "equal"
    RATIO = "ratio"
    QUANTITY = "quantity"


def parse_split_mode(value: str | SplitMode | None) -> SplitMode | str:
    """Map a stored mode string to SplitMode.

    Unknown strings are returned unchanged so shares for them fail closed
    to zero rather than being silently re-interpreted as ``equal``.
    """
    if value is None or value == "":
        return SplitMode.EQUAL
    if isinstance(value, SplitMode):
        return value
    try:
        return SplitMode(str(value).lower())
    except ValueError:
        return str(value)


@dataclass
class ItemAssignment:
    """A member's claim on one item."""

    member_id: str
    ratio: Decimal | None = None  # relative weight, ratio mode only
    quantity: int | None = None  # units claimed, quantity mode only


@dataclass
class Item:
    """A single receipt line."""

    name: str
    price: Decimal
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    quantity: int | None = 1
    has_tax: bool = False
    tax_amount: Decimal | None = None
    discount: Decimal | None = None
    deposit: Decimal | None = None
    split_mode: SplitMode | str = SplitMode.EQUAL
    assignments: list[ItemAssignment] = field(default_factory=list)

    @property
    def effective_price(self) -> Decimal:
        return effective_price(self)

    @property
    def member_ids(self) -> list[str]:
        return [a.member_id for a in self.assignments]

    def find_assignment(self, member_id: str) -> ItemAssignment | None:
        for assignment in self.assignments:
            if assignment.member_id == member_id:
                return assignment
        return None

    def is_assigned(self) -> bool:
        return bool(self.assignments)


def effective_price(item: Item) -> Decimal:
    """Return ``price - discount + deposit``."""
    return item.price - (item.discount or ZERO) + (item.deposit or ZERO)


def member_share(item: Item, member_id: str) -> Decimal:
    """Return one member's monetary share of one item."""
    if not item.assignments:
        return ZERO

    assignment = item.find_assignment(member_id)
    if assignment is None:
        return ZERO

    actual_price = effective_price(item)
    if actual_price <= 0:
        return ZERO

    if item.split_mode == SplitMode.EQUAL:
        return actual_price / len(item.assignments)

    if item.split_mode == SplitMode.RATIO:
        if not assignment.ratio:
            return ZERO
        total_ratio = sum((a.ratio or ZERO for a in item.assignments), ZERO)
        if total_ratio <= 0:
            return ZERO
        return actual_price * assignment.ratio / total_ratio

    if item.split_mode == SplitMode.QUANTITY:
        # Item quantity is only an existence guard; the denominator is what
        # the assignees claimed.
        if not assignment.quantity or not item.quantity:
            return ZERO
        total_quantity = sum(a.quantity or 0 for a in item.assignments)
        if total_quantity <= 0:
            return ZERO
        return actual_price * assignment.quantity / total_quantity

    return ZERO


def item_tax_share(item: Item, member_id: str) -> Decimal:
    """Return the member's slice of this item's attached tax amount."""
    if not item.has_tax or not item.tax_amount or not item.assignments:
        return ZERO
    if item.find_assignment(member_id) is None:
        return ZERO

    actual_price = effective_price(item)
    if actual_price == 0:
        return ZERO
    return member_share(item, member_id) / actual_price * item.tax_amount


def member_tax_share(items: Iterable[Item], member_id: str) -> Decimal:
    """Sum a member's apportioned tax across items.

    This distributes each item's authoritative ``tax_amount`` in proportion
    to the member's claim on the item; it does not apply a rate.
    """
    return sum((item_tax_share(item, member_id) for item in items), ZERO)


# --- Assignment edits ---


def assign_member(
    item: Item,
    member_id: str,
    ratio: Decimal | None = None,
    quantity: int | None = None,
) -> bool:
    """Add a member to the item. Returns False if already assigned."""
    if item.find_assignment(member_id) is not None:
        return False
    item.assignments.append(ItemAssignment(member_id=member_id, ratio=ratio, quantity=quantity))
    return True


def unassign_member(item: Item, member_id: str) -> bool:
    """Remove a member from the item. Returns False if not assigned."""
    remaining = [a for a in item.assignments if a.member_id != member_id]
    if len(remaining) == len(item.assignments):
        return False
    item.assignments = remaining
    return True


def toggle_assignment(item: Item, member_id: str) -> bool:
    """Flip a member's assignment. Returns True if the member is now assigned."""
    if item.find_assignment(member_id) is not None:
        unassign_member(item, member_id)
        return False
    assign_member(item, member_id)
    return True


def update_assignment(
    item: Item,
    member_id: str,
    ratio: Decimal | None = None,
    quantity: int | None = None,
) -> bool:
    """Set weights on an existing assignment; unknown members are ignored."""
    assignment = item.find_assignment(member_id)
    if assignment is None:
        return False
    if ratio is not None:
        assignment.ratio = ratio
    if quantity is not None:
        assignment.quantity = quantity
    return True


def set_split_mode(item: Item, mode: SplitMode) -> bool:
    """Switch the split mode, keeping members and reseeding their weights.

    Ratio mode gives each assignee weight 1 and quantity mode one unit, so
    a freshly switched item still splits evenly until weights are edited.
    Equal mode drops both weights.
    """
    if item.split_mode == mode:
        return False

    item.split_mode = mode
    for assignment in item.assignments:
        assignment.ratio = Decimal(1) if mode == SplitMode.RATIO else None
        assignment.quantity = 1 if mode == SplitMode.QUANTITY else None
    return True


def clear_assignments(item: Item) -> None:
    item.assignments = []


def claimed_quantity(item: Item) -> int:
    """Total units claimed across assignments."""
    return sum(a.quantity or 0 for a in item.assignments)


def is_overclaimed(item: Item) -> bool:
    """True when quantity-mode claims exceed the item's declared quantity."""
    if item.split_mode != SplitMode.QUANTITY or not item.quantity:
        return False
    return claimed_quantity(item) > item.quantity

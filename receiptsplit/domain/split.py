"""Split records and the explicit collection that owns them.

A Split is one receipt being divided among a group. SplitBook holds the
known splits, most recent first; loading and saving it is the storage
layer's job.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from receiptsplit.domain.item import Item
from receiptsplit.domain.money import ZERO

SplitStatus = Literal["draft", "completed", "paid"]

UNTITLED_SPLIT = "Untitled Split"


def generate_split_name(member_names: Sequence[str]) -> str:
    """Build a friendly split name from the members' display names.

    Examples:
        []                         -> "Untitled Split"
        ["Alice"]                  -> "Alice's Split"
        ["Alice", "Bob"]           -> "Alice & Bob's Split"
        ["Alice", "Bob", "Carol"]  -> "Alice, Bob & Carol's Split"
        four or more               -> "Alice, Bob & 2 others' Split"
    """
    names = [name for name in member_names if name]
    if not names:
        return UNTITLED_SPLIT
    if len(names) == 1:
        return f"{names[0]}'s Split"
    if len(names) == 2:
        return f"{names[0]} & {names[1]}'s Split"
    if len(names) == 3:
        return f"{names[0]}, {names[1]} & {names[2]}'s Split"

    remaining = len(names) - 2
    plural = "s" if remaining > 1 else ""
    return f"{names[0]}, {names[1]} & {remaining} other{plural}' Split"


@dataclass
class Split:
    """One receipt shared by a group."""

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    name: str = UNTITLED_SPLIT
    items: list[Item] = field(default_factory=list)
    members: list[str] = field(default_factory=list)
    payer: str = ""
    status: SplitStatus = "draft"
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    region: str | None = None
    total_tax_from_receipt: Decimal | None = None
    paid_members: set[str] = field(default_factory=set)

    @property
    def subtotal(self) -> Decimal:
        """Sum of effective prices across all items."""
        return sum((item.effective_price for item in self.items), ZERO)

    @property
    def total(self) -> Decimal:
        """Subtotal plus the receipt's tax, or the items' attached tax if unknown."""
        if self.total_tax_from_receipt is not None:
            return self.subtotal + self.total_tax_from_receipt
        item_tax = sum((item.tax_amount or ZERO for item in self.items if item.has_tax), ZERO)
        return self.subtotal + item_tax

    def touch(self) -> None:
        self.updated_at = datetime.now()

    def get_item(self, item_id: str) -> Item | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def add_item(self, name: str = "", price: Decimal = ZERO) -> Item:
        """Insert a blank manual-entry item at the top."""
        item = Item(name=name, price=price)
        self.items.insert(0, item)
        return item

    def delete_item(self, item_id: str) -> bool:
        remaining = [item for item in self.items if item.id != item_id]
        deleted = len(remaining) != len(self.items)
        self.items = remaining
        return deleted

    def update_item(self, updated: Item) -> bool:
        for index, item in enumerate(self.items):
            if item.id == updated.id:
                self.items[index] = updated
                return True
        return False

    def add_member(self, member_id: str) -> bool:
        if member_id in self.members:
            return False
        self.members.append(member_id)
        return True

    def set_paid(self, member_id: str, is_paid: bool = True) -> None:
        if is_paid:
            self.paid_members.add(member_id)
        else:
            self.paid_members.discard(member_id)


@dataclass(frozen=True)
class MonthlyStats:
    count: int
    total: Decimal
    items: int


class SplitBook:
    """All known splits, most recently saved first."""

    def __init__(self, splits: list[Split] | None = None) -> None:
        self.splits: list[Split] = list(splits or [])

    def __len__(self) -> int:
        return len(self.splits)

    def create(
        self,
        items: list[Item] | None = None,
        members: list[str] | None = None,
        name: str = UNTITLED_SPLIT,
    ) -> Split:
        """Build a new draft split. It is not stored until save() is called."""
        return Split(name=name, items=list(items or []), members=list(members or []))

    def find(self, split_id: str) -> Split | None:
        for split in self.splits:
            if split.id == split_id:
                return split
        return None

    def find_by_prefix(self, prefix: str) -> Split | None:
        """Resolve a unique id prefix, as typed on the command line."""
        exact = self.find(prefix)
        if exact is not None:
            return exact
        matches = [split for split in self.splits if split.id.startswith(prefix)]
        return matches[0] if len(matches) == 1 else None

    def save(self, split: Split) -> None:
        """Insert or replace the split. New splits go to the front."""
        split.touch()
        for index, existing in enumerate(self.splits):
            if existing.id == split.id:
                self.splits[index] = split
                return
        self.splits.insert(0, split)

    def delete(self, split_id: str) -> bool:
        remaining = [split for split in self.splits if split.id != split_id]
        deleted = len(remaining) != len(self.splits)
        self.splits = remaining
        return deleted

    def recent(self, limit: int = 10) -> list[Split]:
        return self.splits[:limit]

    def monthly_stats(self, today: date | None = None) -> MonthlyStats:
        """Count, total and item count of splits created this month."""
        today = today or date.today()
        this_month = [
            split
            for split in self.splits
            if split.created_at.year == today.year and split.created_at.month == today.month
        ]
        return MonthlyStats(
            count=len(this_month),
            total=sum((split.total for split in this_month), ZERO),
            items=sum(len(split.items) for split in this_month),
        )

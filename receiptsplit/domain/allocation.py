"""Per-member allocation of receipt items.

Totals are a pure projection over the current items: every call
recomputes from scratch and nothing here is cached or persisted.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from receiptsplit.domain.item import (
    Item,
    ItemAssignment,
    SplitMode,
    effective_price,
    item_tax_share,
    member_share,
)
from receiptsplit.domain.money import ZERO, calculate_percentage


class TaxPolicy(str, Enum):
    """Where member tax comes from. Exactly one policy applies per computation."""

    ITEM = "item"  # apportion each item's attached tax_amount
    FLAT = "flat"  # flat percentage of the member's subtotal


@dataclass(frozen=True)
class MemberItem:
    """An item as seen by one member: their share stands in for the line total."""

    item: Item
    share: Decimal
    tax: Decimal = ZERO


@dataclass
class MemberTotal:
    """What one member owes."""

    member_id: str
    items: list[MemberItem] = field(default_factory=list)
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    total: Decimal = ZERO
    is_paid: bool = False


@dataclass(frozen=True)
class AllocationSummary:
    """Totals plus whole-receipt progress metrics."""

    member_totals: list[MemberTotal]
    item_count: int
    assigned_count: int
    unassigned_amount: Decimal
    progress_percentage: Decimal
    allocated_total: Decimal


def compute_member_totals(
    items: Sequence[Item],
    member_ids: Sequence[str],
    tax_rate: Decimal = ZERO,
    tax_policy: TaxPolicy = TaxPolicy.ITEM,
    paid_members: Collection[str] = (),
) -> list[MemberTotal]:
    """Compute one MemberTotal per member id, in input order.

    Args:
        items: Receipt items with their assignments.
        member_ids: Members to report on; order is preserved.
        tax_rate: Percentage used only under TaxPolicy.FLAT (13 means 13%).
        tax_policy: ITEM apportions item tax amounts, FLAT applies tax_rate
            to the subtotal. Never both.
        paid_members: Member ids to flag as paid; payment state is owned by
            the caller and only echoed here.
    """
    totals: list[MemberTotal] = []
    for member_id in member_ids:
        member_items: list[MemberItem] = []
        subtotal = ZERO
        item_tax = ZERO

        for item in items:
            if item.find_assignment(member_id) is None:
                continue
            share = member_share(item, member_id)
            line_tax = item_tax_share(item, member_id) if tax_policy == TaxPolicy.ITEM else ZERO
            member_items.append(MemberItem(item=item, share=share, tax=line_tax))
            subtotal += share
            item_tax += line_tax

        if tax_policy == TaxPolicy.FLAT:
            tax = calculate_percentage(subtotal, tax_rate)
        else:
            tax = item_tax

        totals.append(
            MemberTotal(
                member_id=member_id,
                items=member_items,
                subtotal=subtotal,
                tax=tax,
                total=subtotal + tax,
                is_paid=member_id in paid_members,
            )
        )
    return totals


def assigned_count(items: Sequence[Item]) -> int:
    """Number of items with at least one assignment."""
    return sum(1 for item in items if item.assignments)


def unassigned_amount(items: Sequence[Item]) -> Decimal:
    """Sum of effective prices of items nobody has claimed yet."""
    return sum((effective_price(item) for item in items if not item.assignments), ZERO)


def progress_percentage(items: Sequence[Item]) -> Decimal:
    """Share of items assigned, 0-100. Empty receipts report 0."""
    if not items:
        return ZERO
    return Decimal(assigned_count(items)) / Decimal(len(items)) * 100


def split_evenly(items: Sequence[Item], member_ids: Sequence[str]) -> None:
    """Assign every member to every item in equal mode."""
    for item in items:
        item.split_mode = SplitMode.EQUAL
        item.assignments = [ItemAssignment(member_id=member_id) for member_id in dict.fromkeys(member_ids)]


def allocation_summary(
    items: Sequence[Item],
    member_ids: Sequence[str],
    tax_rate: Decimal = ZERO,
    tax_policy: TaxPolicy = TaxPolicy.ITEM,
    paid_members: Collection[str] = (),
) -> AllocationSummary:
    member_totals = compute_member_totals(
        items,
        member_ids,
        tax_rate=tax_rate,
        tax_policy=tax_policy,
        paid_members=paid_members,
    )
    return AllocationSummary(
        member_totals=member_totals,
        item_count=len(items),
        assigned_count=assigned_count(items),
        unassigned_amount=unassigned_amount(items),
        progress_percentage=progress_percentage(items),
        allocated_total=sum((t.total for t in member_totals), ZERO),
    )

"""Core domain models and allocation math for receiptsplit.

This package provides:
- Item, ItemAssignment, SplitMode: receipt lines and who claims them
- compute_member_totals and progress metrics: the allocation engine
- Split, SplitBook: receipts being divided and their collection
- Member, MemberRegistry: participants
- Region: sales-tax regions

Usage:
    from receiptsplit.domain import Item, compute_member_totals
"""

from receiptsplit.domain.allocation import (
    AllocationSummary,
    MemberItem,
    MemberTotal,
    TaxPolicy,
    allocation_summary,
    assigned_count,
    compute_member_totals,
    progress_percentage,
    split_evenly,
    unassigned_amount,
)
from receiptsplit.domain.item import (
    Item,
    ItemAssignment,
    SplitMode,
    assign_member,
    effective_price,
    member_share,
    member_tax_share,
    set_split_mode,
    toggle_assignment,
    unassign_member,
    update_assignment,
)
from receiptsplit.domain.member import Member, MemberRegistry
from receiptsplit.domain.region import REGIONS, Region, get_region
from receiptsplit.domain.split import Split, SplitBook, generate_split_name

__all__ = [
    # Items
    "Item",
    "ItemAssignment",
    "SplitMode",
    "effective_price",
    "member_share",
    "member_tax_share",
    "assign_member",
    "unassign_member",
    "toggle_assignment",
    "update_assignment",
    "set_split_mode",
    # Allocation
    "TaxPolicy",
    "MemberItem",
    "MemberTotal",
    "AllocationSummary",
    "compute_member_totals",
    "allocation_summary",
    "assigned_count",
    "unassigned_amount",
    "progress_percentage",
    "split_evenly",
    # Splits and members
    "Split",
    "SplitBook",
    "generate_split_name",
    "Member",
    "MemberRegistry",
    # Regions
    "Region",
    "REGIONS",
    "get_region",
]

"""Split summary workflow: who owes what, and how far assignment has got."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Literal

from receiptsplit.domain.allocation import AllocationSummary, TaxPolicy, allocation_summary
from receiptsplit.domain.item import Item, is_overclaimed
from receiptsplit.domain.region import get_region
from receiptsplit.domain.split import Split
from receiptsplit.runtime import Settings, get_logger, load_settings
from receiptsplit.runtime.split_storage import load_member_registry, load_split_book

logger = get_logger(__name__)

SummaryStatus = Literal["split_not_found", "ok"]


@dataclass(frozen=True)
class SplitSummaryRequest:
    """Inputs for summarizing one split."""

    split_id: str
    tax_policy: TaxPolicy | None = None  # None uses the configured policy
    tax_rate: Decimal | None = None  # percentage for TaxPolicy.FLAT
    splits_path: Path | None = None
    members_path: Path | None = None


@dataclass(frozen=True)
class SplitSummaryResult:
    """Outcome of summarizing one split."""

    status: SummaryStatus
    split: Split | None = None
    summary: AllocationSummary | None = None
    tax_policy: TaxPolicy | None = None
    tax_rate: Decimal | None = None
    member_names: dict[str, str] = field(default_factory=dict)
    overclaimed_items: list[Item] = field(default_factory=list)
    currency: str = "CAD"
    error: str | None = None


def flat_tax_rate_for(split: Split, settings: Settings) -> Decimal:
    """Percentage to use under the flat policy: the split's region, else settings."""
    region = get_region(split.region)
    if region is not None:
        return region.total_rate
    return settings.flat_tax_percentage


def run_split_summary(request: SplitSummaryRequest) -> SplitSummaryResult:
    """Recompute member totals and progress for one stored split."""
    book = load_split_book(request.splits_path)
    split = book.find_by_prefix(request.split_id)
    if split is None:
        return SplitSummaryResult(status="split_not_found", error=f"Split not found: {request.split_id}")

    settings = load_settings()
    tax_policy = request.tax_policy or settings.tax_policy
    tax_rate = request.tax_rate if request.tax_rate is not None else flat_tax_rate_for(split, settings)

    overclaimed = [item for item in split.items if is_overclaimed(item)]
    for item in overclaimed:
        logger.warning(
            "Item '%s' has more units claimed than its quantity (%s); shares use the claimed total",
            item.name,
            item.quantity,
        )

    summary = allocation_summary(
        split.items,
        split.members,
        tax_rate=tax_rate,
        tax_policy=tax_policy,
        paid_members=split.paid_members,
    )
    registry = load_member_registry(request.members_path)
    return SplitSummaryResult(
        status="ok",
        split=split,
        summary=summary,
        tax_policy=tax_policy,
        tax_rate=tax_rate if tax_policy == TaxPolicy.FLAT else None,
        member_names={member_id: registry.display_name(member_id) for member_id in split.members},
        overclaimed_items=overclaimed,
        currency=settings.currency,
    )

"""Split and member listing workflows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from receiptsplit.domain.member import Member, MemberRegistry
from receiptsplit.domain.split import MonthlyStats, Split
from receiptsplit.runtime.split_storage import load_member_registry, load_split_book, save_member_registry


@dataclass(frozen=True)
class SplitListing:
    """Recent splits plus this month's stats for CLI display."""

    splits: list[Split]
    monthly: MonthlyStats


@dataclass(frozen=True)
class MemberListing:
    members: list[Member]


def run_list_splits(
    limit: int = 10,
    today: date | None = None,
    splits_path: Path | None = None,
) -> SplitListing:
    book = load_split_book(splits_path)
    return SplitListing(splits=book.recent(limit), monthly=book.monthly_stats(today))


def run_list_members(members_path: Path | None = None, frequent_only: bool = False) -> MemberListing:
    registry = load_member_registry(members_path)
    members = registry.frequent() if frequent_only else registry.members
    return MemberListing(members=list(members))


def run_add_member(
    name: str,
    is_frequent: bool = False,
    members_path: Path | None = None,
) -> Member:
    """Register a member by name; an existing name is returned unchanged."""
    registry: MemberRegistry = load_member_registry(members_path)
    existing = registry.find_by_name(name)
    if existing is not None:
        return existing
    member = registry.add(name, is_frequent=is_frequent)
    save_member_registry(registry, members_path)
    return member

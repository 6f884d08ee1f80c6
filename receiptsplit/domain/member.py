"""Participants and the member registry."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

MEMBER_COLORS: tuple[str, ...] = (
    "#A0826D",
    "#C9A88A",
    "#8B6F47",
    "#D4B5A0",
    "#9B7E5E",
    "#B8956F",
    "#7A5C42",
    "#CDB8A3",
)


def color_for_index(index: int) -> str:
    """Pick a display color, cycling through MEMBER_COLORS."""
    return MEMBER_COLORS[index % len(MEMBER_COLORS)]


@dataclass
class Member:
    """A participant. Only ``id`` matters to the allocation engine."""

    id: str
    name: str
    color: str
    is_frequent: bool = False
    avatar: str | None = None
    created_at: datetime = field(default_factory=datetime.now)


class MemberRegistry:
    """Ordered collection of known members."""

    def __init__(self, members: list[Member] | None = None) -> None:
        self.members: list[Member] = list(members or [])

    def __len__(self) -> int:
        return len(self.members)

    def add(self, name: str, is_frequent: bool = False) -> Member:
        member = Member(
            id=uuid.uuid4().hex,
            name=name,
            color=color_for_index(len(self.members)),
            is_frequent=is_frequent,
        )
        self.members.append(member)
        return member

    def get(self, member_id: str) -> Member | None:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def find_by_name(self, name: str) -> Member | None:
        """First member whose name matches, case-insensitively."""
        wanted = name.strip().lower()
        for member in self.members:
            if member.name.lower() == wanted:
                return member
        return None

    def update(self, member_id: str, **changes: Any) -> Member | None:
        for index, member in enumerate(self.members):
            if member.id == member_id:
                updated = replace(member, **changes)
                self.members[index] = updated
                return updated
        return None

    def delete(self, member_id: str) -> bool:
        remaining = [m for m in self.members if m.id != member_id]
        deleted = len(remaining) != len(self.members)
        self.members = remaining
        return deleted

    def frequent(self) -> list[Member]:
        return [m for m in self.members if m.is_frequent]

    def toggle_frequent(self, member_id: str) -> Member | None:
        member = self.get(member_id)
        if member is None:
            return None
        return self.update(member_id, is_frequent=not member.is_frequent)

    def display_name(self, member_id: str) -> str:
        """Name for presentation; falls back to the raw id."""
        member = self.get(member_id)
        return member.name if member is not None else member_id

"""
Identity Consolidation — pure helpers
Merges duplicate roster rows that share one identifier into a single row.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from checkin_service.errors import InvalidArgument

# Smallest to largest
SIZE_ORDER = ["XS", "S", "M", "L", "XL", "XXL", "2XL", "3XL", "4XL", "5XL"]

DETAIL_SEPARATOR = "; "

_CLUB_RE = re.compile(r"Club:\s*([^,]+)", re.IGNORECASE)
_ROLE_RE = re.compile(r"Involvement:\s*(.+)", re.IGNORECASE)


@dataclass(frozen=True)
class AttendeeRow:
    identifier: str
    name: str
    garment_size: str = ""
    meal_preference: str = ""
    organization_detail: str = ""
    consented: bool = False

    @property
    def group_key(self):
        return self.identifier.strip().lower()


def _is_blank(value):
    return not value or not value.strip()


def size_rank(size: Optional[str]) -> Optional[int]:
    """Position of ``size`` in SIZE_ORDER, or None when blank or unrecognized."""
    if _is_blank(size):
        return None
    try:
        return SIZE_ORDER.index(size.strip().upper())
    except ValueError:
        return None


def larger_size(current: str, candidate: str) -> str:
    """
    Pick the dominant of two garment sizes.
    Known beats unknown, larger known beats smaller known,
    and between two unknowns the one already held is kept.
    """
    if _is_blank(candidate):
        return current
    if _is_blank(current):
        return candidate

    current_rank = size_rank(current)
    candidate_rank = size_rank(candidate)

    if candidate_rank is None:
        return current
    if current_rank is None:
        return candidate
    return candidate if candidate_rank > current_rank else current


def consolidate(rows: List[AttendeeRow]) -> AttendeeRow:
    """
    Merge rows sharing one identifier into a canonical row.

    Identifier and name come from the first row, the garment size is the
    largest recognized size, the meal preference is the first non-blank
    value, and every non-blank organization detail is kept in input order.
    A single row is returned untouched.
    """
    if not rows:
        raise InvalidArgument("EMPTY_GROUP", "Cannot consolidate an empty list of attendee rows")

    if len(rows) == 1:
        return rows[0]

    first = rows[0]
    size = ""
    meal = ""
    details = []

    for row in rows:
        size = larger_size(size, row.garment_size)

        if not meal and not _is_blank(row.meal_preference):
            meal = row.meal_preference

        if not _is_blank(row.organization_detail):
            details.append(row.organization_detail)

    return AttendeeRow(
        identifier=first.identifier,
        name=first.name,
        garment_size=size,
        meal_preference=meal,
        organization_detail=DETAIL_SEPARATOR.join(details),
        consented=first.consented,
    )


def group_rows(rows: Iterable[AttendeeRow]):
    """Group rows by case-folded identifier, keeping first-seen order."""
    groups = {}
    for row in rows:
        groups.setdefault(row.group_key, []).append(row)
    return groups


def build_organization_detail(club: Optional[str], involvement: Optional[str]) -> str:
    parts = []
    if not _is_blank(club):
        parts.append(f"Club: {club.strip()}")
    if not _is_blank(involvement):
        parts.append(f"Involvement: {involvement.strip()}")
    return ", ".join(parts)


def parse_involvements(detail: Optional[str]):
    """Split a stored organization detail into ``{"club", "role"}`` entries."""
    if _is_blank(detail):
        return []

    involvements = []
    for entry in detail.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        club = _CLUB_RE.search(entry)
        role = _ROLE_RE.search(entry)
        if club and role:
            involvements.append({"club": club.group(1).strip(), "role": role.group(1).strip()})
    return involvements

"""Parsing and applying result filters (size, age, category)."""

import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from dustpan.exceptions import InvalidAgeError, InvalidSizeError
from dustpan.models import Category, DeletableItem

# Binary multiples, longest suffix first so "MB" is not read as "B".
SIZE_UNITS = (
    ("TB", 1024**4),
    ("GB", 1024**3),
    ("MB", 1024**2),
    ("KB", 1024),
    ("B", 1),
)

AGE_UNITS = {
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "m": timedelta(days=30),
}

_NUMBER = re.compile(r"^\d+(\.\d+)?$", re.ASCII)
_AGE = re.compile(r"^(\d+)\s*([hdwm])$", re.ASCII)


def parse_size(size_str: str) -> int:
    """
    Parse a size string (e.g. "100MB", "1GB", "500") to bytes.

    Raises:
        InvalidSizeError: If the string is not a number with an optional unit
    """
    text = size_str.strip().upper()

    number, multiplier = text, 1
    for suffix, factor in SIZE_UNITS:
        if text.endswith(suffix):
            number, multiplier = text[: -len(suffix)].strip(), factor
            break

    if not _NUMBER.match(number):
        raise InvalidSizeError(f"Invalid size format: {size_str!r}")

    if "." in number:
        return int(float(number) * multiplier)
    return int(number) * multiplier


def parse_age(age_str: str) -> timedelta:
    """
    Parse an age string (e.g. "30d", "2w", "12h", "6m") to a timedelta.

    Months count as 30 days.

    Raises:
        InvalidAgeError: If the string is not a whole number with a unit
    """
    match = _AGE.match(age_str.strip().lower())
    if not match:
        raise InvalidAgeError(f"Invalid age format: {age_str!r} (use e.g. 12h, 30d, 2w, 6m)")
    return int(match.group(1)) * AGE_UNITS[match.group(2)]


def filter_items(
    items: Iterable[DeletableItem],
    min_size: Optional[int] = None,
    older_than: Optional[timedelta] = None,
    categories: Optional[Iterable[Category]] = None,
    now: Optional[datetime] = None,
) -> list[DeletableItem]:
    """Keep items matching every given criterion."""
    wanted = set(categories) if categories is not None else None
    cutoff = None
    if older_than is not None:
        cutoff = (now or datetime.now(timezone.utc)) - older_than

    result = []
    for item in items:
        if min_size is not None and item.size < min_size:
            continue
        if cutoff is not None and item.last_modified > cutoff:
            continue
        if wanted is not None and item.category not in wanted:
            continue
        result.append(item)
    return result

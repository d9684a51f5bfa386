"""Half-open time interval helpers."""
from datetime import datetime, timezone
from typing import Optional


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """[start_a, end_a) and [start_b, end_b) share at least one instant. Touching ends do not overlap."""
    return start_a < end_b and start_b < end_a


def is_valid_range(start: datetime, end: datetime) -> bool:
    return end > start


def within(start: datetime, end: datetime, outer_start: datetime, outer_end: datetime) -> bool:
    """Inclusive containment of [start, end] in [outer_start, outer_end]."""
    return start >= outer_start and end <= outer_end


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC; aware ones are left as they are."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

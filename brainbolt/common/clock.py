"""
Time helpers.

All timestamps are naive UTC datetimes, so they compare and round-trip
identically on PostgreSQL and SQLite columns.
"""

import datetime
from typing import Callable, Optional

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def to_iso(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def from_iso(value: Optional[str]) -> Optional[datetime.datetime]:
    return datetime.datetime.fromisoformat(value) if value else None

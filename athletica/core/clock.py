"""
Time source.

All timestamps are naive UTC, matching the ``datetime.datetime.utcnow``
defaults on the table models.  Services accept a ``clock`` callable so
tests can drive time deterministically.
"""

import datetime
from typing import Callable

Clock = Callable[[], datetime.datetime]


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def seconds_between(start: datetime.datetime | None, end: datetime.datetime | None) -> int:
    """Whole seconds from *start* to *end*, never negative."""
    if start is None or end is None:
        return 0
    return max(0, int((end - start).total_seconds()))

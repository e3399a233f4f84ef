"""
Half-open interval math shared by every scheduling decision.

All windows are ``[start, end)``: a booking ending at 10:00 and another
starting at 10:00 do not overlap. Conflict detection, slot marking, and
availability all route through ``overlaps`` so they agree on that edge.
"""

from datetime import datetime, timedelta
from typing import Iterator


def overlaps(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """True iff ``[start_a, end_a)`` and ``[start_b, end_b)`` share any instant."""
    return start_a < end_b and end_a > start_b


def slot_starts(
    window_start: datetime,
    window_end: datetime,
    duration: timedelta,
    step: timedelta,
) -> Iterator[datetime]:
    """Yield grid starts from ``window_start`` every ``step``.

    A slot is only produced if it fits entirely inside the window; the last
    slot's end may equal ``window_end`` but never exceed it.
    """
    if step <= timedelta(0):
        raise ValueError("step must be positive")
    current = window_start
    while current + duration <= window_end:
        yield current
        current += step


def day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Return the ``[00:00, next 00:00)`` window of ``moment``'s calendar day."""
    day_start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return day_start, day_start + timedelta(days=1)


def covering_days(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    """Whole-day window covering ``[start, end)``, for store range queries."""
    range_start, _ = day_bounds(start)
    _, range_end = day_bounds(end)
    return range_start, range_end

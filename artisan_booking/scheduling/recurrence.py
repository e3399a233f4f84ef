"""
Recurring booking expansion.

Given a persisted parent booking, generate the rest of the series:

    weekly    every 7 days
    biweekly  every 14 days
    monthly   same day-of-month, clipped to the month's last day

The parent is occurrence 1. Generation stops after ``occurrence_count - 1``
children, at the first candidate past ``end_date``, or at the safety
ceiling (52 by default), whichever comes first. An occurrence whose slot is
taken, or whose save fails, is skipped and logged; the rest of the series
is still generated.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterator, Optional, Union
from uuid import UUID

from dateutil.relativedelta import relativedelta

from artisan_booking.config import settings
from artisan_booking.errors import InfrastructureError, ValidationError, guard_store
from artisan_booking.locking import ProviderLocks
from artisan_booking.ports import BookingStore
from artisan_booking.schemas.booking_schema import (
    Booking,
    BookingStatus,
    PaymentStatus,
    RecurrencePattern,
)
from artisan_booking.schemas.result_schema import SeriesExpansion, SkippedOccurrence
from artisan_booking.scheduling.availability import AvailabilityCalculator

logger = logging.getLogger(__name__)

_STEPS: dict[RecurrencePattern, relativedelta] = {
    RecurrencePattern.WEEKLY: relativedelta(days=7),
    RecurrencePattern.BIWEEKLY: relativedelta(days=14),
    RecurrencePattern.MONTHLY: relativedelta(months=1),
}


def parse_pattern(pattern: Union[RecurrencePattern, str]) -> RecurrencePattern:
    """Coerce a pattern, rejecting anything outside weekly/biweekly/monthly."""
    try:
        return RecurrencePattern(pattern)
    except ValueError:
        raise ValidationError(f"unsupported recurrence pattern: {pattern}") from None


def occurrence_times(
    start: datetime,
    pattern: Union[RecurrencePattern, str],
    end_date: Optional[datetime] = None,
    occurrence_count: Optional[int] = None,
    max_occurrences: Optional[int] = None,
) -> Iterator[datetime]:
    """Yield child start times after ``start`` (the parent is not yielded).

    Each candidate is computed from ``start`` rather than from the previous
    candidate, so a monthly series on the 31st returns to the 31st after a
    shorter month.
    """
    step = _STEPS[parse_pattern(pattern)]
    ceiling = max_occurrences or settings.scheduling.recurrence_max_occurrences
    if occurrence_count is not None:
        if occurrence_count < 1:
            raise ValidationError("recurrence occurrences must be at least 1")
        ceiling = min(ceiling, occurrence_count - 1)

    for index in range(1, ceiling + 1):
        candidate = start + step * index
        if end_date is not None and candidate > end_date:
            break
        yield candidate


def build_child(parent: Booking, start_time: datetime, pattern: RecurrencePattern) -> Booking:
    """New pending occurrence copying the parent's pricing and details."""
    return Booking(
        tenant_id=parent.tenant_id,
        artisan_id=parent.artisan_id,
        customer_id=parent.customer_id,
        service_id=parent.service_id,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=parent.duration_minutes),
        duration_minutes=parent.duration_minutes,
        status=BookingStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        base_price=parent.base_price,
        addons_price=parent.addons_price,
        total_price=parent.total_price,
        currency=parent.currency,
        notes=parent.notes,
        customer_notes=parent.customer_notes,
        selected_addons=list(parent.selected_addons),
        is_recurring=True,
        recurrence_pattern=pattern,
        parent_booking_id=parent.id,
        recurrence_end_date=parent.recurrence_end_date,
        metadata=dict(parent.metadata),
    )


class RecurrenceExpander:
    """Creates the child bookings of a recurring series."""

    def __init__(
        self,
        store: BookingStore,
        availability: AvailabilityCalculator,
        locks: Optional[ProviderLocks] = None,
    ) -> None:
        self._store = store
        self._availability = availability
        self._locks = locks or ProviderLocks()

    async def expand(
        self,
        parent: Booking,
        pattern: Union[RecurrencePattern, str],
        end_date: Optional[datetime] = None,
        occurrence_count: Optional[int] = None,
    ) -> list[Booking]:
        """Create and return the children of ``parent`` (parent excluded)."""
        expansion = await self.expand_series(parent, pattern, end_date, occurrence_count)
        return expansion.created

    async def expand_series(
        self,
        parent: Booking,
        pattern: Union[RecurrencePattern, str],
        end_date: Optional[datetime] = None,
        occurrence_count: Optional[int] = None,
    ) -> SeriesExpansion:
        """
        Like ``expand`` but also reports which occurrences were skipped.

        Must not be called while holding the parent's provider lock.

        Raises:
            ValidationError: On an unsupported pattern, a non-positive count,
                or a parent that is itself a child of another series.
        """
        recurrence = parse_pattern(pattern)
        if parent.parent_booking_id is not None:
            raise ValidationError("cannot expand a booking that already belongs to a series")

        expansion = SeriesExpansion(parent_id=parent.id)
        candidates = list(occurrence_times(
            parent.start_time, recurrence, end_date, occurrence_count
        ))
        for candidate in candidates:
            child = await self._book_occurrence(parent, candidate, recurrence, expansion)
            if child is not None:
                expansion.created.append(child)

        logger.info(
            "Recurring series %s (%s): %d created, %d skipped",
            parent.id, recurrence.value, len(expansion.created), len(expansion.skipped),
        )
        return expansion

    async def _book_occurrence(
        self,
        parent: Booking,
        start_time: datetime,
        pattern: RecurrencePattern,
        expansion: SeriesExpansion,
    ) -> Optional[Booking]:
        async with self._locks.hold(parent.artisan_id):
            try:
                result = await self._availability.check_availability(
                    parent.artisan_id,
                    start_time,
                    parent.duration_minutes,
                    service_id=parent.service_id,
                )
            except InfrastructureError as exc:
                logger.warning(
                    "Skipping recurring booking at %s: availability check failed: %s",
                    start_time.isoformat(), exc,
                )
                expansion.skipped.append(SkippedOccurrence(
                    start_time=start_time, reason=f"availability check failed: {exc}",
                ))
                return None

            if not result.is_available:
                logger.warning(
                    "Skipping recurring booking at %s due to unavailability",
                    start_time.isoformat(),
                )
                expansion.skipped.append(SkippedOccurrence(
                    start_time=start_time,
                    reason="; ".join(c.reason for c in result.conflicts) or "unavailable",
                ))
                return None

            child = build_child(parent, start_time, pattern)
            try:
                await guard_store(self._store.create(child), "saving recurring booking")
            except InfrastructureError as exc:
                logger.error(
                    "Failed to create recurring booking at %s: %s",
                    start_time.isoformat(), exc,
                )
                expansion.skipped.append(SkippedOccurrence(
                    start_time=start_time, reason=str(exc),
                ))
                return None
            return child

    async def series_parent_id(self, booking_id: UUID) -> UUID:
        """Resolve any member of a series to its parent's id."""
        booking = await guard_store(self._store.get(booking_id), "fetching booking")
        return booking.parent_booking_id or booking.id

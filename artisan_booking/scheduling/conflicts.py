"""
Conflict detection against a provider's existing bookings.

A requested ``[start, end)`` window conflicts with every active booking it
overlaps. Cancelled and no-show bookings never block, and a booking being
rescheduled can be excluded so it does not conflict with itself.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from artisan_booking.errors import ValidationError, guard_store
from artisan_booking.ports import BookingStore
from artisan_booking.schemas.booking_schema import Booking, Conflict
from artisan_booking.scheduling.intervals import covering_days, overlaps
from artisan_booking.utils import is_nil

logger = logging.getLogger(__name__)


def active_bookings(
    bookings: Iterable[Booking], exclude_booking_id: Optional[UUID] = None
) -> list[Booking]:
    """Drop non-blocking statuses and the excluded booking."""
    return [
        b for b in bookings
        if b.blocks_calendar and (exclude_booking_id is None or b.id != exclude_booking_id)
    ]


def detect_conflicts(
    start: datetime,
    end: datetime,
    bookings: Iterable[Booking],
    exclude_booking_id: Optional[UUID] = None,
) -> list[Conflict]:
    """Pure conflict check of one window against a snapshot of bookings."""
    conflicts: list[Conflict] = []
    for booking in active_bookings(bookings, exclude_booking_id):
        if overlaps(start, end, booking.start_time, booking.end_time):
            conflicts.append(Conflict(
                conflict_type="booking",
                start=booking.start_time,
                end=booking.end_time,
                booking_id=booking.id,
                reason=f"conflicts with existing booking in status {booking.status.value}",
            ))
    return conflicts


class ConflictDetector:
    """Reads a provider's bookings and reports overlaps with a window."""

    def __init__(self, store: BookingStore) -> None:
        self._store = store

    async def find_conflicts(
        self,
        provider_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None,
    ) -> list[Conflict]:
        """
        Return every conflict for ``[start, end)``.

        Raises:
            ValidationError: On a missing provider id or an empty/inverted window.
            InfrastructureError: If the booking store fails.
        """
        if is_nil(provider_id):
            raise ValidationError("artisan ID is required")
        if end <= start:
            raise ValidationError("end time must be after start time")

        range_start, range_end = covering_days(start, end)
        existing = await guard_store(
            self._store.get_bookings_in_range(provider_id, range_start, range_end),
            "fetching existing bookings",
        )
        conflicts = detect_conflicts(start, end, existing, exclude_booking_id)
        if conflicts:
            logger.debug(
                "%d conflict(s) for provider %s in [%s, %s)",
                len(conflicts), provider_id, start.isoformat(), end.isoformat(),
            )
        return conflicts

    async def has_conflicts(
        self,
        provider_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None,
    ) -> tuple[bool, list[Conflict]]:
        conflicts = await self.find_conflicts(provider_id, start, end, exclude_booking_id)
        return bool(conflicts), conflicts

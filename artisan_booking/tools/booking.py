"""
In-memory booking store.

In production, this would be a repository over the bookings table
(PostgreSQL with an exclusion constraint on artisan + time range).
Reads hand out copies so callers never share state with the store.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from artisan_booking.errors import NotFoundError
from artisan_booking.ports import BookingStore
from artisan_booking.schemas.booking_schema import Booking
from artisan_booking.scheduling.intervals import day_bounds, overlaps

logger = logging.getLogger(__name__)


class InMemoryBookingStore(BookingStore):
    """Dict-backed ``BookingStore``. Soft-deleted rows are invisible to reads."""

    def __init__(self, bookings: Optional[list[Booking]] = None) -> None:
        self._bookings: dict[UUID, Booking] = {}
        for booking in bookings or []:
            self._bookings[booking.id] = booking.model_copy(deep=True)

    def _live(self) -> list[Booking]:
        return [b for b in self._bookings.values() if b.deleted_at is None]

    async def get(self, booking_id: UUID) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None or booking.deleted_at is not None:
            raise NotFoundError(f"booking {booking_id} not found")
        return booking.model_copy(deep=True)

    async def create(self, booking: Booking) -> Booking:
        self._bookings[booking.id] = booking.model_copy(deep=True)
        logger.debug("Stored booking %s for artisan %s", booking.id, booking.artisan_id)
        return booking

    async def update(self, booking: Booking) -> Booking:
        current = self._bookings.get(booking.id)
        if current is None or current.deleted_at is not None:
            raise NotFoundError(f"booking {booking.id} not found")
        self._bookings[booking.id] = booking.model_copy(deep=True)
        return booking

    async def delete(self, booking_id: UUID) -> None:
        if self._bookings.pop(booking_id, None) is None:
            raise NotFoundError(f"booking {booking_id} not found")

    async def soft_delete(self, booking_id: UUID, deleted_at: datetime) -> None:
        booking = self._bookings.get(booking_id)
        if booking is None or booking.deleted_at is not None:
            raise NotFoundError(f"booking {booking_id} not found")
        booking.deleted_at = deleted_at

    async def get_bookings_for_provider_on_date(
        self, provider_id: UUID, date: datetime
    ) -> list[Booking]:
        day_start, day_end = day_bounds(date)
        return await self.get_bookings_in_range(provider_id, day_start, day_end)

    async def get_bookings_in_range(
        self, provider_id: UUID, start: datetime, end: datetime
    ) -> list[Booking]:
        matches = [
            b for b in self._live()
            if b.artisan_id == provider_id and overlaps(start, end, b.start_time, b.end_time)
        ]
        matches.sort(key=lambda b: b.start_time)
        return [b.model_copy(deep=True) for b in matches]

    async def get_series(self, parent_booking_id: UUID) -> list[Booking]:
        series = [
            b for b in self._live()
            if b.id == parent_booking_id or b.parent_booking_id == parent_booking_id
        ]
        series.sort(key=lambda b: b.start_time)
        return [b.model_copy(deep=True) for b in series]

    def all(self) -> list[Booking]:
        """Every live booking, ordered by start. Test helper."""
        return [b.model_copy(deep=True) for b in sorted(self._live(), key=lambda b: b.start_time)]

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        self._bookings.clear()

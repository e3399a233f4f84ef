"""
Availability calculation for a provider on a given day.

Produces two independent answers from one request:

* a verdict for the exact requested window ``[date, date + duration)``
  (``is_available`` plus structured conflicts), and
* the day's option list: every ``duration``-long slot on a fixed grid
  (30 minutes by default) between working-hours start and end, each
  marked available or not.

Duration is trusted here; range validation happens at the orchestrator.
"""

import logging
from datetime import datetime, time, timedelta
from typing import Optional
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from artisan_booking.config import settings
from artisan_booking.errors import ValidationError, guard_store
from artisan_booking.ports import BookingStore, WorkingHoursProvider
from artisan_booking.schemas.booking_schema import (
    AvailabilityResult,
    Booking,
    TimeSlot,
    WorkingHours,
)
from artisan_booking.scheduling.conflicts import ConflictDetector, active_bookings
from artisan_booking.scheduling.intervals import overlaps, slot_starts
from artisan_booking.utils import is_nil

logger = logging.getLogger(__name__)

SLOT_CONFLICT_REASON = "conflicts with existing booking"


def default_working_hours() -> WorkingHours:
    """Fallback window used when a provider has no configured hours."""
    return WorkingHours(
        start=settings.scheduling.default_work_start,
        end=settings.scheduling.default_work_end,
        timezone=settings.scheduling.default_timezone,
    )


def _parse_clock(value: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"invalid working-hours time: {value!r}") from None


def working_window(date: datetime, hours: WorkingHours) -> tuple[datetime, datetime]:
    """Anchor working hours to ``date``'s calendar day.

    Aware datetimes are read in the working-hours timezone; naive ones are
    taken as already local and stay naive.
    """
    start_clock = _parse_clock(hours.start)
    end_clock = _parse_clock(hours.end)
    if date.tzinfo is None:
        day = date.date()
        tzinfo = None
    else:
        try:
            tzinfo = ZoneInfo(hours.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(f"unknown working-hours timezone: {hours.timezone!r}") from None
        day = date.astimezone(tzinfo).date()
    work_start = datetime.combine(day, start_clock, tzinfo=tzinfo)
    work_end = datetime.combine(day, end_clock, tzinfo=tzinfo)
    if work_end <= work_start:
        raise ValidationError(f"working hours end before they start: {hours.start}-{hours.end}")
    return work_start, work_end


def build_slots(
    work_start: datetime,
    work_end: datetime,
    duration_minutes: int,
    bookings: list[Booking],
    step_minutes: Optional[int] = None,
) -> list[TimeSlot]:
    """Enumerate grid slots and mark those overlapping any of ``bookings``."""
    step = timedelta(minutes=step_minutes or settings.scheduling.slot_step_minutes)
    duration = timedelta(minutes=duration_minutes)
    slots: list[TimeSlot] = []
    for start in slot_starts(work_start, work_end, duration, step):
        end = start + duration
        blocked = any(overlaps(start, end, b.start_time, b.end_time) for b in bookings)
        slots.append(TimeSlot(
            start=start,
            end=end,
            duration_minutes=duration_minutes,
            available=not blocked,
            reason=SLOT_CONFLICT_REASON if blocked else "",
        ))
    return slots


class AvailabilityCalculator:
    """Answers "is the provider free?" and "what are today's options?"."""

    def __init__(
        self,
        store: BookingStore,
        working_hours: WorkingHoursProvider,
        conflicts: Optional[ConflictDetector] = None,
    ) -> None:
        self._store = store
        self._working_hours = working_hours
        self._conflicts = conflicts or ConflictDetector(store)

    async def check_availability(
        self,
        provider_id: UUID,
        date: datetime,
        duration_minutes: int,
        service_id: Optional[UUID] = None,
        exclude_booking_id: Optional[UUID] = None,
    ) -> AvailabilityResult:
        """
        Check the exact window starting at ``date`` and list the day's slots.

        Conflicts are reported in the result, never raised.

        Raises:
            ValidationError: On a missing provider id or bad working hours.
            InfrastructureError: If a collaborator fails.
        """
        if is_nil(provider_id):
            raise ValidationError("artisan ID is required")

        hours = await self._get_working_hours(provider_id, date)
        work_start, work_end = working_window(date, hours)
        existing = await self._get_window_bookings(
            provider_id, work_start, work_end, exclude_booking_id
        )

        end = date + timedelta(minutes=duration_minutes)
        conflicts = await self._conflicts.find_conflicts(
            provider_id, date, end, exclude_booking_id
        )

        slots = build_slots(work_start, work_end, duration_minutes, existing)

        logger.debug(
            "Availability for provider %s at %s (%d min, service %s): %s, %d slot(s)",
            provider_id, date.isoformat(), duration_minutes, service_id,
            "free" if not conflicts else f"{len(conflicts)} conflict(s)", len(slots),
        )
        return AvailabilityResult(
            artisan_id=provider_id,
            date=date,
            is_available=not conflicts,
            conflicts=conflicts,
            slots=slots,
            working_hours=hours,
        )

    async def generate_slots(
        self, provider_id: UUID, date: datetime, duration_minutes: int
    ) -> list[TimeSlot]:
        """All grid slots for ``date``'s working day, available or not."""
        if is_nil(provider_id):
            raise ValidationError("artisan ID is required")
        hours = await self._get_working_hours(provider_id, date)
        work_start, work_end = working_window(date, hours)
        existing = await self._get_window_bookings(provider_id, work_start, work_end)
        return build_slots(work_start, work_end, duration_minutes, existing)

    async def get_available_slots(
        self, provider_id: UUID, date: datetime, duration_minutes: int
    ) -> list[TimeSlot]:
        slots = await self.generate_slots(provider_id, date, duration_minutes)
        return [s for s in slots if s.available]

    # ------------------------------------------------------------------ #
    # Collaborator reads
    # ------------------------------------------------------------------ #

    async def _get_working_hours(self, provider_id: UUID, date: datetime) -> WorkingHours:
        hours = await guard_store(
            self._working_hours.get_working_hours(provider_id, date),
            "fetching working hours",
        )
        return hours or default_working_hours()

    async def _get_window_bookings(
        self,
        provider_id: UUID,
        work_start: datetime,
        work_end: datetime,
        exclude_booking_id: Optional[UUID] = None,
    ) -> list[Booking]:
        # The working day is resolved in the provider's timezone, which can
        # fall on a different calendar day than the request.
        bookings = await guard_store(
            self._store.get_bookings_in_range(provider_id, work_start, work_end),
            "fetching existing bookings",
        )
        return active_bookings(bookings, exclude_booking_id)

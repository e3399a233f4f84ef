"""
Mock working-hours calendar.

In production, this would read each artisan's weekly schedule and
exceptions from the availability service (or ServiceTitan / Jobber /
Housecall Pro via HTTP client).
"""

import logging
from datetime import date as date_type
from datetime import datetime
from typing import Optional
from uuid import UUID

from artisan_booking.ports import WorkingHoursProvider
from artisan_booking.schemas.booking_schema import WorkingHours
from artisan_booking.scheduling.availability import default_working_hours

logger = logging.getLogger(__name__)


class StaticWorkingHours(WorkingHoursProvider):
    """
    Default hours for everyone, with per-artisan and per-date overrides.

    Lookup order: date override, artisan weekly default, global default.
    """

    def __init__(self, default: Optional[WorkingHours] = None) -> None:
        self._default = default
        self._per_artisan: dict[UUID, WorkingHours] = {}
        self._per_date: dict[tuple[UUID, date_type], WorkingHours] = {}

    def set_hours(self, artisan_id: UUID, hours: WorkingHours) -> None:
        self._per_artisan[artisan_id] = hours

    def set_hours_for_date(
        self, artisan_id: UUID, day: date_type, hours: WorkingHours
    ) -> None:
        self._per_date[(artisan_id, day)] = hours

    async def get_working_hours(self, provider_id: UUID, date: datetime) -> WorkingHours:
        hours = self._per_date.get((provider_id, date.date()))
        if hours is None:
            hours = self._per_artisan.get(provider_id)
        if hours is None:
            hours = self._default or default_working_hours()
        logger.debug(
            "Working hours for %s on %s: %s-%s %s",
            provider_id, date.date().isoformat(), hours.start, hours.end, hours.timezone,
        )
        return hours

    def reset(self) -> None:
        """Drop all overrides."""
        self._per_artisan.clear()
        self._per_date.clear()

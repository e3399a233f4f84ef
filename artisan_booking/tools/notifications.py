"""
Mock booking notifications.

In production, this would hand off to the email/SMS/push providers. Here
every notification is logged and kept in ``sent`` so tests can assert on it.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from artisan_booking.ports import Notifier
from artisan_booking.schemas.booking_schema import Booking, BookingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentNotification:
    event: str
    booking_id: UUID
    status: BookingStatus
    old_status: Optional[BookingStatus] = None


class LoggingNotifier(Notifier):
    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    async def booking_created(self, booking: Booking) -> None:
        self._record("created", booking)

    async def booking_updated(self, booking: Booking, old_status: BookingStatus) -> None:
        self._record("updated", booking, old_status)

    async def booking_cancelled(self, booking: Booking) -> None:
        self._record("cancelled", booking)

    def events(self, booking_id: UUID) -> list[str]:
        return [n.event for n in self.sent if n.booking_id == booking_id]

    def reset(self) -> None:
        self.sent.clear()

    def _record(
        self, event: str, booking: Booking, old_status: Optional[BookingStatus] = None
    ) -> None:
        self.sent.append(SentNotification(event, booking.id, booking.status, old_status))
        logger.info(
            "Notification [%s] booking %s for customer %s (%s)",
            event, booking.id, booking.customer_id, booking.status_label,
        )

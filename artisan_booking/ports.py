"""
Collaborator interfaces consumed by the booking engine.

The engine never talks to a database, payment processor, or messaging
provider directly; it goes through these narrow ports. In-memory and mock
implementations live in ``artisan_booking.tools``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from artisan_booking.schemas.booking_schema import (
    Addon,
    Booking,
    BookingStatus,
    Service,
    WorkingHours,
)


class BookingStore(ABC):
    """Source of truth for bookings. Reads exclude soft-deleted rows."""

    @abstractmethod
    async def get(self, booking_id: UUID) -> Booking:
        """Return a booking. Raises NotFoundError if absent."""
        raise NotImplementedError

    @abstractmethod
    async def create(self, booking: Booking) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def update(self, booking: Booking) -> Booking:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, booking_id: UUID) -> None:
        """Remove a booking outright."""
        raise NotImplementedError

    @abstractmethod
    async def soft_delete(self, booking_id: UUID, deleted_at: datetime) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_bookings_for_provider_on_date(
        self, provider_id: UUID, date: datetime
    ) -> list[Booking]:
        """Bookings overlapping the calendar day of ``date`` (in its timezone)."""
        raise NotImplementedError

    @abstractmethod
    async def get_bookings_in_range(
        self, provider_id: UUID, start: datetime, end: datetime
    ) -> list[Booking]:
        """Bookings overlapping [start, end)."""
        raise NotImplementedError

    @abstractmethod
    async def get_series(self, parent_booking_id: UUID) -> list[Booking]:
        """Parent plus children of a recurring series, ordered by start."""
        raise NotImplementedError


class WorkingHoursProvider(ABC):
    @abstractmethod
    async def get_working_hours(self, provider_id: UUID, date: datetime) -> WorkingHours:
        """Return the provider's window for ``date`` (default when unset)."""
        raise NotImplementedError


class CatalogLookup(ABC):
    """Service and addon pricing."""

    @abstractmethod
    async def get_service(self, service_id: UUID) -> Service:
        """Raises NotFoundError if absent."""
        raise NotImplementedError

    @abstractmethod
    async def get_addon(self, addon_id: UUID) -> Optional[Addon]:
        raise NotImplementedError

    async def get_addon_price(self, addon_id: UUID) -> Optional[Decimal]:
        """Current price of an addon, or None when it is unknown."""
        addon = await self.get_addon(addon_id)
        return addon.price if addon is not None else None


class Notifier(ABC):
    """Outbound notifications (email/SMS/push) about booking changes."""

    @abstractmethod
    async def booking_created(self, booking: Booking) -> None:
        raise NotImplementedError

    @abstractmethod
    async def booking_updated(self, booking: Booking, old_status: BookingStatus) -> None:
        raise NotImplementedError

    @abstractmethod
    async def booking_cancelled(self, booking: Booking) -> None:
        raise NotImplementedError


class PaymentGateway(ABC):
    """External payment processor."""

    @abstractmethod
    async def capture_deposit(
        self, booking: Booking, amount: Decimal, payment_method_id: str
    ) -> str:
        """Capture a deposit and return the payment intent id."""
        raise NotImplementedError

    @abstractmethod
    async def refund(self, booking: Booking, amount: Decimal, reason: str) -> str:
        """Issue a refund and return the refund id."""
        raise NotImplementedError


class CustomerStats(ABC):
    """Loyalty/statistics recompute hook owned by the customer domain."""

    @abstractmethod
    def record_booking(
        self, customer_id: UUID, booking_value: Decimal, loyalty_points: int
    ) -> None:
        raise NotImplementedError

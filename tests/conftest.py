"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import pytest

from artisan_booking.orchestrator import BookingOrchestrator
from artisan_booking.schemas.booking_schema import (
    Addon,
    Booking,
    BookingStatus,
    Service,
)
from artisan_booking.tools.availability import StaticWorkingHours
from artisan_booking.tools.booking import InMemoryBookingStore
from artisan_booking.tools.customer import InMemoryCustomerStats
from artisan_booking.tools.notifications import LoggingNotifier
from artisan_booking.tools.payments import MockPaymentGateway
from artisan_booking.tools.services import InMemoryCatalog

UTC = timezone.utc

# Fixed "current time" one week before the booking day
NOW = datetime(2030, 6, 3, 8, 0, tzinfo=UTC)
DAY = datetime(2030, 6, 10, tzinfo=UTC)

TENANT_ID = UUID("00000000-0000-4000-8000-000000000001")
ARTISAN_ID = UUID("00000000-0000-4000-8000-000000000002")
CUSTOMER_ID = UUID("00000000-0000-4000-8000-000000000003")
SERVICE_ID = UUID("00000000-0000-4000-8000-000000000004")


def at(hour: int, minute: int = 0, days: int = 0) -> datetime:
    """A time on the booking day (or ``days`` after it), in UTC."""
    return DAY + timedelta(days=days, hours=hour, minutes=minute)


def make_booking(
    start: datetime,
    duration: int = 60,
    status: BookingStatus = BookingStatus.PENDING,
    artisan_id: UUID = ARTISAN_ID,
    total_price: Decimal = Decimal("100.00"),
    parent_booking_id: Optional[UUID] = None,
    **kwargs,
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    return Booking(
        tenant_id=TENANT_ID,
        artisan_id=artisan_id,
        customer_id=CUSTOMER_ID,
        service_id=SERVICE_ID,
        start_time=start,
        end_time=start + timedelta(minutes=duration),
        duration_minutes=duration,
        status=status,
        base_price=total_price,
        total_price=total_price,
        parent_booking_id=parent_booking_id,
        **kwargs,
    )


def make_request(service: Service, start: datetime, duration: int = 60, **kwargs) -> dict:
    """Helper to build a create-booking payload."""
    return {
        "tenant_id": TENANT_ID,
        "artisan_id": kwargs.pop("artisan_id", ARTISAN_ID),
        "customer_id": CUSTOMER_ID,
        "service_id": service.id,
        "start_time": start,
        "duration_minutes": duration,
        **kwargs,
    }


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def working_hours():
    return StaticWorkingHours()


@pytest.fixture
def catalog():
    return InMemoryCatalog()


@pytest.fixture
def service(catalog):
    return catalog.add_service(Service(name="Plumbing Service", price=Decimal("100.00")))


@pytest.fixture
def addons(catalog, service):
    return [
        catalog.add_addon(Addon(service_id=service.id, name="Hot water check", price=Decimal("20.00"))),
        catalog.add_addon(Addon(service_id=service.id, name="Tap washer kit", price=Decimal("30.50"))),
    ]


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
def payments():
    return MockPaymentGateway()


@pytest.fixture
def customers():
    return InMemoryCustomerStats()


@pytest.fixture
def orchestrator(store, working_hours, catalog, notifier, payments, customers):
    return BookingOrchestrator(
        store=store,
        working_hours=working_hours,
        catalog=catalog,
        notifier=notifier,
        payments=payments,
        customers=customers,
        clock=lambda: NOW,
    )


@pytest.fixture
def actor_id():
    return uuid4()

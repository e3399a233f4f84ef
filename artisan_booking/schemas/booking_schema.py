"""Booking, availability, and catalog data models."""

from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

from artisan_booking.utils import utc_now


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class PaymentStatus(str, Enum):
    """Payment axis, updated independently of the booking status."""
    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class RecurrencePattern(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


TERMINAL_STATUSES: frozenset[BookingStatus] = frozenset({
    BookingStatus.COMPLETED,
    BookingStatus.CANCELLED,
    BookingStatus.NO_SHOW,
})

# Statuses that never block a calendar window
NON_BLOCKING_STATUSES: frozenset[BookingStatus] = frozenset({
    BookingStatus.CANCELLED,
    BookingStatus.NO_SHOW,
})

STATUS_COLORS: MappingProxyType[BookingStatus, str] = MappingProxyType({
    BookingStatus.PENDING: "orange",
    BookingStatus.CONFIRMED: "blue",
    BookingStatus.IN_PROGRESS: "green",
    BookingStatus.COMPLETED: "gray",
    BookingStatus.CANCELLED: "red",
    BookingStatus.NO_SHOW: "purple",
})

STATUS_LABELS: MappingProxyType[BookingStatus, str] = MappingProxyType({
    BookingStatus.PENDING: "Pending",
    BookingStatus.CONFIRMED: "Confirmed",
    BookingStatus.IN_PROGRESS: "In Progress",
    BookingStatus.COMPLETED: "Completed",
    BookingStatus.CANCELLED: "Cancelled",
    BookingStatus.NO_SHOW: "No Show",
})


class Booking(BaseModel):
    """
    Central booking entity.

    Mutated in place by the lifecycle controller and the orchestrator;
    use ``reschedule()`` to move it so start, end, and duration stay in step.
    """
    id: UUID = Field(default_factory=uuid4)
    tenant_id: UUID
    artisan_id: UUID
    customer_id: UUID
    service_id: UUID

    start_time: datetime
    end_time: datetime
    duration_minutes: int = Field(gt=0)

    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING

    base_price: Decimal = Decimal("0.00")
    addons_price: Decimal = Decimal("0.00")
    total_price: Decimal = Decimal("0.00")
    deposit_paid: Decimal = Decimal("0.00")
    refunded_amount: Decimal = Decimal("0.00")
    currency: str = "USD"

    notes: str = ""
    customer_notes: str = ""
    internal_notes: str = ""
    selected_addons: list[UUID] = Field(default_factory=list)

    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[UUID] = None
    cancellation_reason: str = ""

    completed_at: Optional[datetime] = None
    before_photo_urls: list[str] = Field(default_factory=list)
    after_photo_urls: list[str] = Field(default_factory=list)

    payment_intent_id: str = ""
    refund_id: str = ""

    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    parent_booking_id: Optional[UUID] = None
    recurrence_end_date: Optional[datetime] = None

    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_window(self) -> "Booking":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.end_time - self.start_time != timedelta(minutes=self.duration_minutes):
            raise ValueError("duration_minutes must match end_time - start_time")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def blocks_calendar(self) -> bool:
        return self.status not in NON_BLOCKING_STATUSES

    @property
    def can_be_cancelled(self) -> bool:
        return not self.is_terminal

    @property
    def can_be_rescheduled(self) -> bool:
        return self.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    @property
    def can_be_completed(self) -> bool:
        return self.status == BookingStatus.IN_PROGRESS

    @property
    def requires_deposit(self) -> bool:
        return self.deposit_paid > 0

    @property
    def status_color(self) -> str:
        return STATUS_COLORS.get(self.status, "gray")

    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, self.status.value)

    def is_upcoming(self, now: datetime) -> bool:
        return now < self.start_time and self.can_be_rescheduled

    def has_started(self, now: datetime) -> bool:
        return now >= self.start_time

    def reschedule(self, start_time: datetime, duration_minutes: int) -> None:
        """Move the booking, keeping end_time = start_time + duration."""
        self.start_time = start_time
        self.duration_minutes = duration_minutes
        self.end_time = start_time + timedelta(minutes=duration_minutes)


class WorkingHours(BaseModel):
    """A provider's bookable window for one day."""
    start: str = "09:00"
    end: str = "17:00"
    timezone: str = "UTC"


class TimeSlot(BaseModel):
    """Candidate [start, end) window, computed on demand and never persisted."""
    start: datetime
    end: datetime
    duration_minutes: int
    available: bool = True
    reason: str = ""


class Conflict(BaseModel):
    """A reported overlap with an existing commitment."""
    conflict_type: str = "booking"
    start: datetime
    end: datetime
    booking_id: Optional[UUID] = None
    reason: str = ""


class AvailabilityResult(BaseModel):
    """Verdict for one requested window plus the day's slot list."""
    artisan_id: UUID
    date: datetime
    is_available: bool
    conflicts: list[Conflict] = Field(default_factory=list)
    slots: list[TimeSlot] = Field(default_factory=list)
    working_hours: Optional[WorkingHours] = None


class Service(BaseModel):
    """Catalog service used to price a booking."""
    id: UUID = Field(default_factory=uuid4)
    name: str
    price: Decimal
    currency: str = "USD"
    duration_minutes: int = 60
    is_active: bool = True


class Addon(BaseModel):
    """Optional extra attached to a service."""
    id: UUID = Field(default_factory=uuid4)
    service_id: Optional[UUID] = None
    name: str
    price: Decimal
    is_active: bool = True

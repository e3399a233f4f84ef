"""Validated inbound request models for the booking orchestrator."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from artisan_booking.config import settings
from artisan_booking.schemas.booking_schema import (
    BookingStatus,
    PaymentStatus,
    RecurrencePattern,
)
from artisan_booking.utils import is_nil

_MIN_DURATION = settings.scheduling.min_duration_minutes
_MAX_DURATION = settings.scheduling.max_duration_minutes
_LIMITS = settings.limits


def _require_id(value: UUID, label: str) -> UUID:
    if is_nil(value):
        raise ValueError(f"{label} is required")
    return value


def _check_length(value: str, limit: int, label: str) -> str:
    if len(value) > limit:
        raise ValueError(f"{label} must be {limit} characters or less")
    return value


class CreateBookingRequest(BaseModel):
    """Everything needed to place a booking (and optionally its series)."""
    tenant_id: UUID
    artisan_id: UUID
    customer_id: UUID
    service_id: UUID
    start_time: datetime
    duration_minutes: int = Field(ge=_MIN_DURATION, le=_MAX_DURATION)
    notes: str = ""
    customer_notes: str = ""
    selected_addons: list[UUID] = Field(default_factory=list)
    payment_method_id: str = ""
    requires_deposit: bool = False
    deposit_amount: Decimal = Decimal("0")
    auto_confirm: bool = False
    send_confirmation_email: bool = False
    send_confirmation_sms: bool = False
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[datetime] = None
    recurrence_occurrences: Optional[int] = Field(default=None, ge=1)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("tenant_id", "artisan_id", "customer_id", "service_id")
    @classmethod
    def _ids_present(cls, value: UUID, info) -> UUID:
        return _require_id(value, info.field_name.replace("_", " "))

    @field_validator("notes")
    @classmethod
    def _notes_length(cls, value: str) -> str:
        return _check_length(value, _LIMITS.max_notes_length, "notes")

    @field_validator("customer_notes")
    @classmethod
    def _customer_notes_length(cls, value: str) -> str:
        return _check_length(value, _LIMITS.max_customer_notes_length, "customer notes")

    @model_validator(mode="after")
    def _check_consistency(self) -> "CreateBookingRequest":
        if self.requires_deposit and self.deposit_amount <= 0:
            raise ValueError("deposit amount must be positive when deposit is required")
        if self.is_recurring and self.recurrence_pattern is None:
            raise ValueError("recurrence pattern is required for recurring bookings")
        if self.recurrence_end_date is not None and self.recurrence_end_date <= self.start_time:
            raise ValueError("recurrence end date must be after start time")
        return self


class RescheduleBookingRequest(BaseModel):
    """Move a booking to a new start (and optionally a new duration)."""
    new_start_time: datetime
    new_duration_minutes: Optional[int] = Field(
        default=None, ge=_MIN_DURATION, le=_MAX_DURATION
    )
    reason: str = ""
    notify_customer: bool = False
    notify_artisan: bool = False

    @field_validator("reason")
    @classmethod
    def _reason_length(cls, value: str) -> str:
        return _check_length(value, _LIMITS.max_reason_length, "reason")


class CancelBookingRequest(BaseModel):
    reason: str
    cancelled_by: UUID
    refund_requested: bool = False
    notify_customer: bool = False
    notify_artisan: bool = False

    @field_validator("reason")
    @classmethod
    def _reason_present(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("cancellation reason is required")
        return _check_length(value, _LIMITS.max_reason_length, "reason")

    @field_validator("cancelled_by")
    @classmethod
    def _canceller_present(cls, value: UUID) -> UUID:
        return _require_id(value, "cancelled by user ID")


class CompleteBookingRequest(BaseModel):
    completion_notes: str = ""
    before_photo_urls: list[str] = Field(default_factory=list)
    after_photo_urls: list[str] = Field(default_factory=list)
    actual_duration_minutes: Optional[int] = Field(default=None, ge=1, le=600)
    quality_rating: Optional[int] = Field(default=None, ge=1, le=5)
    request_review: bool = False

    @field_validator("completion_notes")
    @classmethod
    def _notes_length(cls, value: str) -> str:
        return _check_length(value, _LIMITS.max_customer_notes_length, "completion notes")


class BookingUpdate(BaseModel):
    """
    Partial update. Only fields the caller actually supplied are applied;
    anything left out keeps its stored value (see ``model_fields_set``).
    """
    status: Optional[BookingStatus] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[UUID] = None
    notes: Optional[str] = None
    customer_notes: Optional[str] = None
    internal_notes: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
    selected_addons: Optional[list[UUID]] = None
    payment_intent_id: Optional[str] = None
    refund_id: Optional[str] = None
    before_photo_urls: Optional[list[str]] = None
    after_photo_urls: Optional[list[str]] = None
    metadata: Optional[dict[str, Any]] = None

    @field_validator("notes")
    @classmethod
    def _notes_length(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _check_length(value, _LIMITS.max_notes_length, "notes")

    @field_validator("cancellation_reason")
    @classmethod
    def _reason_length(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _check_length(value, _LIMITS.max_reason_length, "reason")

    def supplied(self) -> dict[str, Any]:
        """Return only the fields explicitly set by the caller."""
        return {name: getattr(self, name) for name in self.model_fields_set}

"""Result models for best-effort and multi-booking operations."""

from datetime import datetime
from typing import Generic, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

from artisan_booking.schemas.booking_schema import Booking

T = TypeVar("T")


class ItemFailure(BaseModel):
    """One item a batch could not process, with enough detail to retry."""
    booking_id: UUID
    kind: str
    message: str


class BatchResult(BaseModel, Generic[T]):
    """Successful subset plus per-item failures; never raised as a whole."""
    succeeded: list[T] = Field(default_factory=list)
    failures: list[ItemFailure] = Field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failures

    @property
    def failed_ids(self) -> list[UUID]:
        return [f.booking_id for f in self.failures]


class SkippedOccurrence(BaseModel):
    """A recurrence candidate that was not booked."""
    start_time: datetime
    reason: str


class SeriesExpansion(BaseModel):
    """Children created for a recurring booking and the occurrences skipped."""
    parent_id: UUID
    created: list[Booking] = Field(default_factory=list)
    skipped: list[SkippedOccurrence] = Field(default_factory=list)


class BookingCreation(BaseModel):
    """Outcome of create_booking: the parent plus its series, if any."""
    booking: Booking
    series: Optional[SeriesExpansion] = None

    @property
    def recurring_created(self) -> int:
        return len(self.series.created) if self.series else 0

"""
Error taxonomy for the booking engine.

Every error carries a ``kind`` so callers (HTTP handlers, CLI, batch
reporting) can decide between surfacing to the user and retrying without
inspecting message text:

    validation          bad input, rejected before any store access
    illegal_transition  status change not in the transition table
    conflict            requested window taken, or booking in wrong state
    not_found           unknown booking / service
    infrastructure      a collaborator (store, payments, ...) failed
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Optional, TypeVar

if TYPE_CHECKING:
    from artisan_booking.schemas.booking_schema import BookingStatus, Conflict

T = TypeVar("T")


class BookingError(Exception):
    """Base class for all booking engine errors."""

    kind = "error"


class ValidationError(BookingError):
    """Raised when a request is malformed or out of range."""

    kind = "validation"


class IllegalTransitionError(ValidationError):
    """Raised when a status change is not allowed from the current status."""

    kind = "illegal_transition"

    def __init__(self, from_status: BookingStatus, to_status: BookingStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"illegal transition from {from_status.value} to {to_status.value}"
        )


class SlotUnavailableError(BookingError):
    """Raised by create/reschedule when the requested window is taken."""

    kind = "conflict"

    def __init__(self, message: str, conflicts: Optional[list[Conflict]] = None) -> None:
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class BookingStateError(BookingError):
    """Raised when a booking's current state forbids the requested action."""

    kind = "conflict"


class NotFoundError(BookingError):
    """Raised when a booking or catalog entry does not exist."""

    kind = "not_found"


class InfrastructureError(BookingError):
    """Raised when a collaborator (store, payments, notifier) fails."""

    kind = "infrastructure"


async def guard_store(awaitable: Awaitable[T], action: str) -> T:
    """Await a collaborator call, wrapping foreign failures as InfrastructureError.

    Booking errors raised by the collaborator itself (e.g. NotFoundError)
    pass through unchanged.
    """
    try:
        return await awaitable
    except BookingError:
        raise
    except Exception as exc:
        raise InfrastructureError(f"{action} failed: {exc}") from exc

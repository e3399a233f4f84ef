"""
Booking status state machine.

Defines the legal status transitions and the side effects applied with
each one. Every status change goes through ``BookingLifecycle``; terminal
statuses (completed, cancelled, no_show) have no outbound transitions.

Usage:
    lifecycle = BookingLifecycle()
    lifecycle.apply_transition(booking, BookingStatus.CONFIRMED)
    assert booking.status == BookingStatus.CONFIRMED
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_FLOOR, Decimal
from types import MappingProxyType
from typing import Callable, Optional
from uuid import UUID

from artisan_booking.config import settings
from artisan_booking.errors import IllegalTransitionError
from artisan_booking.schemas.booking_schema import Booking, BookingStatus
from artisan_booking.utils import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus


TRANSITIONS: tuple[Transition, ...] = (
    # --- Pending ---
    Transition(BookingStatus.PENDING, BookingStatus.CONFIRMED),
    Transition(BookingStatus.PENDING, BookingStatus.CANCELLED),

    # --- Confirmed ---
    Transition(BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS),
    Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    Transition(BookingStatus.CONFIRMED, BookingStatus.NO_SHOW),

    # --- In progress ---
    Transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED),
    Transition(BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED),
)

ALLOWED_TRANSITIONS: MappingProxyType[BookingStatus, frozenset[BookingStatus]] = MappingProxyType({
    status: frozenset(t.to_status for t in TRANSITIONS if t.from_status == status)
    for status in BookingStatus
})


def allowed_transitions(from_status: BookingStatus) -> frozenset[BookingStatus]:
    """Statuses reachable in one step from ``from_status``."""
    return ALLOWED_TRANSITIONS.get(from_status, frozenset())


def can_transition(from_status: BookingStatus, to_status: BookingStatus) -> bool:
    return to_status in allowed_transitions(from_status)


def validate_transition(from_status: BookingStatus, to_status: BookingStatus) -> None:
    """
    Accept a listed transition, reject anything else.

    Raises:
        IllegalTransitionError: Naming the rejected from -> to pair.
    """
    if to_status in allowed_transitions(from_status):
        return
    raise IllegalTransitionError(from_status, to_status)


@dataclass
class TransitionContext:
    """Caller-supplied details recorded alongside a status change."""
    reason: str = ""
    actor_id: Optional[UUID] = None
    completion_notes: str = ""
    before_photo_urls: list[str] = field(default_factory=list)
    after_photo_urls: list[str] = field(default_factory=list)
    at: Optional[datetime] = None


CompletionHook = Callable[[Booking, int], None]


def loyalty_points_for(total_price: Decimal) -> int:
    """One point per ``LOYALTY_CURRENCY_PER_POINT`` spent, rounded down."""
    per_point = Decimal(settings.pricing.loyalty_currency_per_point)
    return int((total_price / per_point).to_integral_value(rounding=ROUND_FLOOR))


class BookingLifecycle:
    """
    Guarded status transitions with their side effects.

    Transitions mutate the booking in memory and never persist it; the
    caller saves the returned booking. Entering ``completed`` fires the
    optional completion hook (loyalty / customer statistics).
    """

    def __init__(
        self,
        on_completed: Optional[CompletionHook] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._on_completed = on_completed
        self._clock = clock

    def apply_transition(
        self,
        booking: Booking,
        to_status: BookingStatus,
        context: Optional[TransitionContext] = None,
        fire_hooks: bool = True,
    ) -> Booking:
        """
        Validate and apply a status change.

        Args:
            booking: The booking to mutate.
            to_status: Target status.
            context: Reason, actor, and completion details.
            fire_hooks: Set False when the caller persists first and then
                calls ``run_completion_hook`` itself.

        Returns:
            The same booking, updated.

        Raises:
            IllegalTransitionError: If the transition is not allowed.
        """
        context = context or TransitionContext()
        from_status = booking.status
        validate_transition(from_status, to_status)

        now = context.at or self._clock()
        booking.status = to_status
        booking.updated_at = now

        if to_status == BookingStatus.COMPLETED:
            booking.completed_at = now
            if context.completion_notes:
                booking.internal_notes = context.completion_notes
            if context.before_photo_urls:
                booking.before_photo_urls = list(context.before_photo_urls)
            if context.after_photo_urls:
                booking.after_photo_urls = list(context.after_photo_urls)
        elif to_status == BookingStatus.CANCELLED:
            booking.cancelled_at = now
            booking.cancelled_by = context.actor_id
            if context.reason:
                booking.cancellation_reason = context.reason

        logger.debug(
            "Booking %s: %s -> %s", booking.id, from_status.value, to_status.value,
        )

        if fire_hooks:
            self.run_completion_hook(booking)
        return booking

    def run_completion_hook(self, booking: Booking) -> None:
        """Report a completed booking to the hook. Failures are logged only."""
        if self._on_completed is None or booking.status != BookingStatus.COMPLETED:
            return
        points = loyalty_points_for(booking.total_price)
        try:
            self._on_completed(booking, points)
        except Exception:
            logger.exception(
                "Completion hook failed for booking %s (customer %s)",
                booking.id, booking.customer_id,
            )


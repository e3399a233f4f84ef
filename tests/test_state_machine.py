"""Tests for the booking status state machine."""

from decimal import Decimal
from uuid import uuid4

import pytest

from artisan_booking.errors import IllegalTransitionError, ValidationError
from artisan_booking.lifecycle.state_machine import (
    ALLOWED_TRANSITIONS,
    BookingLifecycle,
    TransitionContext,
    allowed_transitions,
    can_transition,
    loyalty_points_for,
    validate_transition,
)
from artisan_booking.schemas.booking_schema import TERMINAL_STATUSES, BookingStatus
from tests.conftest import NOW, at, make_booking


class TestTransitionTable:
    @pytest.mark.parametrize("from_status,to_status", [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.NO_SHOW),
        (BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED),
        (BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED),
    ])
    def test_legal_transition_passes(self, from_status, to_status):
        assert validate_transition(from_status, to_status) is None
        assert can_transition(from_status, to_status)

    @pytest.mark.parametrize("from_status,to_status", [
        (BookingStatus.PENDING, BookingStatus.COMPLETED),
        (BookingStatus.PENDING, BookingStatus.IN_PROGRESS),
        (BookingStatus.PENDING, BookingStatus.PENDING),
        (BookingStatus.CONFIRMED, BookingStatus.PENDING),
        (BookingStatus.IN_PROGRESS, BookingStatus.NO_SHOW),
    ])
    def test_illegal_transition_fails(self, from_status, to_status):
        with pytest.raises(IllegalTransitionError):
            validate_transition(from_status, to_status)
        assert not can_transition(from_status, to_status)

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_statuses_have_no_exits(self, terminal):
        assert allowed_transitions(terminal) == frozenset()
        for target in BookingStatus:
            with pytest.raises(IllegalTransitionError):
                validate_transition(terminal, target)

    def test_error_message_names_both_statuses(self):
        with pytest.raises(IllegalTransitionError) as exc_info:
            validate_transition(BookingStatus.COMPLETED, BookingStatus.PENDING)
        assert str(exc_info.value) == "illegal transition from completed to pending"
        assert exc_info.value.from_status == BookingStatus.COMPLETED
        assert exc_info.value.kind == "illegal_transition"
        assert isinstance(exc_info.value, ValidationError)

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            ALLOWED_TRANSITIONS[BookingStatus.COMPLETED] = frozenset({BookingStatus.PENDING})


class TestApplyTransition:
    def setup_method(self):
        self.completed = []
        self.lifecycle = BookingLifecycle(
            on_completed=lambda booking, points: self.completed.append((booking.id, points)),
            clock=lambda: NOW,
        )

    def test_confirm(self):
        booking = make_booking(at(10))
        self.lifecycle.apply_transition(booking, BookingStatus.CONFIRMED)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.updated_at == NOW
        assert booking.completed_at is None

    def test_complete_sets_side_effects_and_fires_hook(self):
        booking = make_booking(at(10), status=BookingStatus.IN_PROGRESS, total_price=Decimal("125.50"))
        context = TransitionContext(completion_notes="Replaced valve", after_photo_urls=["https://x/1.jpg"])
        self.lifecycle.apply_transition(booking, BookingStatus.COMPLETED, context)
        assert booking.status == BookingStatus.COMPLETED
        assert booking.completed_at == NOW
        assert booking.internal_notes == "Replaced valve"
        assert booking.after_photo_urls == ["https://x/1.jpg"]
        assert self.completed == [(booking.id, 12)]

    def test_cancel_records_actor_and_reason(self):
        actor = uuid4()
        booking = make_booking(at(10), status=BookingStatus.CONFIRMED)
        self.lifecycle.apply_transition(
            booking, BookingStatus.CANCELLED, TransitionContext(reason="Sick", actor_id=actor)
        )
        assert booking.cancelled_at == NOW
        assert booking.cancelled_by == actor
        assert booking.cancellation_reason == "Sick"
        assert self.completed == []

    def test_illegal_transition_leaves_booking_untouched(self):
        booking = make_booking(at(10), status=BookingStatus.COMPLETED)
        before = booking.model_copy(deep=True)
        with pytest.raises(IllegalTransitionError):
            self.lifecycle.apply_transition(booking, BookingStatus.PENDING)
        assert booking == before

    def test_hooks_can_be_deferred(self):
        booking = make_booking(at(10), status=BookingStatus.IN_PROGRESS)
        self.lifecycle.apply_transition(booking, BookingStatus.COMPLETED, fire_hooks=False)
        assert self.completed == []
        self.lifecycle.run_completion_hook(booking)
        assert self.completed == [(booking.id, 10)]

    def test_failing_hook_is_logged_not_raised(self, caplog):
        def explode(booking, points):
            raise RuntimeError("stats service down")

        lifecycle = BookingLifecycle(on_completed=explode, clock=lambda: NOW)
        booking = make_booking(at(10), status=BookingStatus.IN_PROGRESS)
        lifecycle.apply_transition(booking, BookingStatus.COMPLETED)
        assert booking.status == BookingStatus.COMPLETED
        assert "Completion hook failed" in caplog.text


class TestLoyaltyPoints:
    @pytest.mark.parametrize("total,points", [
        (Decimal("0"), 0),
        (Decimal("9.99"), 0),
        (Decimal("10.00"), 1),
        (Decimal("150.50"), 15),
    ])
    def test_one_point_per_ten(self, total, points):
        assert loyalty_points_for(total) == points

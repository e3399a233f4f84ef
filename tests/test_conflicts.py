"""Tests for conflict detection."""

import pytest

from artisan_booking.errors import InfrastructureError, ValidationError
from artisan_booking.schemas.booking_schema import BookingStatus
from artisan_booking.scheduling.conflicts import ConflictDetector, active_bookings, detect_conflicts
from artisan_booking.tools.booking import InMemoryBookingStore
from artisan_booking.utils import NIL_UUID
from tests.conftest import ARTISAN_ID, at, make_booking


class BrokenStore(InMemoryBookingStore):
    async def get_bookings_in_range(self, provider_id, start, end):
        raise RuntimeError("connection reset")


class TestDetectConflicts:
    def test_overlap_reported(self):
        existing = make_booking(at(13), 60, status=BookingStatus.CONFIRMED)
        conflicts = detect_conflicts(at(13, 30), at(15), [existing])
        assert len(conflicts) == 1
        assert conflicts[0].booking_id == existing.id
        assert conflicts[0].start == at(13)
        assert conflicts[0].end == at(14)
        assert "confirmed" in conflicts[0].reason

    def test_back_to_back_is_free(self):
        existing = make_booking(at(13), 60)
        assert detect_conflicts(at(14), at(15), [existing]) == []

    @pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.NO_SHOW])
    def test_non_blocking_statuses_ignored(self, status):
        existing = make_booking(at(13), 60, status=status)
        assert detect_conflicts(at(13), at(14), [existing]) == []

    @pytest.mark.parametrize("status", [
        BookingStatus.PENDING, BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED,
    ])
    def test_other_statuses_block(self, status):
        existing = make_booking(at(13), 60, status=status)
        assert len(detect_conflicts(at(13), at(14), [existing])) == 1

    def test_excluded_booking_ignored(self):
        existing = make_booking(at(13), 60)
        assert detect_conflicts(at(13), at(14), [existing], existing.id) == []

    def test_active_bookings_filter(self):
        keep = make_booking(at(9))
        dropped = make_booking(at(10), status=BookingStatus.CANCELLED)
        excluded = make_booking(at(11))
        assert active_bookings([keep, dropped, excluded], excluded.id) == [keep]


class TestConflictDetector:
    @pytest.mark.asyncio
    async def test_finds_conflicts_from_store(self):
        existing = make_booking(at(13), 60)
        detector = ConflictDetector(InMemoryBookingStore([existing]))
        has_conflicts, conflicts = await detector.has_conflicts(ARTISAN_ID, at(13, 30), at(15))
        assert has_conflicts
        assert [c.booking_id for c in conflicts] == [existing.id]

    @pytest.mark.asyncio
    async def test_booking_spanning_midnight_detected(self):
        late = make_booking(at(23), 120)
        detector = ConflictDetector(InMemoryBookingStore([late]))
        conflicts = await detector.find_conflicts(ARTISAN_ID, at(0, 30, days=1), at(2, days=1))
        assert len(conflicts) == 1

    @pytest.mark.asyncio
    async def test_other_artisan_not_reported(self):
        from uuid import uuid4
        other = make_booking(at(13), 60, artisan_id=uuid4())
        detector = ConflictDetector(InMemoryBookingStore([other]))
        assert await detector.find_conflicts(ARTISAN_ID, at(13), at(14)) == []

    @pytest.mark.asyncio
    async def test_inverted_window_rejected(self):
        detector = ConflictDetector(InMemoryBookingStore())
        with pytest.raises(ValidationError, match="end time"):
            await detector.find_conflicts(ARTISAN_ID, at(14), at(13))

    @pytest.mark.asyncio
    async def test_nil_artisan_rejected(self):
        detector = ConflictDetector(InMemoryBookingStore())
        with pytest.raises(ValidationError, match="artisan ID"):
            await detector.find_conflicts(NIL_UUID, at(13), at(14))

    @pytest.mark.asyncio
    async def test_store_failure_wrapped(self):
        detector = ConflictDetector(BrokenStore())
        with pytest.raises(InfrastructureError, match="connection reset"):
            await detector.find_conflicts(ARTISAN_ID, at(13), at(14))

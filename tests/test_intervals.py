"""Tests for half-open interval math and the slot grid."""

from datetime import datetime, timedelta

import pytest

from artisan_booking.scheduling.intervals import (
    covering_days,
    day_bounds,
    overlaps,
    slot_starts,
)
from tests.conftest import UTC, at


class TestOverlaps:
    def test_overlapping_windows(self):
        assert overlaps(at(9), at(11), at(10), at(12))

    def test_contained_window(self):
        assert overlaps(at(9), at(17), at(12), at(13))

    def test_touching_windows_do_not_overlap(self):
        assert not overlaps(at(9), at(10), at(10), at(11))
        assert not overlaps(at(10), at(11), at(9), at(10))

    def test_disjoint_windows(self):
        assert not overlaps(at(9), at(10), at(14), at(15))

    @pytest.mark.parametrize("a,b", [
        ((9, 11), (10, 12)),
        ((9, 10), (10, 11)),
        ((13, 14), (13, 15)),
        ((8, 9), (15, 16)),
    ])
    def test_symmetry(self, a, b):
        a_start, a_end = at(a[0]), at(a[1])
        b_start, b_end = at(b[0]), at(b[1])
        assert overlaps(a_start, a_end, b_start, b_end) == overlaps(b_start, b_end, a_start, a_end)


class TestSlotStarts:
    def test_hourly_slots_on_half_hour_grid(self):
        starts = list(slot_starts(at(9), at(17), timedelta(hours=1), timedelta(minutes=30)))
        assert starts[0] == at(9)
        assert starts[-1] == at(16)
        assert len(starts) == 15

    def test_last_slot_may_end_at_window_end(self):
        starts = list(slot_starts(at(9), at(10), timedelta(hours=1), timedelta(minutes=30)))
        assert starts == [at(9)]

    def test_duration_longer_than_window(self):
        assert list(slot_starts(at(9), at(10), timedelta(hours=2), timedelta(minutes=30))) == []

    def test_non_positive_step_rejected(self):
        with pytest.raises(ValueError, match="step"):
            list(slot_starts(at(9), at(10), timedelta(minutes=30), timedelta(0)))


class TestDayBounds:
    def test_day_bounds(self):
        start, end = day_bounds(at(13, 45))
        assert start == datetime(2030, 6, 10, tzinfo=UTC)
        assert end == datetime(2030, 6, 11, tzinfo=UTC)

    def test_covering_days_spans_midnight(self):
        start, end = covering_days(at(23), at(1, days=1))
        assert start == at(0)
        assert end == at(0, days=2)

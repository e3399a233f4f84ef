from artisan_booking.scheduling.availability import AvailabilityCalculator
from artisan_booking.scheduling.conflicts import ConflictDetector, detect_conflicts
from artisan_booking.scheduling.intervals import overlaps, slot_starts
from artisan_booking.scheduling.recurrence import RecurrenceExpander, occurrence_times

__all__ = [
    "AvailabilityCalculator",
    "ConflictDetector",
    "RecurrenceExpander",
    "detect_conflicts",
    "occurrence_times",
    "overlaps",
    "slot_starts",
]

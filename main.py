"""
Artisan booking engine entry point.

Usage:
    Console demo:  python main.py demo
    Show config:   python main.py config
"""

import logging
import sys

from artisan_booking.config import settings

logger = logging.getLogger(__name__)


def _run_demo() -> None:
    """Run the offline scenario walkthrough (no external services)."""
    from console_demo import main as demo_main

    sys.argv = [sys.argv[0]] + sys.argv[2:]
    demo_main()


def _show_config() -> None:
    scheduling = settings.scheduling
    print(f"{settings.service_name} (log level {settings.log_level})")
    print(
        f"  hours {scheduling.default_work_start}-{scheduling.default_work_end} "
        f"{scheduling.default_timezone}, {scheduling.slot_step_minutes}-minute grid"
    )
    print(
        f"  durations {scheduling.min_duration_minutes}-{scheduling.max_duration_minutes} min, "
        f"series ceiling {scheduling.recurrence_max_occurrences}"
    )


if __name__ == "__main__":
    command = sys.argv[1] if len(sys.argv) > 1 else "demo"
    if command == "demo":
        _run_demo()
    elif command == "config":
        _show_config()
    else:
        logger.error("Unknown command: %s (expected 'demo' or 'config')", command)
        sys.exit(2)

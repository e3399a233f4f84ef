"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_booking_schema(self):
        from artisan_booking.schemas.booking_schema import Booking, BookingStatus, TimeSlot
        assert BookingStatus.IN_PROGRESS == "in_progress"
        assert Booking is not None
        assert TimeSlot is not None

    def test_import_request_schema(self):
        from artisan_booking.schemas.request_schema import (
            BookingUpdate, CancelBookingRequest, CreateBookingRequest,
        )
        assert BookingUpdate().supplied() == {}

    def test_import_result_schema(self):
        from artisan_booking.schemas.result_schema import BatchResult, BookingCreation
        assert BatchResult().all_succeeded


class TestPackageImports:
    def test_scheduling_package(self):
        from artisan_booking.scheduling import (
            AvailabilityCalculator, ConflictDetector, RecurrenceExpander,
            detect_conflicts, occurrence_times, overlaps, slot_starts,
        )
        assert callable(overlaps)

    def test_lifecycle_package(self):
        from artisan_booking.lifecycle import (
            BookingLifecycle, RefundPolicy, TransitionContext,
            allowed_transitions, can_transition, is_cancellable,
            price_addons, reprice_addons, validate_transition,
        )
        assert callable(validate_transition)

    def test_orchestrator(self):
        from artisan_booking.orchestrator import BookingOrchestrator
        assert BookingOrchestrator is not None


class TestToolImports:
    def test_import_services(self):
        from artisan_booking.tools.services import SERVICE_CATALOG, load_sample_catalog
        catalog = load_sample_catalog()
        assert len(SERVICE_CATALOG) >= 3
        assert catalog.find_service("plumbing") is not None

    def test_import_in_memory_adapters(self):
        from artisan_booking.tools.availability import StaticWorkingHours
        from artisan_booking.tools.booking import InMemoryBookingStore
        from artisan_booking.tools.customer import InMemoryCustomerStats
        from artisan_booking.tools.notifications import LoggingNotifier
        from artisan_booking.tools.payments import MockPaymentGateway
        assert InMemoryBookingStore().all() == []


class TestConfigImport:
    def test_import_config(self):
        from artisan_booking.config import settings
        assert settings.scheduling.slot_step_minutes >= 1
        assert settings.pricing.default_currency


class TestConsoleDemo:
    def test_console_session_imports(self):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        assert "lifecycle" in session.SCENARIOS
        assert session.catalog.find_service("electrical") is not None

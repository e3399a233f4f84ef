"""
Offline console demo: walks through booking scenarios with in-memory collaborators.

Uses the real orchestrator, availability calculator, recurrence expander,
and lifecycle controller against the in-memory store, catalog, notifier,
and mock payment gateway. No database, no network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario recurring
    python console_demo.py --scenario conflict
"""

import argparse
import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from artisan_booking.config import settings
from artisan_booking.errors import BookingError, SlotUnavailableError
from artisan_booking.orchestrator import BookingOrchestrator
from artisan_booking.schemas.booking_schema import Booking, RecurrencePattern
from artisan_booking.schemas.request_schema import CancelBookingRequest, CreateBookingRequest
from artisan_booking.tools.availability import StaticWorkingHours
from artisan_booking.tools.booking import InMemoryBookingStore
from artisan_booking.tools.customer import InMemoryCustomerStats
from artisan_booking.tools.notifications import LoggingNotifier
from artisan_booking.tools.payments import MockPaymentGateway
from artisan_booking.tools.services import load_sample_catalog

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """Drives the orchestrator through scripted scenarios in the terminal."""

    SCENARIOS = ("lifecycle", "recurring", "conflict", "cancel")

    def __init__(self) -> None:
        self.store = InMemoryBookingStore()
        self.catalog = load_sample_catalog()
        self.customers = InMemoryCustomerStats()
        self.payments = MockPaymentGateway()
        self.orchestrator = BookingOrchestrator(
            store=self.store,
            working_hours=StaticWorkingHours(),
            catalog=self.catalog,
            notifier=LoggingNotifier(),
            payments=self.payments,
            customers=self.customers,
        )
        self.tenant_id = uuid4()
        self.artisan_id = uuid4()
        self.customer_id = uuid4()
        tomorrow = datetime.now(timezone.utc) + timedelta(days=2)
        self.day = tomorrow.replace(hour=0, minute=0, second=0, microsecond=0)

    def say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Orchestrator]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def show(self, booking: Booking) -> None:
        self.system_log(
            f"{booking.id} {booking.status_label:<11} "
            f"{booking.start_time:%a %d %b %H:%M}-{booking.end_time:%H:%M} "
            f"{booking.total_price} {booking.currency}"
        )

    def at(self, hour: int, minute: int = 0, days: int = 0) -> datetime:
        return self.day + timedelta(days=days, hours=hour, minutes=minute)

    def request(self, start: datetime, duration: int = 60, **kwargs) -> CreateBookingRequest:
        service = self.catalog.find_service("plumbing")
        return CreateBookingRequest(
            tenant_id=self.tenant_id,
            artisan_id=self.artisan_id,
            customer_id=self.customer_id,
            service_id=service.id,
            start_time=start,
            duration_minutes=duration,
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    async def scenario_lifecycle(self) -> None:
        service = self.catalog.find_service("plumbing")
        addons = [a.id for a in self.catalog.addons_for(service.id)]
        creation = await self.orchestrator.create_booking(
            self.request(self.at(10), selected_addons=addons)
        )
        booking = creation.booking
        self.say("Booked a plumbing visit with two addons.")
        self.show(booking)

        for step in (self.orchestrator.confirm_booking, self.orchestrator.start_booking):
            booking = await step(booking.id)
            self.show(booking)

        booking = await self.orchestrator.complete_booking(
            booking.id, {"completion_notes": "Replaced washer", "quality_rating": 5}
        )
        self.show(booking)
        stats = self.customers.get(self.customer_id)
        self.say(f"Customer earned loyalty points, balance now {stats.loyalty_points}.")

    async def scenario_recurring(self) -> None:
        creation = await self.orchestrator.create_booking(self.request(
            self.at(9),
            is_recurring=True,
            recurrence_pattern=RecurrencePattern.WEEKLY,
            recurrence_occurrences=4,
        ))
        self.say(f"Weekly series created with {creation.recurring_created} follow-up visits.")
        for booking in await self.orchestrator.get_recurring_series(creation.booking.id):
            self.show(booking)

    async def scenario_conflict(self) -> None:
        await self.orchestrator.create_booking(self.request(self.at(13)))
        self.say("Existing booking 13:00-14:00. Trying 13:30 for 90 minutes...")
        try:
            await self.orchestrator.create_booking(self.request(self.at(13, 30), duration=90))
        except SlotUnavailableError as exc:
            print(f"{YELLOW}  Rejected: {exc}{RESET}")
            for conflict in exc.conflicts:
                self.system_log(f"{conflict.start:%H:%M}-{conflict.end:%H:%M} {conflict.reason}")

        slots = await self.orchestrator.get_available_slots(self.artisan_id, self.at(9), 60)
        self.say("Free 60-minute slots that day: " + ", ".join(f"{s.start:%H:%M}" for s in slots))

    async def scenario_cancel(self) -> None:
        creation = await self.orchestrator.create_booking(self.request(
            self.at(15),
            requires_deposit=True,
            deposit_amount=Decimal("50.00"),
            payment_method_id="pm_card_visa",
        ))
        booking = creation.booking
        self.say(f"Booked with a {booking.deposit_paid} deposit ({booking.payment_intent_id}).")
        booking = await self.orchestrator.cancel_booking(booking.id, CancelBookingRequest(
            reason="Customer fixed it themselves",
            cancelled_by=self.customer_id,
            refund_requested=True,
            notify_customer=True,
        ))
        self.show(booking)
        self.say(f"Refund {booking.refund_id}, payment status {booking.payment_status.value}.")

    # ------------------------------------------------------------------ #

    async def run_scenario(self, scenario: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  ARTISAN BOOKING - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Service: {settings.service_name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        try:
            await getattr(self, f"scenario_{scenario}")()
        except BookingError as exc:
            print(f"{RED}  {exc.kind}: {exc}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run(self) -> None:
        for scenario in self.SCENARIOS:
            await self.run_scenario(scenario)


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=ConsoleSession.SCENARIOS,
        default=None,
        help="Play a single scenario instead of all of them",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()

"""
Mock payment gateway.

In production, this would call the payment processor (Stripe payment
intents and refunds). Set ``fail_next`` to simulate a processor outage.
"""

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from artisan_booking.ports import PaymentGateway
from artisan_booking.schemas.booking_schema import Booking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentRecord:
    reference: str
    booking_id: UUID
    amount: Decimal
    kind: str


class PaymentGatewayDown(RuntimeError):
    """Raised by the mock gateway when a failure was requested."""


class MockPaymentGateway(PaymentGateway):
    def __init__(self) -> None:
        self.records: list[PaymentRecord] = []
        self.fail_next = False

    async def capture_deposit(
        self, booking: Booking, amount: Decimal, payment_method_id: str
    ) -> str:
        self._maybe_fail("capture")
        reference = f"PI-{uuid.uuid4().hex[:10].upper()}"
        self.records.append(PaymentRecord(reference, booking.id, amount, "deposit"))
        logger.info(
            "Deposit captured: %s %s %s via %s",
            reference, amount, booking.currency, payment_method_id,
        )
        return reference

    async def refund(self, booking: Booking, amount: Decimal, reason: str) -> str:
        self._maybe_fail("refund")
        reference = f"RF-{uuid.uuid4().hex[:10].upper()}"
        self.records.append(PaymentRecord(reference, booking.id, amount, "refund"))
        logger.info("Refund issued: %s %s %s (%s)", reference, amount, booking.currency, reason)
        return reference

    def reset(self) -> None:
        self.records.clear()
        self.fail_next = False

    def _maybe_fail(self, action: str) -> None:
        if self.fail_next:
            self.fail_next = False
            raise PaymentGatewayDown(f"payment processor unavailable during {action}")

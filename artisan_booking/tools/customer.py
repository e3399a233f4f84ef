"""
Mock customer statistics.

In production, this would update the CRM customer record (total spend,
booking count, loyalty balance) owned by the customer service.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from artisan_booking.ports import CustomerStats

logger = logging.getLogger(__name__)


@dataclass
class CustomerRecord:
    """Running totals kept per customer."""
    completed_bookings: int = 0
    total_spent: Decimal = Decimal("0.00")
    loyalty_points: int = 0


class InMemoryCustomerStats(CustomerStats):
    def __init__(self) -> None:
        self._customers: dict[UUID, CustomerRecord] = {}

    def record_booking(
        self, customer_id: UUID, booking_value: Decimal, loyalty_points: int
    ) -> None:
        record = self._customers.setdefault(customer_id, CustomerRecord())
        record.completed_bookings += 1
        record.total_spent += booking_value
        record.loyalty_points += loyalty_points
        logger.info(
            "Customer %s: +%s spent, +%d loyalty points (balance %d)",
            customer_id, booking_value, loyalty_points, record.loyalty_points,
        )

    def get(self, customer_id: UUID) -> CustomerRecord:
        return self._customers.get(customer_id, CustomerRecord())

    def reset(self) -> None:
        """Clear all customer totals. Used by test fixtures for isolation."""
        self._customers.clear()

"""
Booking pricing: addon re-pricing and the refund policy.

Re-pricing always starts from the booking's base price and the current
price of each selected addon, so running it twice with the same addon set
gives the same total.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from artisan_booking.config import PricingConfig, settings
from artisan_booking.errors import guard_store
from artisan_booking.ports import CatalogLookup
from artisan_booking.schemas.booking_schema import Booking
from artisan_booking.utils import to_money

logger = logging.getLogger(__name__)


async def price_addons(addon_ids: Iterable[UUID], catalog: CatalogLookup) -> Decimal:
    """Sum the current price of each addon. Unknown addons are skipped."""
    total = Decimal("0")
    for addon_id in addon_ids:
        price = await guard_store(catalog.get_addon_price(addon_id), "fetching addon price")
        if price is None:
            logger.warning("Addon not found, excluded from price: %s", addon_id)
            continue
        total += price
    return to_money(total)


async def reprice_addons(
    booking: Booking, addon_ids: list[UUID], catalog: CatalogLookup
) -> Booking:
    """Replace the addon selection and recompute ``addons_price``/``total_price``."""
    addons_price = await price_addons(addon_ids, catalog)
    booking.selected_addons = list(addon_ids)
    booking.addons_price = addons_price
    booking.total_price = to_money(booking.base_price + addons_price)
    return booking


def is_cancellable(booking: Booking) -> bool:
    """Completed, cancelled and no-show bookings cannot be cancelled."""
    return booking.can_be_cancelled


@dataclass(frozen=True)
class RefundTier:
    min_hours_before_start: float
    rate: Decimal


class RefundPolicy:
    """
    Tiered refund of the deposit based on notice given before the start.

    Defaults: 24h or more 100%, 12h or more 75%, 6h or more 50%, else nothing.
    """

    def __init__(self, config: Optional[PricingConfig] = None) -> None:
        config = config or settings.pricing
        self.tiers: tuple[RefundTier, ...] = (
            RefundTier(config.refund_full_hours, Decimal("1")),
            RefundTier(config.refund_partial_hours, Decimal(str(config.refund_partial_rate))),
            RefundTier(config.refund_minimal_hours, Decimal(str(config.refund_minimal_rate))),
        )

    def refund_rate(self, booking: Booking, now: datetime) -> Decimal:
        hours_until = (booking.start_time - now).total_seconds() / 3600
        for tier in self.tiers:
            if hours_until >= tier.min_hours_before_start:
                return tier.rate
        return Decimal("0")

    def refundable_amount(self, booking: Booking, now: datetime) -> Decimal:
        """Portion of ``deposit_paid`` still returnable if cancelled at ``now``.

        Anything already refunded counts against the tier amount.
        """
        if booking.deposit_paid <= 0:
            return Decimal("0.00")
        due = to_money(booking.deposit_paid * self.refund_rate(booking, now))
        return max(due - booking.refunded_amount, Decimal("0.00"))

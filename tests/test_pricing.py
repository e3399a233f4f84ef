"""Tests for addon re-pricing and the refund policy."""

from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from artisan_booking.config import PricingConfig
from artisan_booking.errors import InfrastructureError
from artisan_booking.lifecycle.pricing import RefundPolicy, is_cancellable, price_addons, reprice_addons
from artisan_booking.schemas.booking_schema import BookingStatus
from artisan_booking.tools.services import InMemoryCatalog
from tests.conftest import at, make_booking


class BrokenCatalog(InMemoryCatalog):
    async def get_addon(self, addon_id):
        raise ConnectionError("catalog unreachable")


class TestReprice:
    @pytest.mark.asyncio
    async def test_total_is_base_plus_addons(self, catalog, addons):
        booking = make_booking(at(10), total_price=Decimal("100.00"))
        await reprice_addons(booking, [a.id for a in addons], catalog)
        assert booking.addons_price == Decimal("50.50")
        assert booking.total_price == Decimal("150.50")
        assert booking.selected_addons == [a.id for a in addons]

    @pytest.mark.asyncio
    async def test_idempotent(self, catalog, addons):
        booking = make_booking(at(10))
        ids = [a.id for a in addons]
        await reprice_addons(booking, ids, catalog)
        first = (booking.addons_price, booking.total_price)
        await reprice_addons(booking, ids, catalog)
        assert (booking.addons_price, booking.total_price) == first

    @pytest.mark.asyncio
    async def test_removing_addons_restores_base(self, catalog, addons):
        booking = make_booking(at(10))
        await reprice_addons(booking, [a.id for a in addons], catalog)
        await reprice_addons(booking, [], catalog)
        assert booking.addons_price == Decimal("0.00")
        assert booking.total_price == booking.base_price

    @pytest.mark.asyncio
    async def test_unknown_addon_skipped(self, catalog, addons, caplog):
        total = await price_addons([addons[0].id, uuid4()], catalog)
        assert total == Decimal("20.00")
        assert "Addon not found" in caplog.text

    @pytest.mark.asyncio
    async def test_uses_current_addon_price(self, catalog, addons):
        booking = make_booking(at(10))
        catalog.set_addon_price(addons[0].id, Decimal("25.00"))
        await reprice_addons(booking, [addons[0].id], catalog)
        assert booking.total_price == Decimal("125.00")

    @pytest.mark.asyncio
    async def test_catalog_failure_wrapped(self):
        with pytest.raises(InfrastructureError, match="catalog unreachable"):
            await price_addons([uuid4()], BrokenCatalog())


class TestRefundPolicy:
    def setup_method(self):
        self.policy = RefundPolicy(PricingConfig())
        self.booking = make_booking(at(10), deposit_paid=Decimal("80.00"))

    @pytest.mark.parametrize("hours_before,expected", [
        (48, Decimal("80.00")),
        (24, Decimal("80.00")),
        (13, Decimal("60.00")),
        (12, Decimal("60.00")),
        (7, Decimal("40.00")),
        (5, Decimal("0.00")),
        (-1, Decimal("0.00")),
    ])
    def test_tiers(self, hours_before, expected):
        now = self.booking.start_time - timedelta(hours=hours_before)
        assert self.policy.refundable_amount(self.booking, now) == expected

    def test_no_deposit_no_refund(self):
        booking = make_booking(at(10))
        assert self.policy.refundable_amount(booking, at(0, days=-5)) == Decimal("0.00")

    def test_already_refunded_counts_against_cap(self):
        now = self.booking.start_time - timedelta(hours=13)
        self.booking.refunded_amount = Decimal("45.00")
        assert self.policy.refundable_amount(self.booking, now) == Decimal("15.00")
        self.booking.refunded_amount = Decimal("80.00")
        assert self.policy.refundable_amount(self.booking, now) == Decimal("0.00")

    def test_configurable_tiers(self):
        policy = RefundPolicy(replace(PricingConfig(), refund_full_hours=72))
        now = self.booking.start_time - timedelta(hours=48)
        assert policy.refundable_amount(self.booking, now) == Decimal("60.00")

    @pytest.mark.parametrize("status,expected", [
        (BookingStatus.PENDING, True),
        (BookingStatus.IN_PROGRESS, True),
        (BookingStatus.COMPLETED, False),
        (BookingStatus.NO_SHOW, False),
    ])
    def test_is_cancellable(self, status, expected):
        assert is_cancellable(make_booking(at(10), status=status)) is expected

"""Service catalog with pricing, durations, and addons."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from artisan_booking.errors import NotFoundError
from artisan_booking.ports import CatalogLookup
from artisan_booking.schemas.booking_schema import Addon, Service

logger = logging.getLogger(__name__)

# Sample trades used by the console demo
SERVICE_CATALOG: dict[str, dict] = {
    "plumbing": {
        "name": "Plumbing Service",
        "price": Decimal("120.00"),
        "duration_minutes": 60,
        "addons": {"Hot water system check": Decimal("45.00"), "Tap washer kit": Decimal("15.00")},
    },
    "electrical": {
        "name": "Electrical Service",
        "price": Decimal("150.00"),
        "duration_minutes": 90,
        "addons": {"Safety inspection report": Decimal("60.00")},
    },
    "general handyman": {
        "name": "General Handyman",
        "price": Decimal("80.00"),
        "duration_minutes": 60,
        "addons": {"Furniture assembly": Decimal("40.00"), "Haul-away": Decimal("35.00")},
    },
}


class InMemoryCatalog(CatalogLookup):
    """Dict-backed service and addon lookup."""

    def __init__(self) -> None:
        self._services: dict[UUID, Service] = {}
        self._addons: dict[UUID, Addon] = {}

    def add_service(self, service: Service) -> Service:
        self._services[service.id] = service
        return service

    def add_addon(self, addon: Addon) -> Addon:
        self._addons[addon.id] = addon
        return addon

    def set_addon_price(self, addon_id: UUID, price: Decimal) -> None:
        addon = self._addons[addon_id]
        self._addons[addon_id] = addon.model_copy(update={"price": price})

    async def get_service(self, service_id: UUID) -> Service:
        service = self._services.get(service_id)
        if service is None or not service.is_active:
            raise NotFoundError(f"service {service_id} not found")
        return service

    async def get_addon(self, addon_id: UUID) -> Optional[Addon]:
        addon = self._addons.get(addon_id)
        if addon is None or not addon.is_active:
            return None
        return addon

    def find_service(self, name: str) -> Optional[Service]:
        """Match a service by case-insensitive name fragment."""
        normalized = name.lower().strip()
        for service in self._services.values():
            if normalized in service.name.lower():
                return service
        return None

    def addons_for(self, service_id: UUID) -> list[Addon]:
        return [a for a in self._addons.values() if a.service_id == service_id and a.is_active]

    def reset(self) -> None:
        self._services.clear()
        self._addons.clear()


def load_sample_catalog(catalog: Optional[InMemoryCatalog] = None) -> InMemoryCatalog:
    """Populate a catalog from ``SERVICE_CATALOG``."""
    catalog = catalog or InMemoryCatalog()
    for info in SERVICE_CATALOG.values():
        service = catalog.add_service(Service(
            name=info["name"],
            price=info["price"],
            duration_minutes=info["duration_minutes"],
        ))
        for addon_name, price in info["addons"].items():
            catalog.add_addon(Addon(service_id=service.id, name=addon_name, price=price))
    logger.debug("Loaded %d sample services", len(SERVICE_CATALOG))
    return catalog

"""Service layer wiring."""

from dataclasses import dataclass
from typing import Any

from adledger.domain import ChargeMode
from adledger.services.aggregation_service import AggregationService
from adledger.services.booking_service import BookingFilter, BookingLedgerService
from adledger.services.common import Clock, utc_now
from adledger.services.label_service import LabelService
from adledger.services.leaflet_service import LeafletDeliveryService, LeafletFilter
from adledger.services.magazine_service import MagazineCatalogService
from adledger.services.pricing_service import PricingService
from adledger.services.schedule_service import ScheduleService
from adledger.stores.interfaces import LedgerStore


@dataclass(frozen=True)
class LedgerServices:
    schedules: ScheduleService
    magazines: MagazineCatalogService
    pricing: PricingService
    labels: LabelService
    bookings: BookingLedgerService
    leaflets: LeafletDeliveryService
    aggregation: AggregationService


def build_services(
    store: LedgerStore, options: dict[str, Any], clock: Clock = utc_now
) -> LedgerServices:
    """Wire every service against one store using ledger settings."""
    labels = LabelService(
        store,
        store,
        default_content_types=options["DEFAULT_CONTENT_TYPES"],
        default_business_types=options["DEFAULT_BUSINESS_TYPES"],
    )
    magazines = MagazineCatalogService(
        store,
        store,
        store,
        default_page_count=options["DEFAULT_PAGE_COUNT"],
        clock=clock,
    )
    return LedgerServices(
        schedules=ScheduleService(store, clock=clock),
        magazines=magazines,
        pricing=PricingService(store, store, store, clock=clock),
        labels=labels,
        bookings=BookingLedgerService(
            store,
            store,
            store,
            store,
            labels,
            default_charge_mode=ChargeMode(options["CHARGE_MODE"]),
            clock=clock,
        ),
        leaflets=LeafletDeliveryService(store, store, store, clock=clock),
        aggregation=AggregationService(magazines, store, store, store, store, clock=clock),
    )


__all__ = [
    "AggregationService",
    "BookingFilter",
    "BookingLedgerService",
    "LabelService",
    "LeafletDeliveryService",
    "LeafletFilter",
    "LedgerServices",
    "MagazineCatalogService",
    "PricingService",
    "ScheduleService",
    "build_services",
]

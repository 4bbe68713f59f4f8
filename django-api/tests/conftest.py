"""Pytest configuration and shared fixtures."""

from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from adledger.conf import DEFAULTS
from adledger.services import LedgerServices, build_services
from adledger.stores import InMemoryLedgerStore
from factories import NOW, OWNER, monthly_issues


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def services(store: InMemoryLedgerStore, clock) -> LedgerServices:
    return build_services(store, dict(DEFAULTS), clock=clock)


@pytest.fixture
def seeded(services: LedgerServices) -> LedgerServices:
    services.labels.seed_defaults(OWNER)
    return services


@pytest.fixture
def monthly(seeded: LedgerServices):
    return seeded.schedules.create_schedule(OWNER, "Monthly", monthly_issues())


@pytest.fixture
def local(seeded: LedgerServices, monthly):
    return seeded.magazines.create_magazine(
        OWNER, "Local", str(monthly.id), {"Jan26": 40, "Feb26": 40}
    )


@pytest.fixture
def quarter_page(seeded: LedgerServices, local):
    return seeded.pricing.create_content_size(
        OWNER, "Quarter page", Decimal("0.25"), {str(local.id): Decimal("100.00")}
    )


@pytest.fixture
def half_page(seeded: LedgerServices, local):
    return seeded.pricing.create_content_size(
        OWNER, "Half page", Decimal("0.5"), {str(local.id): Decimal("180.00")}
    )

"""Unit tests for LeafletDeliveryService.

Run with: pytest tests/test_leaflet_service.py -v
"""

import pytest
from datetime import timedelta
from decimal import Decimal
from itertools import count

from adledger.conf import DEFAULTS
from adledger.domain import BookingStatus, LeafletDraft
from adledger.domain.errors import (
    ErrorCode,
    NotFoundError,
    ProtectedError,
    UnknownIssueError,
    ValidationError,
)
from adledger.services import LeafletFilter, LedgerServices, build_services
from adledger.stores import InMemoryLedgerStore
from factories import NOW, OTHER_OWNER, OWNER, monthly_issues


def draft(magazine, **overrides) -> LeafletDraft:
    fields = {"issue_name": "Feb26", "description": "Garden centre flyer", "price": Decimal("50")}
    fields.update(overrides)
    return LeafletDraft(str(magazine.id), **fields)


class TestCreateDelivery:
    """Tests for LeafletDeliveryService.create_delivery."""

    def test_net_value_applies_discounts_and_charges(self, seeded: LedgerServices, local):
        delivery = seeded.leaflets.create_delivery(
            OWNER,
            "cust-1",
            draft(
                local,
                quantity=2000,
                price=Decimal("200"),
                discount_percentage=Decimal("10"),
                discount_value=Decimal("5"),
                additional_charges=Decimal("15"),
            ),
        )
        assert delivery.net_value.amount == Decimal("190.00")
        assert delivery.quantity == 2000
        assert delivery.status is BookingStatus.ACTIVE
        assert delivery.created_at == NOW

    def test_stored_and_retrievable(self, seeded: LedgerServices, local):
        delivery = seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local, notes=" Fold "))
        fetched = seeded.leaflets.get_delivery(OWNER, str(delivery.id))
        assert fetched == delivery
        assert fetched.notes == "Fold"

    def test_quantity_must_be_positive(self, seeded: LedgerServices, local):
        with pytest.raises(ValidationError) as exc:
            seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local, quantity=0))
        assert exc.value.field == "quantity"

    def test_customer_is_required(self, seeded: LedgerServices, local):
        with pytest.raises(ValidationError) as exc:
            seeded.leaflets.create_delivery(OWNER, "  ", draft(local))
        assert exc.value.field == "customer_ref"

    def test_description_is_required(self, seeded: LedgerServices, local):
        with pytest.raises(ValidationError):
            seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local, description=""))

    def test_issue_must_be_in_the_magazine_schedule(self, seeded: LedgerServices, local):
        with pytest.raises(UnknownIssueError):
            seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local, issue_name="Jul26"))

    def test_unknown_magazine(self, seeded: LedgerServices, local):
        with pytest.raises(NotFoundError):
            seeded.leaflets.create_delivery(
                OWNER,
                "cust-1",
                LeafletDraft(
                    "3f1e0c1a-0000-4000-8000-000000000000", "Feb26", "Flyer", Decimal("1")
                ),
            )

    def test_negative_price_is_rejected(self, seeded: LedgerServices, local):
        with pytest.raises(ValidationError):
            seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local, price=Decimal("-1")))


class TestUpdateDelivery:
    """Tests for LeafletDeliveryService.update_delivery."""

    def test_replaces_fields_and_keeps_created_at(self, local, store, seeded):
        created = seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local))
        later = build_services(store, dict(DEFAULTS), clock=lambda: NOW + timedelta(hours=1))

        updated = later.leaflets.update_delivery(
            OWNER, str(created.id), "cust-2", draft(local, issue_name="Jan26", price=Decimal("80"))
        )

        assert updated.id == created.id
        assert updated.customer_ref == "cust-2"
        assert updated.issue_name == "Jan26"
        assert updated.net_value.amount == Decimal("80.00")
        assert updated.created_at == NOW
        assert updated.updated_at == NOW + timedelta(hours=1)

    def test_status_is_kept_unless_given(self, seeded: LedgerServices, local):
        created = seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local))
        cancelled = seeded.leaflets.update_delivery(
            OWNER, str(created.id), "cust-1", draft(local), status=BookingStatus.CANCELLED
        )
        assert cancelled.status is BookingStatus.CANCELLED
        again = seeded.leaflets.update_delivery(OWNER, str(created.id), "cust-1", draft(local))
        assert again.status is BookingStatus.CANCELLED

    def test_failed_update_leaves_delivery_unchanged(self, seeded: LedgerServices, local):
        created = seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local))
        with pytest.raises(ValidationError):
            seeded.leaflets.update_delivery(
                OWNER, str(created.id), "cust-9", draft(local, quantity=-3)
            )
        assert seeded.leaflets.get_delivery(OWNER, str(created.id)) == created


class TestDeleteDelivery:
    """Tests for LeafletDeliveryService.delete_delivery."""

    def test_delete_removes_delivery(self, seeded: LedgerServices, local):
        created = seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local))
        seeded.leaflets.delete_delivery(OWNER, str(created.id))
        with pytest.raises(NotFoundError):
            seeded.leaflets.get_delivery(OWNER, str(created.id))

    def test_other_owner_cannot_see_or_delete(self, seeded: LedgerServices, local):
        created = seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local))
        with pytest.raises(NotFoundError):
            seeded.leaflets.delete_delivery(OTHER_OWNER, str(created.id))

    def test_magazine_with_a_delivery_cannot_be_deleted(self, seeded: LedgerServices, local):
        seeded.leaflets.create_delivery(OWNER, "cust-1", draft(local))
        with pytest.raises(ProtectedError) as exc:
            seeded.magazines.delete_magazine(OWNER, str(local.id))
        assert exc.value.code is ErrorCode.MAGAZINE_IN_USE


class TestListDeliveries:
    """Tests for LeafletDeliveryService.list_deliveries and report."""

    @pytest.fixture
    def ticking(self) -> LedgerServices:
        ticks = count()
        return build_services(
            InMemoryLedgerStore(),
            dict(DEFAULTS),
            clock=lambda: NOW + timedelta(seconds=next(ticks)),
        )

    @pytest.fixture
    def magazine(self, ticking: LedgerServices):
        schedule = ticking.schedules.create_schedule(OWNER, "Monthly", monthly_issues())
        return ticking.magazines.create_magazine(OWNER, "Local", str(schedule.id))

    def test_newest_first(self, ticking: LedgerServices, magazine):
        first = ticking.leaflets.create_delivery(OWNER, "cust-1", draft(magazine))
        second = ticking.leaflets.create_delivery(OWNER, "cust-2", draft(magazine))
        listed = ticking.leaflets.list_deliveries(OWNER)
        assert [d.id for d in listed] == [second.id, first.id]

    def test_filters_combine(self, ticking: LedgerServices, magazine):
        ticking.leaflets.create_delivery(OWNER, "cust-1", draft(magazine))
        wanted = ticking.leaflets.create_delivery(
            OWNER, "cust-1", draft(magazine, issue_name="Mar26")
        )
        ticking.leaflets.create_delivery(OWNER, "cust-2", draft(magazine, issue_name="Mar26"))

        listed = ticking.leaflets.list_deliveries(
            OWNER,
            LeafletFilter(
                customer_ref="cust-1", magazine_id=str(magazine.id), issue_name="Mar26"
            ),
        )
        assert [d.id for d in listed] == [wanted.id]

    def test_status_filter(self, ticking: LedgerServices, magazine):
        kept = ticking.leaflets.create_delivery(OWNER, "cust-1", draft(magazine))
        other = ticking.leaflets.create_delivery(OWNER, "cust-1", draft(magazine))
        ticking.leaflets.update_delivery(
            OWNER, str(other.id), "cust-1", draft(magazine), status=BookingStatus.CANCELLED
        )
        listed = ticking.leaflets.list_deliveries(
            OWNER, LeafletFilter(status=BookingStatus.ACTIVE)
        )
        assert [d.id for d in listed] == [kept.id]

    def test_report_rows_and_total(self, ticking: LedgerServices, magazine):
        ticking.leaflets.create_delivery(OWNER, "cust-1", draft(magazine, price=Decimal("50")))
        ticking.leaflets.create_delivery(
            OWNER, "cust-2", draft(magazine, quantity=500, price=Decimal("75.50"))
        )

        report = ticking.leaflets.report(OWNER)

        assert report.total == 2
        assert report.total_value.amount == Decimal("125.50")
        newest = report.rows[0]
        assert newest.customer_ref == "cust-2"
        assert newest.magazine_name == "Local"
        assert newest.quantity == 500

    def test_report_honours_filters(self, ticking: LedgerServices, magazine):
        ticking.leaflets.create_delivery(OWNER, "cust-1", draft(magazine))
        report = ticking.leaflets.report(OWNER, LeafletFilter(customer_ref="nobody"))
        assert report.rows == ()
        assert report.total_value.amount == Decimal("0.00")

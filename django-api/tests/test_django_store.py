"""Integration tests for the Django ORM store.

Run with: pytest tests/test_django_store.py -v
"""

import pytest
from decimal import Decimal

from adledger import models
from adledger.conf import DEFAULTS
from adledger.domain import (
    EntryDraft,
    Label,
    LabelId,
    LabelKind,
    LeafletDraft,
    Magazine,
    MagazineId,
)
from adledger.domain.errors import DuplicateError, UnknownIssueError
from adledger.services import LedgerServices, build_services
from adledger.stores.django_store import DjangoLedgerStore
from factories import NOW, OWNER, monthly_issues


@pytest.fixture
def db_store() -> DjangoLedgerStore:
    return DjangoLedgerStore()


@pytest.fixture
def ledger(db_store: DjangoLedgerStore) -> LedgerServices:
    services = build_services(db_store, dict(DEFAULTS), clock=lambda: NOW)
    services.labels.seed_defaults(OWNER)
    return services


@pytest.fixture
def catalog(ledger: LedgerServices):
    schedule = ledger.schedules.create_schedule(OWNER, "Monthly", monthly_issues())
    magazine = ledger.magazines.create_magazine(
        OWNER, "Local", str(schedule.id), {"Jan26": 40, "Feb26": 40}
    )
    quarter = ledger.pricing.create_content_size(
        OWNER, "Quarter page", "0.25", {str(magazine.id): "100"}
    )
    half = ledger.pricing.create_content_size(
        OWNER, "Half page", "0.5", {str(magazine.id): "180"}
    )
    return schedule, magazine, quarter, half


@pytest.mark.django_db
class TestScheduleStorage:
    """Tests for schedule persistence."""

    def test_round_trip_keeps_order_and_keys(self, ledger: LedgerServices, catalog):
        schedule = catalog[0]
        stored = ledger.schedules.get_schedule(OWNER, str(schedule.id))
        assert stored.issues == schedule.issues
        assert [issue.key.disambiguator for issue in stored.issues] == [0, 1, 2, 3]

    def test_update_replaces_issue_rows(self, ledger: LedgerServices, catalog):
        schedule = catalog[0]
        ledger.schedules.update_schedule(OWNER, str(schedule.id), monthly_issues()[:3])
        assert models.ScheduleIssue.objects.filter(schedule_id=schedule.id.value).count() == 3

    def test_removed_issue_deletes_page_configuration_rows(
        self, ledger: LedgerServices, catalog
    ):
        schedule, magazine = catalog[0], catalog[1]
        dec, jan, _, mar = monthly_issues()
        ledger.schedules.update_schedule(OWNER, str(schedule.id), [dec, jan, mar])
        rows = models.PageConfiguration.objects.filter(magazine_id=magazine.id.value)
        assert list(rows.values_list("issue_name", flat=True)) == ["Jan26"]

    def test_in_use_check(self, db_store: DjangoLedgerStore, catalog):
        assert db_store.schedule_in_use(catalog[0].id)


@pytest.mark.django_db
class TestMagazineStorage:
    """Tests for magazine persistence."""

    def test_page_configurations_round_trip(self, ledger: LedgerServices, catalog):
        magazine = catalog[1]
        assert ledger.magazines.get_magazine(OWNER, str(magazine.id)) == magazine

    def test_duplicate_name_hits_unique_constraint(self, db_store: DjangoLedgerStore, catalog):
        schedule, magazine = catalog[0], catalog[1]
        clash = Magazine(
            id=MagazineId.new(),
            owner_id=OWNER,
            name=magazine.name,
            schedule_id=schedule.id,
            page_configurations={},
            created_at=NOW,
        )
        with pytest.raises(DuplicateError):
            db_store.save_magazine(clash)
        assert models.Magazine.objects.count() == 1


@pytest.mark.django_db
class TestLabelStorage:
    """Tests for label persistence and seeding."""

    def test_ensure_labels_is_idempotent(self, db_store: DjangoLedgerStore, ledger):
        assert ledger.labels.seed_defaults(OWNER) == 0
        assert models.Label.objects.filter(owner_id=OWNER).count() == 6

    def test_ensure_labels_counts_new_rows(self, db_store: DjangoLedgerStore):
        labels = [
            Label(LabelId.new(), LabelKind.BUSINESS_TYPE, OWNER, "Retail"),
            Label(LabelId.new(), LabelKind.BUSINESS_TYPE, OWNER, "Trades"),
        ]
        assert db_store.ensure_labels(labels) == 2
        again = [Label(LabelId.new(), LabelKind.BUSINESS_TYPE, OWNER, "Retail")]
        assert db_store.ensure_labels(again) == 0

    def test_save_label_duplicate_name(self, db_store: DjangoLedgerStore, ledger):
        clash = Label(LabelId.new(), LabelKind.CONTENT_TYPE, OWNER, "Advert")
        with pytest.raises(DuplicateError):
            db_store.save_label(clash)

    def test_label_names_are_unique_ignoring_case(self, db_store: DjangoLedgerStore, ledger):
        assert db_store.find_label_by_name(OWNER, LabelKind.CONTENT_TYPE, "advert").name == "Advert"
        clash = Label(LabelId.new(), LabelKind.CONTENT_TYPE, OWNER, "ADVERT")
        with pytest.raises(DuplicateError):
            db_store.save_label(clash)

    def test_ensure_labels_skips_case_variants(self, db_store: DjangoLedgerStore):
        labels = [
            Label(LabelId.new(), LabelKind.BUSINESS_TYPE, OWNER, "Retail"),
            Label(LabelId.new(), LabelKind.BUSINESS_TYPE, OWNER, "retail"),
        ]
        assert db_store.ensure_labels(labels) == 1
        again = [Label(LabelId.new(), LabelKind.BUSINESS_TYPE, OWNER, "RETAIL")]
        assert db_store.ensure_labels(again) == 0

    def test_ensure_labels_does_not_count_rows_lost_to_a_concurrent_seed(
        self, db_store: DjangoLedgerStore, monkeypatch
    ):
        original = models.Label.objects.bulk_create

        def bulk_create_after_other_writer(objs, **kwargs):
            models.Label.objects.create(owner_id=OWNER, kind="business_type", name="Retail")
            return original(objs, **kwargs)

        monkeypatch.setattr(models.Label.objects, "bulk_create", bulk_create_after_other_writer)
        labels = [
            Label(LabelId.new(), LabelKind.BUSINESS_TYPE, OWNER, "Retail"),
            Label(LabelId.new(), LabelKind.BUSINESS_TYPE, OWNER, "Trades"),
        ]
        assert db_store.ensure_labels(labels) == 1
        assert models.Label.objects.filter(owner_id=OWNER, kind="business_type").count() == 2


@pytest.mark.django_db
class TestBookingStorage:
    """Tests for booking persistence."""

    def test_booking_round_trip(self, ledger: LedgerServices, catalog):
        _, magazine, quarter, half = catalog
        booking = ledger.bookings.create_booking(
            OWNER,
            "cust-1",
            [
                EntryDraft(str(magazine.id), str(quarter.id), "Advert", "Feb26"),
                EntryDraft(str(magazine.id), str(half.id), "Article", "Jan26", is_ongoing=True),
            ],
            additional_charges="20",
        )
        stored = ledger.bookings.get_booking(OWNER, str(booking.id))
        assert stored == booking
        row = models.Booking.objects.get(pk=booking.id.value)
        assert row.total_value == Decimal("300.00")

    def test_update_replaces_entry_rows(self, ledger: LedgerServices, catalog):
        _, magazine, quarter, half = catalog
        booking = ledger.bookings.create_booking(
            OWNER,
            "cust-1",
            [
                EntryDraft(str(magazine.id), str(quarter.id), "Advert", "Feb26"),
                EntryDraft(str(magazine.id), str(half.id), "Article", "Feb26"),
            ],
        )
        ledger.bookings.update_booking(
            OWNER,
            str(booking.id),
            [EntryDraft(str(magazine.id), str(half.id), "Article", "Mar26")],
        )
        assert models.BookingEntry.objects.filter(booking_id=booking.id.value).count() == 1

    def test_failed_booking_writes_nothing(self, ledger: LedgerServices, catalog):
        _, magazine, quarter, _ = catalog
        with pytest.raises(UnknownIssueError):
            ledger.bookings.create_booking(
                OWNER,
                "cust-1",
                [
                    EntryDraft(str(magazine.id), str(quarter.id), "Advert", "Feb26"),
                    EntryDraft(str(magazine.id), str(quarter.id), "Advert", "Apr26"),
                ],
            )
        assert models.Booking.objects.count() == 0
        assert models.BookingEntry.objects.count() == 0

    def test_reference_checks(self, db_store: DjangoLedgerStore, ledger, catalog):
        _, magazine, quarter, half = catalog
        ledger.bookings.create_booking(
            OWNER, "cust-1", [EntryDraft(str(magazine.id), str(quarter.id), "Advert", "Feb26")]
        )
        assert db_store.magazine_referenced(magazine.id)
        assert db_store.content_size_referenced(quarter.id)
        assert not db_store.content_size_referenced(half.id)
        assert db_store.content_type_referenced(OWNER, "Advert")
        assert not db_store.content_type_referenced(OWNER, "Article")

    def test_delete_removes_entries(self, ledger: LedgerServices, catalog):
        _, magazine, quarter, _ = catalog
        booking = ledger.bookings.create_booking(
            OWNER, "cust-1", [EntryDraft(str(magazine.id), str(quarter.id), "Advert", "Feb26")]
        )
        ledger.bookings.delete_booking(OWNER, str(booking.id))
        assert models.BookingEntry.objects.count() == 0


@pytest.mark.django_db
class TestAggregationOverDatabase:
    """The space breakdown computed from stored rows."""

    def test_local_monthly_scenario(self, ledger: LedgerServices, catalog):
        _, magazine, quarter, half = catalog
        ledger.bookings.create_booking(
            OWNER, "cust-1", [EntryDraft(str(magazine.id), str(quarter.id), "Advert", "Feb26")]
        )
        ledger.bookings.create_booking(
            OWNER, "cust-2", [EntryDraft(str(magazine.id), str(half.id), "Article", "Feb26")]
        )
        breakdown = ledger.aggregation.current_issue_breakdown(OWNER, str(magazine.id))
        assert breakdown.booked_pages == Decimal("0.75")
        assert breakdown.unallocated_pages == Decimal("39.25")
        assert [s.booked_share for s in breakdown.slices[:2]] == [
            Decimal("33.3"),
            Decimal("66.7"),
        ]


@pytest.mark.django_db
class TestLeafletStorage:
    """Tests for leaflet delivery persistence."""

    def draft(self, magazine, **overrides) -> LeafletDraft:
        fields = {"issue_name": "Feb26", "description": "Flyer", "price": Decimal("200")}
        fields.update(overrides)
        return LeafletDraft(str(magazine.id), **fields)

    def test_round_trip(self, ledger: LedgerServices, catalog):
        magazine = catalog[1]
        delivery = ledger.leaflets.create_delivery(
            OWNER,
            "cust-1",
            self.draft(magazine, quantity=1500, discount_percentage=Decimal("12.5")),
        )
        assert ledger.leaflets.get_delivery(OWNER, str(delivery.id)) == delivery
        assert delivery.net_value.amount == Decimal("175.00")

    def test_update_keeps_one_row(self, ledger: LedgerServices, catalog):
        magazine = catalog[1]
        delivery = ledger.leaflets.create_delivery(OWNER, "cust-1", self.draft(magazine))
        ledger.leaflets.update_delivery(
            OWNER, str(delivery.id), "cust-2", self.draft(magazine, issue_name="Mar26")
        )
        row = models.LeafletDelivery.objects.get()
        assert (row.customer_ref, row.issue_name) == ("cust-2", "Mar26")

    def test_delivery_protects_magazine(self, db_store: DjangoLedgerStore, ledger, catalog):
        magazine = catalog[1]
        assert not db_store.magazine_referenced(magazine.id)
        delivery = ledger.leaflets.create_delivery(OWNER, "cust-1", self.draft(magazine))
        assert db_store.magazine_referenced(magazine.id)
        ledger.leaflets.delete_delivery(OWNER, str(delivery.id))
        assert models.LeafletDelivery.objects.count() == 0
        assert not db_store.magazine_referenced(magazine.id)

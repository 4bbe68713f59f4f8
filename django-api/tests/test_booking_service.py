"""Unit tests for BookingLedgerService.

These test pricing, range validation and all-or-nothing writes.
Run with: pytest tests/test_booking_service.py -v
"""

import pytest
from datetime import timedelta
from decimal import Decimal
from itertools import count

from adledger.conf import DEFAULTS
from adledger.domain import BookingStatus, ChargeMode, EntryDraft
from adledger.domain.errors import (
    ErrorCode,
    InvalidRangeError,
    NotFoundError,
    PriceNotFoundError,
    UnknownIssueError,
    ValidationError,
)
from adledger.services import BookingFilter, LedgerServices, build_services
from adledger.stores import InMemoryLedgerStore
from factories import NOW, OTHER_OWNER, OWNER, monthly_issues


def entry(magazine, content_size, **overrides) -> EntryDraft:
    fields = {"content_type": "Advert", "start_issue": "Feb26"}
    fields.update(overrides)
    return EntryDraft(str(magazine.id), str(content_size.id), **fields)


class TestCreateBooking:
    """Tests for BookingLedgerService.create_booking."""

    def test_net_value_scenario(self, seeded: LedgerServices, local, quarter_page):
        """List 100 less 10% and 5, plus 20 of charges, is 105."""
        booking = seeded.bookings.create_booking(
            OWNER,
            "cust-1",
            [
                entry(
                    local,
                    quarter_page,
                    list_price=Decimal("100"),
                    discount_percentage=Decimal("10"),
                    discount_value=Decimal("5"),
                )
            ],
            additional_charges=Decimal("20"),
        )
        assert booking.entries[0].net_value.amount == Decimal("105.00")
        assert booking.total_value.amount == Decimal("105.00")
        assert booking.status is BookingStatus.ACTIVE

    def test_list_price_resolved_from_pricing(self, seeded: LedgerServices, local, half_page):
        booking = seeded.bookings.create_booking(OWNER, "cust-1", [entry(local, half_page)])
        assert booking.entries[0].list_price.amount == Decimal("180.00")

    def test_missing_price_fails(self, seeded: LedgerServices, local, monthly):
        unpriced = seeded.pricing.create_content_size(OWNER, "Strip", "0.1")
        with pytest.raises(PriceNotFoundError):
            seeded.bookings.create_booking(OWNER, "cust-1", [entry(local, unpriced)])

    def test_charges_split_across_entries(
        self, seeded: LedgerServices, local, quarter_page, half_page
    ):
        booking = seeded.bookings.create_booking(
            OWNER,
            "cust-1",
            [
                entry(local, quarter_page),
                entry(local, half_page, content_type="Article"),
                entry(local, quarter_page, start_issue="Mar26"),
            ],
            additional_charges="20",
        )
        shares = [e.apportioned_charges.amount for e in booking.entries]
        assert shares == [Decimal("6.67"), Decimal("6.67"), Decimal("6.66")]
        assert booking.total_value.amount == Decimal("400.00")

    def test_wholesale_charge_mode(self, seeded: LedgerServices, local, quarter_page):
        booking = seeded.bookings.create_booking(
            OWNER,
            "cust-1",
            [entry(local, quarter_page), entry(local, quarter_page, start_issue="Mar26")],
            additional_charges="30",
            charge_mode=ChargeMode.WHOLESALE,
        )
        shares = [e.apportioned_charges.amount for e in booking.entries]
        assert shares == [Decimal("30.00"), Decimal("0")]

    def test_ongoing_entry_drops_finish_issue(self, seeded: LedgerServices, local, quarter_page):
        booking = seeded.bookings.create_booking(
            OWNER,
            "cust-1",
            [entry(local, quarter_page, finish_issue="Dec25", is_ongoing=True)],
        )
        assert booking.entries[0].finish_issue is None
        assert booking.entries[0].is_ongoing

    def test_requires_customer(self, seeded: LedgerServices, local, quarter_page):
        with pytest.raises(ValidationError):
            seeded.bookings.create_booking(OWNER, " ", [entry(local, quarter_page)])

    def test_requires_entries(self, seeded: LedgerServices):
        with pytest.raises(ValidationError):
            seeded.bookings.create_booking(OWNER, "cust-1", [])

    def test_unknown_content_type(self, seeded: LedgerServices, local, quarter_page):
        with pytest.raises(ValidationError) as exc:
            seeded.bookings.create_booking(
                OWNER, "cust-1", [entry(local, quarter_page, content_type="Gossip")]
            )
        assert exc.value.field == "content_type"

    def test_unknown_issue(self, seeded: LedgerServices, local, quarter_page):
        with pytest.raises(UnknownIssueError) as exc:
            seeded.bookings.create_booking(
                OWNER, "cust-1", [entry(local, quarter_page, start_issue="Apr26")]
            )
        assert exc.value.code is ErrorCode.UNKNOWN_ISSUE

    def test_backward_range(self, seeded: LedgerServices, local, quarter_page):
        with pytest.raises(InvalidRangeError):
            seeded.bookings.create_booking(
                OWNER,
                "cust-1",
                [entry(local, quarter_page, start_issue="Mar26", finish_issue="Feb26")],
            )

    @pytest.mark.parametrize(
        "overrides",
        [
            {"discount_percentage": Decimal("101")},
            {"discount_value": Decimal("-1")},
            {"list_price": Decimal("-5")},
        ],
    )
    def test_rejects_out_of_range_amounts(
        self, seeded: LedgerServices, local, quarter_page, overrides
    ):
        with pytest.raises(ValidationError):
            seeded.bookings.create_booking(
                OWNER, "cust-1", [entry(local, quarter_page, **overrides)]
            )

    def test_one_bad_entry_aborts_whole_booking(
        self, seeded: LedgerServices, local, quarter_page
    ):
        with pytest.raises(UnknownIssueError):
            seeded.bookings.create_booking(
                OWNER,
                "cust-1",
                [entry(local, quarter_page), entry(local, quarter_page, start_issue="Apr26")],
            )
        assert seeded.bookings.list_bookings(OWNER) == []

    def test_magazine_of_other_owner_is_not_found(
        self, seeded: LedgerServices, local, quarter_page
    ):
        seeded.labels.seed_defaults(OTHER_OWNER)
        with pytest.raises(NotFoundError):
            seeded.bookings.create_booking(OTHER_OWNER, "cust-1", [entry(local, quarter_page)])


class TestUpdateBooking:
    """Tests for BookingLedgerService.update_booking."""

    def test_update_replaces_entries_and_recomputes(
        self, seeded: LedgerServices, local, quarter_page, half_page
    ):
        booking = seeded.bookings.create_booking(
            OWNER,
            "cust-1",
            [entry(local, quarter_page), entry(local, half_page)],
            additional_charges="10",
        )
        updated = seeded.bookings.update_booking(
            OWNER, str(booking.id), [entry(local, half_page, content_type="Article")]
        )
        assert len(updated.entries) == 1
        assert updated.entries[0].apportioned_charges.amount == Decimal("10.00")
        assert updated.total_value.amount == Decimal("190.00")
        assert updated.customer_ref == "cust-1"

    def test_failed_update_keeps_stored_booking(
        self, seeded: LedgerServices, local, quarter_page
    ):
        booking = seeded.bookings.create_booking(OWNER, "cust-1", [entry(local, quarter_page)])
        with pytest.raises(InvalidRangeError):
            seeded.bookings.update_booking(
                OWNER,
                str(booking.id),
                [entry(local, quarter_page, start_issue="Mar26", finish_issue="Jan26")],
            )
        assert seeded.bookings.get_booking(OWNER, str(booking.id)) == booking

    def test_update_status_and_notes(self, seeded: LedgerServices, local, quarter_page):
        booking = seeded.bookings.create_booking(OWNER, "cust-1", [entry(local, quarter_page)])
        updated = seeded.bookings.update_booking(
            OWNER,
            str(booking.id),
            [entry(local, quarter_page)],
            notes="Paid",
            status=BookingStatus.COMPLETED,
        )
        assert updated.status is BookingStatus.COMPLETED
        assert updated.notes == "Paid"

    def test_delete_is_permanent(self, seeded: LedgerServices, local, quarter_page):
        booking = seeded.bookings.create_booking(OWNER, "cust-1", [entry(local, quarter_page)])
        seeded.bookings.delete_booking(OWNER, str(booking.id))
        with pytest.raises(NotFoundError):
            seeded.bookings.get_booking(OWNER, str(booking.id))


class TestListBookings:
    """Tests for BookingLedgerService.list_bookings."""

    @pytest.fixture
    def ticking(self) -> LedgerServices:
        ticks = count()
        services = build_services(
            InMemoryLedgerStore(),
            dict(DEFAULTS),
            clock=lambda: NOW + timedelta(seconds=next(ticks)),
        )
        services.labels.seed_defaults(OWNER)
        return services

    def test_newest_first(self, ticking: LedgerServices):
        schedule = ticking.schedules.create_schedule(OWNER, "Monthly", monthly_issues())
        magazine = ticking.magazines.create_magazine(OWNER, "Local", str(schedule.id))
        size = ticking.pricing.create_content_size(
            OWNER, "Quarter", "0.25", {str(magazine.id): "100"}
        )
        first = ticking.bookings.create_booking(OWNER, "cust-1", [entry(magazine, size)])
        second = ticking.bookings.create_booking(OWNER, "cust-2", [entry(magazine, size)])
        assert [b.id for b in ticking.bookings.list_bookings(OWNER)] == [second.id, first.id]

    def test_filters(self, seeded: LedgerServices, local, quarter_page, half_page):
        advert = seeded.bookings.create_booking(
            OWNER, "cust-1", [entry(local, quarter_page, start_issue="Jan26", is_ongoing=True)]
        )
        article = seeded.bookings.create_booking(
            OWNER, "cust-2", [entry(local, half_page, content_type="Article", start_issue="Mar26")]
        )
        bookings = seeded.bookings

        def ids(**criteria):
            return {b.id for b in bookings.list_bookings(OWNER, BookingFilter(**criteria))}

        assert ids(customer_ref="cust-1") == {advert.id}
        assert ids(content_type="Article") == {article.id}
        assert ids(issue_name="Feb26") == {advert.id}
        assert ids(issue_name="Mar26") == {advert.id, article.id}
        assert ids(magazine_id=str(local.id)) == {advert.id, article.id}
        assert ids(status=BookingStatus.CANCELLED) == set()

    def test_filter_with_bad_magazine_id(self, seeded: LedgerServices):
        with pytest.raises(ValidationError):
            seeded.bookings.list_bookings(OWNER, BookingFilter(magazine_id="nope"))


class TestBookingReport:
    """Tests for BookingLedgerService.report."""

    def test_one_row_per_entry_with_totals(
        self, seeded: LedgerServices, local, quarter_page, half_page
    ):
        seeded.bookings.create_booking(
            OWNER,
            "cust-1",
            [
                entry(local, quarter_page, start_issue="Feb26", finish_issue="Mar26"),
                entry(
                    local, half_page, content_type="Article", start_issue="Jan26", is_ongoing=True
                ),
            ],
            notes="Spring campaign",
        )
        report = seeded.bookings.report(OWNER)

        assert report.total == 2
        assert report.total_value.amount == Decimal("280.00")
        advert, article = report.rows
        assert advert.magazine_name == "Local"
        assert advert.content_size == "Quarter page"
        assert advert.size.value == Decimal("0.25")
        assert (advert.first_issue, advert.last_issue) == ("Feb26", "Mar26")
        assert article.last_issue == "Ongoing"
        assert advert.notes == "Spring campaign"

    def test_single_issue_entry_reports_start_as_last(
        self, seeded: LedgerServices, local, quarter_page
    ):
        seeded.bookings.create_booking(OWNER, "cust-1", [entry(local, quarter_page)])
        (row,) = seeded.bookings.report(OWNER).rows
        assert row.last_issue == "Feb26"

    def test_entry_criteria_drop_non_matching_rows(
        self, seeded: LedgerServices, local, quarter_page, half_page
    ):
        seeded.bookings.create_booking(
            OWNER,
            "cust-1",
            [entry(local, quarter_page), entry(local, half_page, content_type="Article")],
        )
        report = seeded.bookings.report(OWNER, BookingFilter(content_type="article"))
        assert [row.content_type for row in report.rows] == ["Article"]
        assert report.total_value.amount == Decimal("180.00")

    def test_empty_report(self, seeded: LedgerServices):
        report = seeded.bookings.report(OWNER)
        assert report.rows == ()
        assert report.total == 0
        assert report.total_value.amount == Decimal("0.00")

"""Unit tests for AggregationService.

Run with: pytest tests/test_aggregation_service.py -v
"""

import pytest
from datetime import timedelta
from decimal import Decimal
from itertools import count

from adledger.conf import DEFAULTS
from adledger.domain import BookingStatus, EntryDraft, LeafletDraft
from adledger.domain.models import ActivityKind
from adledger.services import LedgerServices, build_services
from adledger.services.aggregation_service import UNALLOCATED, percentage_change
from adledger.stores import InMemoryLedgerStore
from factories import NOW, OWNER, monthly_issues, utc


def book(services, magazine, content_size, content_type, start_issue, customer="cust-1", **kw):
    return services.bookings.create_booking(
        OWNER,
        customer,
        [EntryDraft(str(magazine.id), str(content_size.id), content_type, start_issue, **kw)],
    )


class TestCurrentIssueBreakdown:
    """Tests for AggregationService.current_issue_breakdown."""

    def test_local_monthly_scenario(self, seeded: LedgerServices, local, quarter_page, half_page):
        """Advert 0.25 and Article 0.5 in Feb26 of a 40-page issue."""
        book(seeded, local, quarter_page, "Advert", "Feb26")
        book(seeded, local, half_page, "Article", "Feb26", customer="cust-2")

        breakdown = seeded.aggregation.current_issue_breakdown(OWNER, str(local.id))

        assert breakdown.issue.name == "Feb26"
        assert breakdown.total_pages == 40
        assert breakdown.booked_pages == Decimal("0.75")
        assert breakdown.unallocated_pages == Decimal("39.25")
        shares = {s.content_type: s.booked_share for s in breakdown.slices}
        assert shares == {"Advert": Decimal("33.3"), "Article": Decimal("66.7"), UNALLOCATED: None}

    def test_percentage_of_total_pages(self, seeded, local, quarter_page, half_page):
        book(seeded, local, half_page, "Article", "Feb26")
        breakdown = seeded.aggregation.current_issue_breakdown(OWNER, str(local.id))
        article, unallocated = breakdown.slices
        assert article.percentage == Decimal("1.3")
        assert unallocated.content_type == UNALLOCATED
        assert unallocated.pages == Decimal("39.5")

    def test_counts_and_values_per_content_type(self, seeded, local, quarter_page):
        book(seeded, local, quarter_page, "Advert", "Feb26")
        book(seeded, local, quarter_page, "Advert", "Jan26", is_ongoing=True)
        breakdown = seeded.aggregation.current_issue_breakdown(OWNER, str(local.id))
        advert = breakdown.slices[0]
        assert advert.count == 2
        assert advert.pages == Decimal("0.50")
        assert advert.value.amount == Decimal("200.00")
        assert breakdown.total_value.amount == Decimal("200.00")

    def test_entries_outside_current_issue_are_ignored(self, seeded, local, quarter_page):
        book(seeded, local, quarter_page, "Advert", "Jan26")
        book(seeded, local, quarter_page, "Advert", "Mar26")
        breakdown = seeded.aggregation.current_issue_breakdown(OWNER, str(local.id))
        assert breakdown.slices == ()
        assert breakdown.booked_pages == 0
        assert breakdown.unallocated_pages == 40

    def test_inactive_bookings_are_ignored(self, seeded, local, quarter_page):
        booking = book(seeded, local, quarter_page, "Advert", "Feb26")
        seeded.bookings.update_booking(
            OWNER,
            str(booking.id),
            [EntryDraft(str(local.id), str(quarter_page.id), "Advert", "Feb26")],
            status=BookingStatus.CANCELLED,
        )
        breakdown = seeded.aggregation.current_issue_breakdown(OWNER, str(local.id))
        assert breakdown.slices == ()

    def test_full_issue_has_no_unallocated_row(self, seeded, local, monthly):
        seeded.magazines.set_page_budget(OWNER, str(local.id), "Feb26", 1)
        full_page = seeded.pricing.create_content_size(
            OWNER, "Full page", "1", {str(local.id): "400"}
        )
        book(seeded, local, full_page, "Advert", "Feb26")
        breakdown = seeded.aggregation.current_issue_breakdown(OWNER, str(local.id))
        assert [s.content_type for s in breakdown.slices] == ["Advert"]
        assert breakdown.slices[0].percentage == Decimal("100.0")

    def test_all_issues_closed_reports_last_issue(self, store, local, quarter_page):
        later = build_services(store, dict(DEFAULTS), clock=lambda: utc(2026, 6, 1))
        breakdown = later.aggregation.current_issue_breakdown(OWNER, str(local.id))
        assert breakdown.issue.name == "Mar26"
        assert breakdown.slices == ()


class TestPublicationsRevenue:
    """Tests for AggregationService.publications_revenue."""

    @pytest.fixture
    def city(self, seeded: LedgerServices, monthly):
        return seeded.magazines.create_magazine(OWNER, "City", str(monthly.id))

    def test_sums_net_value_per_magazine(self, seeded, local, city, quarter_page, half_page):
        book(seeded, local, quarter_page, "Advert", "Feb26")
        book(seeded, local, half_page, "Article", "Mar26")
        book(seeded, local, quarter_page, "Advert", "Dec25")

        revenue = {r.magazine_name: r for r in seeded.aggregation.publications_revenue(OWNER)}

        assert revenue["Local"].total_entries == 3
        assert revenue["Local"].total_value.amount == Decimal("380.00")
        breakdown = {
            t.content_type: (t.count, t.value.amount)
            for t in revenue["Local"].content_type_breakdown
        }
        assert breakdown == {"Advert": (2, Decimal("200.00")), "Article": (1, Decimal("180.00"))}
        assert revenue["City"].total_entries == 0

    def test_issue_filter(self, seeded, local, quarter_page, half_page):
        book(seeded, local, quarter_page, "Advert", "Jan26", is_ongoing=True)
        book(seeded, local, half_page, "Article", "Mar26")
        (local_revenue,) = seeded.aggregation.publications_revenue(OWNER, issue_name="Feb26")
        assert local_revenue.total_entries == 1
        assert local_revenue.total_value.amount == Decimal("100.00")

    def test_archived_magazines_hidden_by_default(self, seeded, local, city):
        seeded.magazines.archive(OWNER, str(city.id))
        names = [r.magazine_name for r in seeded.aggregation.publications_revenue(OWNER)]
        assert names == ["Local"]
        names = [
            r.magazine_name
            for r in seeded.aggregation.publications_revenue(OWNER, include_archived=True)
        ]
        assert names == ["City", "Local"]


class TestTopCustomers:
    """Tests for AggregationService.top_customers."""

    def test_ranks_by_total_value(self, seeded, local, quarter_page, half_page):
        book(seeded, local, quarter_page, "Advert", "Feb26", customer="small")
        book(seeded, local, half_page, "Advert", "Feb26", customer="big")
        book(seeded, local, half_page, "Advert", "Mar26", customer="big")

        ranked = seeded.aggregation.top_customers(OWNER)

        assert [c.customer_ref for c in ranked] == ["big", "small"]
        assert ranked[0].total_bookings == 2
        assert ranked[0].total_value.amount == Decimal("360.00")

    def test_limit(self, seeded, local, quarter_page):
        for customer in ["a", "b", "c"]:
            book(seeded, local, quarter_page, "Advert", "Feb26", customer=customer)
        assert len(seeded.aggregation.top_customers(OWNER, limit=2)) == 2


class TestPercentageChange:
    """Tests for percentage_change."""

    @pytest.mark.parametrize(
        "current,previous,expected",
        [(5, 0, 100), (0, 0, 0), (3, 4, -25), (5, 2, 150), (1, 3, -67), (1, 8, -88)],
    )
    def test_whole_percent_change(self, current, previous, expected):
        assert percentage_change(current, previous) == expected

    def test_decimal_values(self):
        assert percentage_change(Decimal("340.00"), Decimal("140.00")) == 143


class TestDashboardStats:
    """Tests for AggregationService.dashboard_stats."""

    @pytest.fixture
    def moment(self) -> dict:
        return {"now": utc(2025, 11, 10)}

    @pytest.fixture
    def ledger(self, moment) -> LedgerServices:
        services = build_services(
            InMemoryLedgerStore(), dict(DEFAULTS), clock=lambda: moment["now"]
        )
        services.labels.seed_defaults(OWNER)
        return services

    @pytest.fixture
    def catalog(self, ledger: LedgerServices):
        schedule = ledger.schedules.create_schedule(OWNER, "Monthly", monthly_issues())
        magazine = ledger.magazines.create_magazine(OWNER, "Local", str(schedule.id))
        quarter = ledger.pricing.create_content_size(
            OWNER, "Quarter page", Decimal("0.25"), {str(magazine.id): Decimal("100.00")}
        )
        half = ledger.pricing.create_content_size(
            OWNER, "Half page", Decimal("0.5"), {str(magazine.id): Decimal("180.00")}
        )
        return magazine, quarter, half

    def leaflet(self, ledger, magazine, customer, price):
        return ledger.leaflets.create_delivery(
            OWNER, customer, LeafletDraft(str(magazine.id), "Feb26", "Flyer", Decimal(price))
        )

    def test_totals_and_month_over_month_changes(self, ledger, catalog, moment):
        magazine, quarter, half = catalog
        book(ledger, magazine, quarter, "Advert", "Feb26", customer="cust-1")
        self.leaflet(ledger, magazine, "cust-3", "40")

        moment["now"] = utc(2025, 12, 5)
        book(ledger, magazine, half, "Advert", "Feb26", customer="cust-2")
        book(ledger, magazine, quarter, "Advert", "Feb26", customer="cust-1")
        cancelled = book(ledger, magazine, quarter, "Advert", "Feb26", customer="cust-4")
        ledger.bookings.update_booking(
            OWNER,
            str(cancelled.id),
            [EntryDraft(str(magazine.id), str(quarter.id), "Advert", "Feb26")],
            status=BookingStatus.CANCELLED,
        )
        self.leaflet(ledger, magazine, "cust-1", "60")

        moment["now"] = utc(2025, 12, 25)
        stats = ledger.aggregation.dashboard_stats(OWNER)

        assert stats.total_customers == 4
        assert stats.total_magazines == 1
        assert stats.total_bookings == 3
        assert stats.total_leaflet_deliveries == 2
        assert stats.total_booking_value.amount == Decimal("380.00")
        assert stats.total_leaflet_value.amount == Decimal("100.00")
        assert stats.total_revenue.amount == Decimal("480.00")
        assert stats.booking_change == 100
        assert stats.leaflet_delivery_change == 0
        assert stats.booking_value_change == 180
        assert stats.leaflet_value_change == 50
        assert stats.total_revenue_change == 143

    def test_archived_magazines_are_counted(self, ledger, catalog):
        magazine, _, _ = catalog
        ledger.magazines.archive(OWNER, str(magazine.id))
        assert ledger.aggregation.dashboard_stats(OWNER).total_magazines == 1

    def test_empty_ledger(self, ledger):
        stats = ledger.aggregation.dashboard_stats(OWNER)
        assert stats.total_customers == 0
        assert stats.total_revenue.amount == Decimal("0")
        assert stats.total_revenue_change == 0


class TestRecentActivity:
    """Tests for AggregationService.recent_activity."""

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

    def test_bookings_and_leaflets_merge_newest_first(self, ticking: LedgerServices):
        schedule = ticking.schedules.create_schedule(OWNER, "Monthly", monthly_issues())
        magazine = ticking.magazines.create_magazine(OWNER, "Local", str(schedule.id))
        quarter = ticking.pricing.create_content_size(
            OWNER, "Quarter page", Decimal("0.25"), {str(magazine.id): Decimal("100.00")}
        )
        first = book(ticking, magazine, quarter, "Advert", "Feb26")
        delivery = ticking.leaflets.create_delivery(
            OWNER,
            "cust-2",
            LeafletDraft(str(magazine.id), "Feb26", "Flyer", Decimal("40"), quantity=500),
        )
        last = book(ticking, magazine, quarter, "Advert", "Feb26", customer="cust-3")

        activity = ticking.aggregation.recent_activity(OWNER)

        assert [item.id for item in activity] == [str(last.id), str(delivery.id), str(first.id)]
        assert activity[0].kind is ActivityKind.BOOKING
        assert activity[0].description == "Quarter page in Local"
        assert activity[1].kind is ActivityKind.LEAFLET
        assert activity[1].description == "Leaflet delivery (500x) in Local"
        assert activity[1].value.amount == Decimal("40.00")

        limited = ticking.aggregation.recent_activity(OWNER, limit=2)
        assert [item.id for item in limited] == [str(last.id), str(delivery.id)]

    def test_empty(self, ticking: LedgerServices):
        assert ticking.aggregation.recent_activity(OWNER) == []

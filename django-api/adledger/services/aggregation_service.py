"""Aggregation engine: current-issue space usage, revenue rollups and dashboard figures.

Rollups count Active records only; recent activity lists every status.
Page budgets are read through the magazine catalog at query time, so
nothing computed here is stored.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from adledger.domain import (
    Booking,
    BookingEntry,
    BookingStatus,
    ContentSizeId,
    LeafletDelivery,
    Magazine,
    MagazineId,
    Money,
)
from adledger.domain.errors import NoFutureIssueError
from adledger.domain.issues import covers_issue, current_issue
from adledger.domain.models import (
    ActivityItem,
    ActivityKind,
    ContentTypeSlice,
    ContentTypeTotal,
    CustomerTotal,
    DashboardStats,
    Issue,
    IssueBreakdown,
    PublicationRevenue,
    Schedule,
)
from adledger.services.common import Clock, utc_now
from adledger.services.magazine_service import MagazineCatalogService
from adledger.stores.interfaces import (
    BookingStore,
    ContentSizeStore,
    LeafletStore,
    ScheduleStore,
)

logger = logging.getLogger(__name__)

UNALLOCATED = "Unallocated"
TENTH = Decimal("0.1")


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return Decimal("0.0")
    return (part / whole * 100).quantize(TENTH, rounding=ROUND_HALF_UP)


def percentage_change(current: Decimal | int, previous: Decimal | int) -> int:
    """Whole-percent change from the previous period to the current one.

    A previous period of zero reports 100 if anything happened since, else 0.
    """
    if previous == 0:
        return 100 if current > 0 else 0
    change = (Decimal(current) - Decimal(previous)) / Decimal(previous) * 100
    return int(change.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class AggregationService:
    """Read-only reports over the schedule registry, catalog and ledger."""

    def __init__(
        self,
        catalog: MagazineCatalogService,
        schedules: ScheduleStore,
        bookings: BookingStore,
        content_sizes: ContentSizeStore,
        leaflets: LeafletStore,
        clock: Clock = utc_now,
    ) -> None:
        self._catalog = catalog
        self._schedules = schedules
        self._bookings = bookings
        self._content_sizes = content_sizes
        self._leaflets = leaflets
        self._clock = clock

    def current_issue_breakdown(self, owner_id: str, magazine_id: str) -> IssueBreakdown:
        """Booked pages per content type in the magazine's current issue.

        The current issue is the magazine's first issue still open for
        booking; once every issue has closed the last declared issue is
        reported instead. A magazine without a schedule, or an issue with
        no bookings, gives an empty breakdown.
        """
        magazine = self._catalog.get_magazine(owner_id, magazine_id)
        schedule = self._schedules.get_schedule(owner_id, magazine.schedule_id)
        if schedule is None or not schedule.issues:
            return self._empty(magazine, None)

        issue = self._resolve_current(schedule)
        total_pages = self._catalog.page_budget(magazine, issue.name)
        entries = [
            entry
            for entry in self._active_entries(owner_id)
            if entry.magazine_id == magazine.id and covers_issue(entry, issue.name, schedule)
        ]
        if not entries:
            return self._empty(magazine, issue)

        pages: dict[str, Decimal] = defaultdict(Decimal)
        counts: dict[str, int] = defaultdict(int)
        values: dict[str, Money] = defaultdict(Money.zero)
        sizes: dict[ContentSizeId, Decimal] = {}
        for entry in entries:
            if entry.content_size_id not in sizes:
                content_size = self._content_sizes.get_content_size(owner_id, entry.content_size_id)
                sizes[entry.content_size_id] = (
                    content_size.size.value if content_size is not None else Decimal("0")
                )
            pages[entry.content_type] += sizes[entry.content_size_id]
            counts[entry.content_type] += 1
            values[entry.content_type] = values[entry.content_type] + entry.net_value

        booked = sum(pages.values(), Decimal("0"))
        total = Decimal(total_pages)
        unallocated = max(Decimal("0"), total - booked)
        slices = [
            ContentTypeSlice(
                content_type=content_type,
                pages=pages[content_type],
                count=counts[content_type],
                value=values[content_type],
                percentage=_percent(pages[content_type], total),
                booked_share=_percent(pages[content_type], booked),
            )
            for content_type in sorted(pages)
        ]
        if unallocated > 0:
            slices.append(
                ContentTypeSlice(
                    content_type=UNALLOCATED,
                    pages=unallocated,
                    count=0,
                    value=Money.zero(),
                    percentage=_percent(unallocated, total),
                    booked_share=None,
                )
            )

        total_value = Money.zero()
        for value in values.values():
            total_value = total_value + value
        return IssueBreakdown(
            magazine_id=magazine.id,
            magazine_name=magazine.name,
            issue=issue,
            total_pages=total_pages,
            booked_pages=booked,
            unallocated_pages=unallocated,
            slices=tuple(slices),
            total_value=total_value,
        )

    def publications_revenue(
        self,
        owner_id: str,
        issue_name: str | None = None,
        include_archived: bool = False,
    ) -> list[PublicationRevenue]:
        """Summed net value of the entries booked in each magazine.

        The window is open-ended unless ``issue_name`` narrows it to entries
        covering that issue.
        """
        entries = self._active_entries(owner_id)
        rollups = []
        for magazine in self._catalog.list_magazines(owner_id, include_archived=include_archived):
            mine = [entry for entry in entries if entry.magazine_id == magazine.id]
            if issue_name is not None:
                schedule = self._schedules.get_schedule(owner_id, magazine.schedule_id)
                mine = [
                    entry
                    for entry in mine
                    if schedule is not None and covers_issue(entry, issue_name, schedule)
                ]
            rollups.append(_rollup(magazine, mine))
        return rollups

    def top_customers(self, owner_id: str, limit: int = 10) -> list[CustomerTotal]:
        """Customers ranked by the summed value of their active bookings."""
        totals: dict[str, Money] = defaultdict(Money.zero)
        counts: dict[str, int] = defaultdict(int)
        for booking in self._bookings.list_bookings(owner_id):
            if booking.status is not BookingStatus.ACTIVE:
                continue
            totals[booking.customer_ref] = totals[booking.customer_ref] + booking.total_value
            counts[booking.customer_ref] += 1
        ranked = sorted(totals, key=lambda ref: (-totals[ref].amount, ref))
        return [
            CustomerTotal(customer_ref=ref, total_bookings=counts[ref], total_value=totals[ref])
            for ref in ranked[:limit]
        ]

    def dashboard_stats(self, owner_id: str) -> DashboardStats:
        """Headline counts and values with month-over-month changes.

        Customers are the distinct customer references seen on bookings and
        leaflet deliveries. Every other figure counts Active records only.
        """
        bookings = self._bookings.list_bookings(owner_id)
        deliveries = self._leaflets.list_leaflet_deliveries(owner_id)
        customers = {b.customer_ref for b in bookings} | {d.customer_ref for d in deliveries}
        active_bookings = [b for b in bookings if b.status is BookingStatus.ACTIVE]
        active_deliveries = [d for d in deliveries if d.status is BookingStatus.ACTIVE]

        windows = _month_windows(self._clock())
        booking_months = [_in_window(active_bookings, window) for window in windows]
        leaflet_months = [_in_window(active_deliveries, window) for window in windows]
        booking_values = [_sum(rows, _booking_value) for rows in booking_months]
        leaflet_values = [_sum(rows, _leaflet_value) for rows in leaflet_months]

        booking_total = _sum(active_bookings, _booking_value)
        leaflet_total = _sum(active_deliveries, _leaflet_value)
        return DashboardStats(
            total_customers=len(customers),
            total_magazines=len(self._catalog.list_magazines(owner_id, include_archived=True)),
            total_bookings=len(active_bookings),
            total_leaflet_deliveries=len(active_deliveries),
            total_booking_value=booking_total,
            total_leaflet_value=leaflet_total,
            total_revenue=booking_total + leaflet_total,
            booking_change=percentage_change(*(len(rows) for rows in booking_months)),
            leaflet_delivery_change=percentage_change(*(len(rows) for rows in leaflet_months)),
            booking_value_change=percentage_change(*(v.amount for v in booking_values)),
            leaflet_value_change=percentage_change(*(v.amount for v in leaflet_values)),
            total_revenue_change=percentage_change(
                booking_values[0].amount + leaflet_values[0].amount,
                booking_values[1].amount + leaflet_values[1].amount,
            ),
        )

    def recent_activity(self, owner_id: str, limit: int = 10) -> list[ActivityItem]:
        """The most recently created bookings and leaflet deliveries, newest first."""
        magazines = {
            magazine.id: magazine.name
            for magazine in self._catalog.list_magazines(owner_id, include_archived=True)
        }
        items = []
        for booking in self._bookings.list_bookings(owner_id)[:limit]:
            items.append(
                ActivityItem(
                    kind=ActivityKind.BOOKING,
                    id=str(booking.id),
                    customer_ref=booking.customer_ref,
                    description=self._describe_booking(owner_id, booking, magazines),
                    value=booking.total_value,
                    created_at=booking.created_at,
                )
            )
        for delivery in self._leaflets.list_leaflet_deliveries(owner_id)[:limit]:
            items.append(
                ActivityItem(
                    kind=ActivityKind.LEAFLET,
                    id=str(delivery.id),
                    customer_ref=delivery.customer_ref,
                    description=(
                        f"Leaflet delivery ({delivery.quantity}x) in "
                        f"{magazines.get(delivery.magazine_id, '')}"
                    ),
                    value=delivery.net_value,
                    created_at=delivery.created_at,
                )
            )
        items.sort(key=lambda item: item.created_at, reverse=True)
        return items[:limit]

    def _describe_booking(
        self, owner_id: str, booking: Booking, magazines: dict[MagazineId, str]
    ) -> str:
        sizes = []
        names = []
        for entry in booking.entries:
            content_size = self._content_sizes.get_content_size(owner_id, entry.content_size_id)
            if content_size is not None and content_size.description not in sizes:
                sizes.append(content_size.description)
            name = magazines.get(entry.magazine_id, "")
            if name not in names:
                names.append(name)
        return f"{', '.join(sizes)} in {', '.join(names)}"

    def _resolve_current(self, schedule: Schedule) -> Issue:
        try:
            return current_issue([schedule], self._clock())
        except NoFutureIssueError:
            logger.info("All issues of schedule %s have closed; reporting the last", schedule.id)
            return max(schedule.issues, key=lambda issue: issue.sort_order)

    def _active_entries(self, owner_id: str) -> list[BookingEntry]:
        return [
            entry
            for booking in self._bookings.list_bookings(owner_id)
            if booking.status is BookingStatus.ACTIVE
            for entry in booking.entries
        ]

    def _empty(self, magazine: Magazine, issue: Issue | None) -> IssueBreakdown:
        total_pages = (
            self._catalog.page_budget(magazine, issue.name)
            if issue is not None
            else self._catalog.default_page_count
        )
        return IssueBreakdown(
            magazine_id=magazine.id,
            magazine_name=magazine.name,
            issue=issue,
            total_pages=total_pages,
            booked_pages=Decimal("0"),
            unallocated_pages=Decimal(total_pages),
        )


def _rollup(magazine: Magazine, entries: list[BookingEntry]) -> PublicationRevenue:
    counts: dict[str, int] = defaultdict(int)
    values: dict[str, Money] = defaultdict(Money.zero)
    total = Money.zero()
    for entry in entries:
        counts[entry.content_type] += 1
        values[entry.content_type] = values[entry.content_type] + entry.net_value
        total = total + entry.net_value
    return PublicationRevenue(
        magazine_id=magazine.id,
        magazine_name=magazine.name,
        total_entries=len(entries),
        total_value=total,
        content_type_breakdown=tuple(
            ContentTypeTotal(content_type=name, count=counts[name], value=values[name])
            for name in sorted(counts)
        ),
    )


def _month_windows(now: datetime) -> tuple[tuple[datetime, datetime], tuple[datetime, datetime]]:
    """[start, end) of the current calendar month and of the one before."""
    this_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    last_start = (this_start - timedelta(days=1)).replace(day=1)
    next_start = (this_start + timedelta(days=32)).replace(day=1)
    return (this_start, next_start), (last_start, this_start)


def _in_window(records: list, window: tuple[datetime, datetime]) -> list:
    start, end = window
    return [record for record in records if start <= record.created_at < end]


def _booking_value(booking: Booking) -> Money:
    return booking.total_value


def _leaflet_value(delivery: LeafletDelivery) -> Money:
    return delivery.net_value


def _sum(records: list, value: Callable[[Any], Money]) -> Money:
    total = Money.zero()
    for record in records:
        total = total + value(record)
    return total

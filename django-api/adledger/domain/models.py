"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in adledger/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from adledger.domain.value_objects import (
    BookingId,
    ContentSizeId,
    IssueKey,
    LabelId,
    LeafletDeliveryId,
    MagazineId,
    Money,
    PageCount,
    PageUnits,
    Percentage,
    ScheduleId,
)

DEFAULT_PAGE_COUNT = 40


@dataclass(frozen=True)
class Issue:
    """A dated release within a Schedule."""

    name: str
    close_date: datetime
    sort_order: int
    key: IssueKey

    @classmethod
    def create(cls, name: str, close_date: datetime, sort_order: int) -> "Issue":
        return cls(
            name=name,
            close_date=close_date,
            sort_order=sort_order,
            key=IssueKey.derive(name, close_date, sort_order),
        )

    def is_closed(self, now: datetime) -> bool:
        return self.close_date < now


@dataclass(frozen=True)
class Schedule:
    """Domain representation of a Schedule."""

    id: ScheduleId
    owner_id: str
    name: str
    issues: tuple[Issue, ...]
    created_at: datetime
    archived: bool = False

    def issue_named(self, name: str) -> Issue | None:
        for issue in self.issues:
            if issue.name == name:
                return issue
        return None

    def issue_names(self) -> list[str]:
        return [issue.name for issue in self.issues]


@dataclass(frozen=True)
class Magazine:
    """Domain representation of a Magazine."""

    id: MagazineId
    owner_id: str
    name: str
    schedule_id: ScheduleId
    page_configurations: dict[str, PageCount]
    created_at: datetime
    archived: bool = False


@dataclass(frozen=True)
class ContentSize:
    """Domain representation of a ContentSize and its per-magazine prices."""

    id: ContentSizeId
    owner_id: str
    description: str
    size: PageUnits
    pricing: dict[MagazineId, Money]
    created_at: datetime
    archived: bool = False


class LabelKind(Enum):
    CONTENT_TYPE = "content_type"
    BUSINESS_TYPE = "business_type"


@dataclass(frozen=True)
class Label:
    """A ContentType or BusinessType: flat, owner-scoped label."""

    id: LabelId
    kind: LabelKind
    owner_id: str
    name: str
    description: str = ""
    is_default: bool = False
    archived: bool = False


class BookingStatus(Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ChargeMode(Enum):
    """How a booking's additional charges are spread over its entries."""

    SPLIT = "split"
    WHOLESALE = "wholesale"


@dataclass(frozen=True)
class BookingEntry:
    """One magazine row of a Booking. Not addressable on its own."""

    magazine_id: MagazineId
    content_size_id: ContentSizeId
    content_type: str
    list_price: Money
    discount_percentage: Percentage
    discount_value: Money
    start_issue: str
    finish_issue: str | None
    is_ongoing: bool
    apportioned_charges: Money
    net_value: Money


@dataclass(frozen=True)
class Booking:
    """Domain representation of a Booking."""

    id: BookingId
    owner_id: str
    customer_ref: str
    entries: tuple[BookingEntry, ...]
    additional_charges: Money
    charge_mode: ChargeMode
    notes: str
    status: BookingStatus
    created_at: datetime
    updated_at: datetime

    @property
    def total_value(self) -> Money:
        total = Money.zero()
        for entry in self.entries:
            total = total + entry.net_value
        return total

    def magazine_ids(self) -> set[MagazineId]:
        return {entry.magazine_id for entry in self.entries}


@dataclass(frozen=True)
class EntryDraft:
    """Caller-supplied booking entry before validation and pricing.

    ``list_price`` may be left as None to resolve it from the pricing table.
    """

    magazine_id: str
    content_size_id: str
    content_type: str
    start_issue: str
    finish_issue: str | None = None
    is_ongoing: bool = False
    list_price: Decimal | None = None
    discount_percentage: Decimal = Decimal("0")
    discount_value: Decimal = Decimal("0")


@dataclass(frozen=True)
class IssueDraft:
    """Caller-supplied schedule issue before validation."""

    name: str
    close_date: datetime


@dataclass(frozen=True)
class LeafletDelivery:
    """Leaflets inserted into one issue of a magazine for a customer.

    Priced like a booking entry: list price less both discounts, plus the
    additional charges.
    """

    id: LeafletDeliveryId
    owner_id: str
    customer_ref: str
    magazine_id: MagazineId
    issue_name: str
    description: str
    quantity: int
    price: Money
    discount_percentage: Percentage
    discount_value: Money
    additional_charges: Money
    net_value: Money
    notes: str
    status: BookingStatus
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class LeafletDraft:
    """Caller-supplied leaflet delivery before validation and pricing."""

    magazine_id: str
    issue_name: str
    description: str
    price: Decimal
    quantity: int = 1
    discount_percentage: Decimal = Decimal("0")
    discount_value: Decimal = Decimal("0")
    additional_charges: Decimal = Decimal("0")
    notes: str = ""


@dataclass(frozen=True)
class ContentTypeSlice:
    """Booked space for one content type within an issue."""

    content_type: str
    pages: Decimal
    count: int
    value: Money
    percentage: Decimal
    booked_share: Decimal | None


@dataclass(frozen=True)
class IssueBreakdown:
    """Space utilisation of a magazine's current issue."""

    magazine_id: MagazineId
    magazine_name: str
    issue: Issue | None
    total_pages: int
    booked_pages: Decimal
    unallocated_pages: Decimal
    slices: tuple[ContentTypeSlice, ...] = ()
    total_value: Money = field(default_factory=Money.zero)


@dataclass(frozen=True)
class ContentTypeTotal:
    content_type: str
    count: int
    value: Money


@dataclass(frozen=True)
class PublicationRevenue:
    """Revenue rollup for one magazine."""

    magazine_id: MagazineId
    magazine_name: str
    total_entries: int
    total_value: Money
    content_type_breakdown: tuple[ContentTypeTotal, ...] = ()


@dataclass(frozen=True)
class CustomerTotal:
    customer_ref: str
    total_bookings: int
    total_value: Money


@dataclass(frozen=True)
class BookingReportRow:
    """One booking entry, flattened for the booking report."""

    booking_id: BookingId
    customer_ref: str
    magazine_name: str
    content_type: str
    content_size: str
    size: PageUnits | None
    list_price: Money
    net_value: Money
    first_issue: str
    last_issue: str
    notes: str
    status: BookingStatus


@dataclass(frozen=True)
class LeafletReportRow:
    delivery_id: LeafletDeliveryId
    customer_ref: str
    magazine_name: str
    issue_name: str
    description: str
    quantity: int
    price: Money
    net_value: Money
    notes: str
    status: BookingStatus


@dataclass(frozen=True)
class Report:
    """Report rows with their count and summed net value."""

    rows: tuple
    total_value: Money

    @property
    def total(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class DashboardStats:
    """Headline figures, with month-over-month changes in whole percent.

    Counts and values cover Active bookings and leaflet deliveries. The
    changes compare what was created this calendar month with the month
    before.
    """

    total_customers: int
    total_magazines: int
    total_bookings: int
    total_leaflet_deliveries: int
    total_booking_value: Money
    total_leaflet_value: Money
    total_revenue: Money
    booking_change: int
    leaflet_delivery_change: int
    booking_value_change: int
    leaflet_value_change: int
    total_revenue_change: int


class ActivityKind(Enum):
    BOOKING = "booking"
    LEAFLET = "leaflet"


@dataclass(frozen=True)
class ActivityItem:
    """A recently created booking or leaflet delivery."""

    kind: ActivityKind
    id: str
    customer_ref: str
    description: str
    value: Money
    created_at: datetime

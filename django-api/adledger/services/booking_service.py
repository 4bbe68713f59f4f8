"""Booking ledger - the single authority for creating and changing bookings.

Services:
- Depend only on interfaces (stores)
- Validate every entry before anything is written
- Compute list prices, discounts and apportioned charges
- Return domain models or domain errors

A booking is written as one unit. Updates replace the whole entry set and
recompute every value; there is no way to edit a single entry in place.
Deletion is permanent; bookings have no archive tier.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from decimal import Decimal

from adledger.domain import (
    Booking,
    BookingEntry,
    BookingId,
    BookingStatus,
    ChargeMode,
    ContentSize,
    ContentSizeId,
    EntryDraft,
    Magazine,
    MagazineId,
    Money,
    Percentage,
)
from adledger.domain.errors import (
    NotFoundError,
    PriceNotFoundError,
    ValidationError,
)
from adledger.domain.issues import covers_issue, validate_range
from adledger.domain.models import BookingReportRow, Report
from adledger.domain.pricing import apportion_charges, net_value
from adledger.services.common import (
    Clock,
    ScheduleLookup,
    parse_id,
    to_money,
    to_percentage,
    utc_now,
)
from adledger.services.label_service import LabelService
from adledger.stores.interfaces import (
    BookingStore,
    ContentSizeStore,
    MagazineStore,
    ScheduleStore,
)

logger = logging.getLogger(__name__)

ONGOING = "Ongoing"


@dataclass(frozen=True)
class BookingFilter:
    """Optional criteria for listing bookings; unset fields match all."""

    customer_ref: str | None = None
    magazine_id: str | None = None
    issue_name: str | None = None
    content_type: str | None = None
    status: BookingStatus | None = None


@dataclass(frozen=True)
class _PricedEntry:
    draft: EntryDraft
    magazine: Magazine
    content_size: ContentSize
    content_type: str
    list_price: Money
    discount_percentage: Percentage
    discount_value: Money


class BookingLedgerService:
    """Service for booking ledger operations."""

    def __init__(
        self,
        bookings: BookingStore,
        magazines: MagazineStore,
        schedules: ScheduleStore,
        content_sizes: ContentSizeStore,
        labels: LabelService,
        default_charge_mode: ChargeMode = ChargeMode.SPLIT,
        clock: Clock = utc_now,
    ) -> None:
        self._bookings = bookings
        self._magazines = magazines
        self._schedules = schedules
        self._content_sizes = content_sizes
        self._labels = labels
        self._default_charge_mode = default_charge_mode
        self._clock = clock

    def get_booking(self, owner_id: str, booking_id: str) -> Booking:
        """Return a booking by ID.

        Raises:
            ValidationError: If the booking_id is not a valid UUID.
            NotFoundError: If the booking does not exist for this owner.
        """
        bid = parse_id(BookingId, booking_id, "booking_id")
        booking = self._bookings.get_booking(owner_id, bid)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        return booking

    def create_booking(
        self,
        owner_id: str,
        customer_ref: str,
        entries: list[EntryDraft],
        additional_charges: Decimal | str | float = 0,
        notes: str = "",
        charge_mode: ChargeMode | None = None,
    ) -> Booking:
        """Validate, price and store a new booking with all its entries.

        Raises:
            ValidationError: On a missing customer, an empty entry list,
                malformed amounts or an unknown content type.
            NotFoundError: If a magazine or content size does not exist.
            UnknownIssueError: If an issue is not in the magazine's schedule.
            InvalidRangeError: If a finish issue precedes its start issue.
            PriceNotFoundError: If a list price is omitted and none is configured.
        """
        customer_ref = (customer_ref or "").strip()
        if not customer_ref:
            raise ValidationError("Customer is required", field="customer_ref")
        mode = charge_mode or self._default_charge_mode
        charges = to_money(additional_charges, "additional_charges")
        built = self._build_entries(owner_id, entries, charges, mode)

        now = self._clock()
        booking = Booking(
            id=BookingId.new(),
            owner_id=owner_id,
            customer_ref=customer_ref,
            entries=built,
            additional_charges=charges,
            charge_mode=mode,
            notes=(notes or "").strip(),
            status=BookingStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        self._bookings.save_booking(booking)
        logger.info("Created booking %s with %d entries", booking.id, len(built))
        return booking

    def update_booking(
        self,
        owner_id: str,
        booking_id: str,
        entries: list[EntryDraft],
        additional_charges: Decimal | str | float | None = None,
        notes: str | None = None,
        status: BookingStatus | None = None,
        charge_mode: ChargeMode | None = None,
    ) -> Booking:
        """Replace a booking's entire entry set and recompute all values.

        Omitted scalar fields keep their current value. Raises the same
        errors as create_booking; on any error the stored booking is unchanged.
        """
        booking = self.get_booking(owner_id, booking_id)
        mode = charge_mode or booking.charge_mode
        charges = (
            booking.additional_charges
            if additional_charges is None
            else to_money(additional_charges, "additional_charges")
        )
        built = self._build_entries(owner_id, entries, charges, mode)

        updated = replace(
            booking,
            entries=built,
            additional_charges=charges,
            charge_mode=mode,
            notes=booking.notes if notes is None else notes.strip(),
            status=status or booking.status,
            updated_at=self._clock(),
        )
        self._bookings.save_booking(updated)
        logger.info("Updated booking %s with %d entries", booking.id, len(built))
        return updated

    def delete_booking(self, owner_id: str, booking_id: str) -> None:
        booking = self.get_booking(owner_id, booking_id)
        self._bookings.delete_booking(booking.id)
        logger.info("Deleted booking %s", booking.id)

    def list_bookings(
        self, owner_id: str, criteria: BookingFilter | None = None
    ) -> list[Booking]:
        """Return the owner's bookings, newest first, narrowed by criteria.

        A booking matches when at least one of its entries satisfies every
        entry-level criterion at once.
        """
        criteria = criteria or BookingFilter()
        bookings = self._bookings.list_bookings(owner_id)
        if criteria.customer_ref is not None:
            bookings = [b for b in bookings if b.customer_ref == criteria.customer_ref]
        if criteria.status is not None:
            bookings = [b for b in bookings if b.status is criteria.status]

        matches = self._entry_matcher(owner_id, criteria)
        if matches is None:
            return bookings
        return [b for b in bookings if any(matches(entry) for entry in b.entries)]

    def report(self, owner_id: str, criteria: BookingFilter | None = None) -> Report:
        """One row per matching entry of the filtered bookings, with totals.

        An entry without a finish issue reports its start issue as the last
        one; an ongoing entry reports "Ongoing".
        """
        criteria = criteria or BookingFilter()
        matches = self._entry_matcher(owner_id, criteria)
        magazines: dict[MagazineId, str] = {}
        sizes: dict[ContentSizeId, ContentSize | None] = {}
        rows = []
        total = Money.zero()
        for booking in self.list_bookings(owner_id, criteria):
            for entry in booking.entries:
                if matches is not None and not matches(entry):
                    continue
                if entry.magazine_id not in magazines:
                    magazine = self._magazines.get_magazine(owner_id, entry.magazine_id)
                    magazines[entry.magazine_id] = magazine.name if magazine is not None else ""
                if entry.content_size_id not in sizes:
                    sizes[entry.content_size_id] = self._content_sizes.get_content_size(
                        owner_id, entry.content_size_id
                    )
                content_size = sizes[entry.content_size_id]
                rows.append(
                    BookingReportRow(
                        booking_id=booking.id,
                        customer_ref=booking.customer_ref,
                        magazine_name=magazines[entry.magazine_id],
                        content_type=entry.content_type,
                        content_size=content_size.description if content_size else "",
                        size=content_size.size if content_size else None,
                        list_price=entry.list_price,
                        net_value=entry.net_value,
                        first_issue=entry.start_issue,
                        last_issue=(
                            ONGOING
                            if entry.is_ongoing
                            else entry.finish_issue or entry.start_issue
                        ),
                        notes=booking.notes,
                        status=booking.status,
                    )
                )
                total = total + entry.net_value
        return Report(rows=tuple(rows), total_value=total)

    def _entry_matcher(
        self, owner_id: str, criteria: BookingFilter
    ) -> Callable[[BookingEntry], bool] | None:
        """Predicate for the entry-level criteria, or None when none are set."""
        magazine_id = None
        if criteria.magazine_id is not None:
            magazine_id = parse_id(MagazineId, criteria.magazine_id, "magazine_id")
        if magazine_id is None and criteria.issue_name is None and criteria.content_type is None:
            return None

        schedules = ScheduleLookup(self._magazines, self._schedules, owner_id)

        def matches(entry: BookingEntry) -> bool:
            if magazine_id is not None and entry.magazine_id != magazine_id:
                return False
            if criteria.content_type is not None and (
                entry.content_type.casefold() != criteria.content_type.casefold()
            ):
                return False
            if criteria.issue_name is not None:
                schedule = schedules.for_magazine(entry.magazine_id)
                if schedule is None or not covers_issue(entry, criteria.issue_name, schedule):
                    return False
            return True

        return matches

    def _build_entries(
        self,
        owner_id: str,
        drafts: list[EntryDraft],
        charges: Money,
        mode: ChargeMode,
    ) -> tuple[BookingEntry, ...]:
        if not drafts:
            raise ValidationError("At least one magazine entry is required", field="entries")

        priced = [self._validate_entry(owner_id, draft) for draft in drafts]
        shares = apportion_charges(charges, len(priced), mode)
        return tuple(
            BookingEntry(
                magazine_id=item.magazine.id,
                content_size_id=item.content_size.id,
                content_type=item.content_type,
                list_price=item.list_price,
                discount_percentage=item.discount_percentage,
                discount_value=item.discount_value,
                start_issue=item.draft.start_issue.strip(),
                finish_issue=(
                    None if item.draft.is_ongoing else _blank_to_none(item.draft.finish_issue)
                ),
                is_ongoing=item.draft.is_ongoing,
                apportioned_charges=share,
                net_value=net_value(
                    item.list_price, item.discount_percentage, item.discount_value, share
                ),
            )
            for item, share in zip(priced, shares)
        )

    def _validate_entry(self, owner_id: str, draft: EntryDraft) -> _PricedEntry:
        magazine = self._magazine(owner_id, draft.magazine_id)
        content_size = self._content_size(owner_id, draft.content_size_id)

        requested_type = (draft.content_type or "").strip()
        if not requested_type:
            raise ValidationError("Content type is required", field="content_type")
        content_type = self._labels.resolve_content_type(owner_id, requested_type)
        if content_type is None:
            raise ValidationError(
                f"Unknown content type {requested_type!r}", field="content_type"
            )

        start_issue = (draft.start_issue or "").strip()
        if not start_issue:
            raise ValidationError("Start issue is required", field="start_issue")
        schedule = self._schedules.get_schedule(owner_id, magazine.schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule", str(magazine.schedule_id))
        validate_range(
            schedule,
            start_issue,
            _blank_to_none(draft.finish_issue),
            draft.is_ongoing,
        )

        if draft.list_price is None:
            list_price = content_size.pricing.get(magazine.id)
            if list_price is None:
                raise PriceNotFoundError(str(content_size.id), str(magazine.id))
        else:
            list_price = to_money(draft.list_price, "list_price")

        return _PricedEntry(
            draft=draft,
            magazine=magazine,
            content_size=content_size,
            content_type=content_type,
            list_price=list_price,
            discount_percentage=to_percentage(draft.discount_percentage, "discount_percentage"),
            discount_value=to_money(draft.discount_value, "discount_value"),
        )

    def _magazine(self, owner_id: str, magazine_id: str) -> Magazine:
        mid = parse_id(MagazineId, magazine_id, "magazine_id")
        magazine = self._magazines.get_magazine(owner_id, mid)
        if magazine is None:
            raise NotFoundError("Magazine", magazine_id)
        return magazine

    def _content_size(self, owner_id: str, content_size_id: str) -> ContentSize:
        cid = parse_id(ContentSizeId, content_size_id, "content_size_id")
        content_size = self._content_sizes.get_content_size(owner_id, cid)
        if content_size is None:
            raise NotFoundError("Content size", content_size_id)
        return content_size


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


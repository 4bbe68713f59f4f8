"""Django ORM implementation of the LedgerStore.

Each save replaces an aggregate and its child rows inside one
transaction, so a failure part-way leaves the previous version intact.
"""

import logging

from django.db import IntegrityError, transaction

from adledger import models as orm
from adledger.domain import (
    Booking,
    BookingEntry,
    BookingId,
    BookingStatus,
    ChargeMode,
    ContentSize,
    ContentSizeId,
    Issue,
    IssueKey,
    Label,
    LabelId,
    LabelKind,
    LeafletDelivery,
    LeafletDeliveryId,
    Magazine,
    MagazineId,
    Money,
    PageCount,
    PageUnits,
    Percentage,
    Schedule,
    ScheduleId,
)
from adledger.domain.errors import DuplicateError
from adledger.stores.interfaces import LedgerStore

logger = logging.getLogger(__name__)


def _to_schedule(row: orm.Schedule) -> Schedule:
    return Schedule(
        id=ScheduleId(row.id),
        owner_id=row.owner_id,
        name=row.name,
        issues=tuple(
            Issue(
                name=issue.name,
                close_date=issue.close_date,
                sort_order=issue.sort_order,
                key=IssueKey(issue.key_year, issue.key_month, issue.key_disambiguator),
            )
            for issue in row.issues.all()
        ),
        created_at=row.created_at,
        archived=row.archived,
    )


def _to_magazine(row: orm.Magazine) -> Magazine:
    return Magazine(
        id=MagazineId(row.id),
        owner_id=row.owner_id,
        name=row.name,
        schedule_id=ScheduleId(row.schedule_id),
        page_configurations={
            config.issue_name: PageCount(config.total_pages)
            for config in row.page_configurations.all()
        },
        created_at=row.created_at,
        archived=row.archived,
    )


def _to_content_size(row: orm.ContentSize) -> ContentSize:
    return ContentSize(
        id=ContentSizeId(row.id),
        owner_id=row.owner_id,
        description=row.description,
        size=PageUnits(row.size),
        pricing={MagazineId(price.magazine_id): Money(price.price) for price in row.prices.all()},
        created_at=row.created_at,
        archived=row.archived,
    )


def _to_label(row: orm.Label) -> Label:
    return Label(
        id=LabelId(row.id),
        kind=LabelKind(row.kind),
        owner_id=row.owner_id,
        name=row.name,
        description=row.description,
        is_default=row.is_default,
        archived=row.archived,
    )


def _to_booking(row: orm.Booking) -> Booking:
    return Booking(
        id=BookingId(row.id),
        owner_id=row.owner_id,
        customer_ref=row.customer_ref,
        entries=tuple(
            BookingEntry(
                magazine_id=MagazineId(entry.magazine_id),
                content_size_id=ContentSizeId(entry.content_size_id),
                content_type=entry.content_type,
                list_price=Money(entry.list_price),
                discount_percentage=Percentage(entry.discount_percentage),
                discount_value=Money(entry.discount_value),
                start_issue=entry.start_issue,
                finish_issue=entry.finish_issue,
                is_ongoing=entry.is_ongoing,
                apportioned_charges=Money(entry.apportioned_charges),
                net_value=Money(entry.net_value),
            )
            for entry in row.entries.all()
        ),
        additional_charges=Money(row.additional_charges),
        charge_mode=ChargeMode(row.charge_mode),
        notes=row.notes,
        status=BookingStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_leaflet_delivery(row: orm.LeafletDelivery) -> LeafletDelivery:
    return LeafletDelivery(
        id=LeafletDeliveryId(row.id),
        owner_id=row.owner_id,
        customer_ref=row.customer_ref,
        magazine_id=MagazineId(row.magazine_id),
        issue_name=row.issue_name,
        description=row.description,
        quantity=row.quantity,
        price=Money(row.price),
        discount_percentage=Percentage(row.discount_percentage),
        discount_value=Money(row.discount_value),
        additional_charges=Money(row.additional_charges),
        net_value=Money(row.net_value),
        notes=row.notes,
        status=BookingStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DjangoLedgerStore(LedgerStore):
    """Relational store using the Django ORM."""

    # Schedules

    def _schedules(self):
        return orm.Schedule.objects.prefetch_related("issues")

    def list_schedules(self, owner_id: str, include_archived: bool = False) -> list[Schedule]:
        rows = self._schedules().filter(owner_id=owner_id)
        if not include_archived:
            rows = rows.filter(archived=False)
        return [_to_schedule(row) for row in rows.order_by("-created_at")]

    def get_schedule(self, owner_id: str, schedule_id: ScheduleId) -> Schedule | None:
        row = self._schedules().filter(owner_id=owner_id, id=schedule_id.value).first()
        return _to_schedule(row) if row is not None else None

    def find_schedule_by_name(self, owner_id: str, name: str) -> Schedule | None:
        row = self._schedules().filter(owner_id=owner_id, name=name, archived=False).first()
        return _to_schedule(row) if row is not None else None

    @transaction.atomic
    def save_schedule(self, schedule: Schedule) -> None:
        row, _ = orm.Schedule.objects.update_or_create(
            id=schedule.id.value,
            defaults={
                "owner_id": schedule.owner_id,
                "name": schedule.name,
                "archived": schedule.archived,
                "created_at": schedule.created_at,
            },
        )
        row.issues.all().delete()
        orm.ScheduleIssue.objects.bulk_create(
            orm.ScheduleIssue(
                schedule=row,
                name=issue.name,
                close_date=issue.close_date,
                sort_order=issue.sort_order,
                key_year=issue.key.year,
                key_month=issue.key.month,
                key_disambiguator=issue.key.disambiguator,
            )
            for issue in schedule.issues
        )
        orm.PageConfiguration.objects.filter(magazine__schedule_id=row.id).exclude(
            issue_name__in=schedule.issue_names()
        ).delete()

    def delete_schedule(self, schedule_id: ScheduleId) -> None:
        orm.Schedule.objects.filter(id=schedule_id.value).delete()

    def schedule_in_use(self, schedule_id: ScheduleId) -> bool:
        return orm.Magazine.objects.filter(schedule_id=schedule_id.value).exists()

    # Magazines

    def _magazines(self):
        return orm.Magazine.objects.prefetch_related("page_configurations")

    def list_magazines(self, owner_id: str, include_archived: bool = False) -> list[Magazine]:
        rows = self._magazines().filter(owner_id=owner_id)
        if not include_archived:
            rows = rows.filter(archived=False)
        return [_to_magazine(row) for row in rows.order_by("name")]

    def get_magazine(self, owner_id: str, magazine_id: MagazineId) -> Magazine | None:
        row = self._magazines().filter(owner_id=owner_id, id=magazine_id.value).first()
        return _to_magazine(row) if row is not None else None

    def find_magazine_by_name(self, owner_id: str, name: str) -> Magazine | None:
        row = self._magazines().filter(owner_id=owner_id, name=name).first()
        return _to_magazine(row) if row is not None else None

    def save_magazine(self, magazine: Magazine) -> None:
        try:
            with transaction.atomic():
                row, _ = orm.Magazine.objects.update_or_create(
                    id=magazine.id.value,
                    defaults={
                        "owner_id": magazine.owner_id,
                        "name": magazine.name,
                        "schedule_id": magazine.schedule_id.value,
                        "archived": magazine.archived,
                        "created_at": magazine.created_at,
                    },
                )
                row.page_configurations.all().delete()
                orm.PageConfiguration.objects.bulk_create(
                    orm.PageConfiguration(
                        magazine=row, issue_name=issue_name, total_pages=pages.value
                    )
                    for issue_name, pages in magazine.page_configurations.items()
                )
        except IntegrityError as exc:
            raise DuplicateError("Magazine", magazine.name) from exc

    def delete_magazine(self, magazine_id: MagazineId) -> None:
        orm.Magazine.objects.filter(id=magazine_id.value).delete()

    # Content sizes

    def _content_sizes(self):
        return orm.ContentSize.objects.prefetch_related("prices")

    def list_content_sizes(
        self, owner_id: str, include_archived: bool = False
    ) -> list[ContentSize]:
        rows = self._content_sizes().filter(owner_id=owner_id)
        if not include_archived:
            rows = rows.filter(archived=False)
        return [_to_content_size(row) for row in rows.order_by("size")]

    def get_content_size(
        self, owner_id: str, content_size_id: ContentSizeId
    ) -> ContentSize | None:
        row = self._content_sizes().filter(owner_id=owner_id, id=content_size_id.value).first()
        return _to_content_size(row) if row is not None else None

    @transaction.atomic
    def save_content_size(self, content_size: ContentSize) -> None:
        row, _ = orm.ContentSize.objects.update_or_create(
            id=content_size.id.value,
            defaults={
                "owner_id": content_size.owner_id,
                "description": content_size.description,
                "size": content_size.size.value,
                "archived": content_size.archived,
                "created_at": content_size.created_at,
            },
        )
        row.prices.all().delete()
        orm.ContentSizePrice.objects.bulk_create(
            orm.ContentSizePrice(
                content_size=row, magazine_id=magazine_id.value, price=price.amount
            )
            for magazine_id, price in content_size.pricing.items()
        )

    def delete_content_size(self, content_size_id: ContentSizeId) -> None:
        orm.ContentSize.objects.filter(id=content_size_id.value).delete()

    # Labels

    def list_labels(
        self, owner_id: str, kind: LabelKind, include_archived: bool = False
    ) -> list[Label]:
        rows = orm.Label.objects.filter(owner_id=owner_id, kind=kind.value)
        if not include_archived:
            rows = rows.filter(archived=False)
        return [_to_label(row) for row in rows.order_by("name")]

    def get_label(self, owner_id: str, kind: LabelKind, label_id: LabelId) -> Label | None:
        row = orm.Label.objects.filter(
            owner_id=owner_id, kind=kind.value, id=label_id.value
        ).first()
        return _to_label(row) if row is not None else None

    def find_label_by_name(self, owner_id: str, kind: LabelKind, name: str) -> Label | None:
        row = orm.Label.objects.filter(
            owner_id=owner_id, kind=kind.value, name__iexact=name
        ).first()
        return _to_label(row) if row is not None else None

    def save_label(self, label: Label) -> None:
        try:
            with transaction.atomic():
                orm.Label.objects.update_or_create(
                    id=label.id.value,
                    defaults={
                        "kind": label.kind.value,
                        "owner_id": label.owner_id,
                        "name": label.name,
                        "description": label.description,
                        "is_default": label.is_default,
                        "archived": label.archived,
                    },
                )
        except IntegrityError as exc:
            raise DuplicateError(label.kind.value, label.name) from exc

    def delete_label(self, label_id: LabelId) -> None:
        orm.Label.objects.filter(id=label_id.value).delete()

    @transaction.atomic
    def ensure_labels(self, labels: list[Label]) -> int:
        taken = set()
        for owner_id in {label.owner_id for label in labels}:
            taken.update(
                (owner_id, kind, name.casefold())
                for kind, name in orm.Label.objects.filter(owner_id=owner_id).values_list(
                    "kind", "name"
                )
            )
        missing = []
        for label in labels:
            key = (label.owner_id, label.kind.value, label.name.casefold())
            if key not in taken:
                taken.add(key)
                missing.append(label)
        # Concurrent seeding loses the race quietly on the unique constraint.
        orm.Label.objects.bulk_create(
            [
                orm.Label(
                    id=label.id.value,
                    kind=label.kind.value,
                    owner_id=label.owner_id,
                    name=label.name,
                    description=label.description,
                    is_default=label.is_default,
                    archived=label.archived,
                )
                for label in missing
            ],
            ignore_conflicts=True,
        )
        # Rows skipped by ignore_conflicts are not counted.
        return orm.Label.objects.filter(id__in=[label.id.value for label in missing]).count()

    # Bookings

    def _bookings(self):
        return orm.Booking.objects.prefetch_related("entries")

    def list_bookings(self, owner_id: str) -> list[Booking]:
        rows = self._bookings().filter(owner_id=owner_id).order_by("-created_at")
        return [_to_booking(row) for row in rows]

    def get_booking(self, owner_id: str, booking_id: BookingId) -> Booking | None:
        row = self._bookings().filter(owner_id=owner_id, id=booking_id.value).first()
        return _to_booking(row) if row is not None else None

    @transaction.atomic
    def save_booking(self, booking: Booking) -> None:
        row, _ = orm.Booking.objects.update_or_create(
            id=booking.id.value,
            defaults={
                "owner_id": booking.owner_id,
                "customer_ref": booking.customer_ref,
                "additional_charges": booking.additional_charges.amount,
                "charge_mode": booking.charge_mode.value,
                "notes": booking.notes,
                "status": booking.status.value,
                "total_value": booking.total_value.amount,
                "created_at": booking.created_at,
                "updated_at": booking.updated_at,
            },
        )
        row.entries.all().delete()
        orm.BookingEntry.objects.bulk_create(
            orm.BookingEntry(
                booking=row,
                position=position,
                magazine_id=entry.magazine_id.value,
                content_size_id=entry.content_size_id.value,
                content_type=entry.content_type,
                list_price=entry.list_price.amount,
                discount_percentage=entry.discount_percentage.value,
                discount_value=entry.discount_value.amount,
                apportioned_charges=entry.apportioned_charges.amount,
                net_value=entry.net_value.amount,
                start_issue=entry.start_issue,
                finish_issue=entry.finish_issue,
                is_ongoing=entry.is_ongoing,
            )
            for position, entry in enumerate(booking.entries)
        )
        logger.debug("Stored booking %s with %d entries", booking.id, len(booking.entries))

    def delete_booking(self, booking_id: BookingId) -> None:
        orm.Booking.objects.filter(id=booking_id.value).delete()

    def magazine_referenced(self, magazine_id: MagazineId) -> bool:
        return (
            orm.BookingEntry.objects.filter(magazine_id=magazine_id.value).exists()
            or orm.LeafletDelivery.objects.filter(magazine_id=magazine_id.value).exists()
        )

    def content_size_referenced(self, content_size_id: ContentSizeId) -> bool:
        return orm.BookingEntry.objects.filter(content_size_id=content_size_id.value).exists()

    def content_type_referenced(self, owner_id: str, content_type: str) -> bool:
        return orm.BookingEntry.objects.filter(
            booking__owner_id=owner_id, content_type=content_type
        ).exists()

    # Leaflet deliveries

    def list_leaflet_deliveries(self, owner_id: str) -> list[LeafletDelivery]:
        rows = orm.LeafletDelivery.objects.filter(owner_id=owner_id).order_by("-created_at")
        return [_to_leaflet_delivery(row) for row in rows]

    def get_leaflet_delivery(
        self, owner_id: str, delivery_id: LeafletDeliveryId
    ) -> LeafletDelivery | None:
        row = orm.LeafletDelivery.objects.filter(owner_id=owner_id, id=delivery_id.value).first()
        return _to_leaflet_delivery(row) if row is not None else None

    def save_leaflet_delivery(self, delivery: LeafletDelivery) -> None:
        orm.LeafletDelivery.objects.update_or_create(
            id=delivery.id.value,
            defaults={
                "owner_id": delivery.owner_id,
                "customer_ref": delivery.customer_ref,
                "magazine_id": delivery.magazine_id.value,
                "issue_name": delivery.issue_name,
                "description": delivery.description,
                "quantity": delivery.quantity,
                "price": delivery.price.amount,
                "discount_percentage": delivery.discount_percentage.value,
                "discount_value": delivery.discount_value.amount,
                "additional_charges": delivery.additional_charges.amount,
                "net_value": delivery.net_value.amount,
                "notes": delivery.notes,
                "status": delivery.status.value,
                "created_at": delivery.created_at,
                "updated_at": delivery.updated_at,
            },
        )

    def delete_leaflet_delivery(self, delivery_id: LeafletDeliveryId) -> None:
        orm.LeafletDelivery.objects.filter(id=delivery_id.value).delete()

"""Leaflet deliveries: loose inserts carried in one issue of a magazine."""

import logging
from dataclasses import dataclass
from datetime import datetime

from adledger.domain import (
    BookingStatus,
    LeafletDelivery,
    LeafletDeliveryId,
    LeafletDraft,
    Magazine,
    MagazineId,
    Money,
)
from adledger.domain.errors import NotFoundError, UnknownIssueError, ValidationError
from adledger.domain.models import LeafletReportRow, Report
from adledger.domain.pricing import net_value
from adledger.services.common import Clock, parse_id, to_money, to_percentage, utc_now
from adledger.stores.interfaces import LeafletStore, MagazineStore, ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeafletFilter:
    """Optional criteria for listing leaflet deliveries; unset fields match all."""

    customer_ref: str | None = None
    magazine_id: str | None = None
    issue_name: str | None = None
    status: BookingStatus | None = None


class LeafletDeliveryService:
    """Service for leaflet delivery operations."""

    def __init__(
        self,
        leaflets: LeafletStore,
        magazines: MagazineStore,
        schedules: ScheduleStore,
        clock: Clock = utc_now,
    ) -> None:
        self._leaflets = leaflets
        self._magazines = magazines
        self._schedules = schedules
        self._clock = clock

    def get_delivery(self, owner_id: str, delivery_id: str) -> LeafletDelivery:
        did = parse_id(LeafletDeliveryId, delivery_id, "delivery_id")
        delivery = self._leaflets.get_leaflet_delivery(owner_id, did)
        if delivery is None:
            raise NotFoundError("Leaflet delivery", delivery_id)
        return delivery

    def create_delivery(
        self, owner_id: str, customer_ref: str, draft: LeafletDraft
    ) -> LeafletDelivery:
        """Validate, price and store a leaflet delivery.

        Raises:
            ValidationError: On a missing customer, issue or description, a
                quantity below one, or malformed amounts.
            NotFoundError: If the magazine does not exist.
            UnknownIssueError: If the issue is not in the magazine's schedule.
        """
        now = self._clock()
        delivery = self._build(
            owner_id, LeafletDeliveryId.new(), customer_ref, draft, BookingStatus.ACTIVE, now, now
        )
        self._leaflets.save_leaflet_delivery(delivery)
        logger.info("Created leaflet delivery %s for issue %s", delivery.id, delivery.issue_name)
        return delivery

    def update_delivery(
        self,
        owner_id: str,
        delivery_id: str,
        customer_ref: str,
        draft: LeafletDraft,
        status: BookingStatus | None = None,
    ) -> LeafletDelivery:
        """Replace every field of a delivery and reprice it; status is kept if omitted."""
        current = self.get_delivery(owner_id, delivery_id)
        updated = self._build(
            owner_id,
            current.id,
            customer_ref,
            draft,
            status or current.status,
            current.created_at,
            self._clock(),
        )
        self._leaflets.save_leaflet_delivery(updated)
        logger.info("Updated leaflet delivery %s", current.id)
        return updated

    def delete_delivery(self, owner_id: str, delivery_id: str) -> None:
        delivery = self.get_delivery(owner_id, delivery_id)
        self._leaflets.delete_leaflet_delivery(delivery.id)
        logger.info("Deleted leaflet delivery %s", delivery.id)

    def list_deliveries(
        self, owner_id: str, criteria: LeafletFilter | None = None
    ) -> list[LeafletDelivery]:
        """Return the owner's deliveries, newest first, narrowed by criteria."""
        criteria = criteria or LeafletFilter()
        deliveries = self._leaflets.list_leaflet_deliveries(owner_id)
        if criteria.customer_ref is not None:
            deliveries = [d for d in deliveries if d.customer_ref == criteria.customer_ref]
        if criteria.magazine_id is not None:
            mid = parse_id(MagazineId, criteria.magazine_id, "magazine_id")
            deliveries = [d for d in deliveries if d.magazine_id == mid]
        if criteria.issue_name is not None:
            deliveries = [d for d in deliveries if d.issue_name == criteria.issue_name]
        if criteria.status is not None:
            deliveries = [d for d in deliveries if d.status is criteria.status]
        return deliveries

    def report(self, owner_id: str, criteria: LeafletFilter | None = None) -> Report:
        """Flattened rows for the filtered deliveries with their summed net value."""
        names: dict[MagazineId, str] = {}
        rows = []
        total = Money.zero()
        for delivery in self.list_deliveries(owner_id, criteria):
            if delivery.magazine_id not in names:
                magazine = self._magazines.get_magazine(owner_id, delivery.magazine_id)
                names[delivery.magazine_id] = magazine.name if magazine is not None else ""
            rows.append(
                LeafletReportRow(
                    delivery_id=delivery.id,
                    customer_ref=delivery.customer_ref,
                    magazine_name=names[delivery.magazine_id],
                    issue_name=delivery.issue_name,
                    description=delivery.description,
                    quantity=delivery.quantity,
                    price=delivery.price,
                    net_value=delivery.net_value,
                    notes=delivery.notes,
                    status=delivery.status,
                )
            )
            total = total + delivery.net_value
        return Report(rows=tuple(rows), total_value=total)

    def _build(
        self,
        owner_id: str,
        delivery_id: LeafletDeliveryId,
        customer_ref: str,
        draft: LeafletDraft,
        status: BookingStatus,
        created_at: datetime,
        updated_at: datetime,
    ) -> LeafletDelivery:
        customer_ref = (customer_ref or "").strip()
        if not customer_ref:
            raise ValidationError("Customer is required", field="customer_ref")
        description = (draft.description or "").strip()
        if not description:
            raise ValidationError("Leaflet description is required", field="description")
        if draft.quantity is None or draft.quantity < 1:
            raise ValidationError("Quantity must be at least 1", field="quantity")

        magazine = self._magazine(owner_id, draft.magazine_id)
        issue_name = (draft.issue_name or "").strip()
        if not issue_name:
            raise ValidationError("Issue is required", field="issue_name")
        schedule = self._schedules.get_schedule(owner_id, magazine.schedule_id)
        if schedule is None or schedule.issue_named(issue_name) is None:
            raise UnknownIssueError(issue_name)

        price = to_money(draft.price, "price")
        discount_percentage = to_percentage(draft.discount_percentage, "discount_percentage")
        discount_value = to_money(draft.discount_value, "discount_value")
        charges = to_money(draft.additional_charges, "additional_charges")
        return LeafletDelivery(
            id=delivery_id,
            owner_id=owner_id,
            customer_ref=customer_ref,
            magazine_id=magazine.id,
            issue_name=issue_name,
            description=description,
            quantity=draft.quantity,
            price=price,
            discount_percentage=discount_percentage,
            discount_value=discount_value,
            additional_charges=charges,
            net_value=net_value(price, discount_percentage, discount_value, charges),
            notes=(draft.notes or "").strip(),
            status=status,
            created_at=created_at,
            updated_at=updated_at,
        )

    def _magazine(self, owner_id: str, magazine_id: str) -> Magazine:
        mid = parse_id(MagazineId, magazine_id, "magazine_id")
        magazine = self._magazines.get_magazine(owner_id, mid)
        if magazine is None:
            raise NotFoundError("Magazine", magazine_id)
        return magazine

"""In-process LedgerStore backed by dictionaries.

Used by the service tests and by tooling that runs the ledger without a
database. Saves replace whole aggregates, so they are atomic by construction.
"""

from dataclasses import replace

from adledger.domain import (
    Booking,
    BookingId,
    ContentSize,
    ContentSizeId,
    Label,
    LabelId,
    LabelKind,
    LeafletDelivery,
    LeafletDeliveryId,
    Magazine,
    MagazineId,
    Schedule,
    ScheduleId,
)
from adledger.domain.errors import DuplicateError
from adledger.stores.interfaces import LedgerStore


class InMemoryLedgerStore(LedgerStore):
    """Dictionary-backed store keyed by domain ids."""

    def __init__(self) -> None:
        self._schedules: dict[ScheduleId, Schedule] = {}
        self._magazines: dict[MagazineId, Magazine] = {}
        self._content_sizes: dict[ContentSizeId, ContentSize] = {}
        self._labels: dict[LabelId, Label] = {}
        self._bookings: dict[BookingId, Booking] = {}
        self._leaflets: dict[LeafletDeliveryId, LeafletDelivery] = {}

    # Schedules

    def list_schedules(self, owner_id: str, include_archived: bool = False) -> list[Schedule]:
        schedules = [
            s
            for s in self._schedules.values()
            if s.owner_id == owner_id and (include_archived or not s.archived)
        ]
        return sorted(schedules, key=lambda s: s.created_at, reverse=True)

    def get_schedule(self, owner_id: str, schedule_id: ScheduleId) -> Schedule | None:
        schedule = self._schedules.get(schedule_id)
        if schedule is None or schedule.owner_id != owner_id:
            return None
        return schedule

    def find_schedule_by_name(self, owner_id: str, name: str) -> Schedule | None:
        for schedule in self.list_schedules(owner_id):
            if schedule.name == name:
                return schedule
        return None

    def save_schedule(self, schedule: Schedule) -> None:
        self._schedules[schedule.id] = schedule
        names = set(schedule.issue_names())
        for magazine in list(self._magazines.values()):
            if magazine.schedule_id != schedule.id:
                continue
            kept = {
                issue_name: pages
                for issue_name, pages in magazine.page_configurations.items()
                if issue_name in names
            }
            if len(kept) != len(magazine.page_configurations):
                self._magazines[magazine.id] = replace(magazine, page_configurations=kept)

    def delete_schedule(self, schedule_id: ScheduleId) -> None:
        self._schedules.pop(schedule_id, None)

    def schedule_in_use(self, schedule_id: ScheduleId) -> bool:
        return any(m.schedule_id == schedule_id for m in self._magazines.values())

    # Magazines

    def list_magazines(self, owner_id: str, include_archived: bool = False) -> list[Magazine]:
        magazines = [
            m
            for m in self._magazines.values()
            if m.owner_id == owner_id and (include_archived or not m.archived)
        ]
        return sorted(magazines, key=lambda m: m.name)

    def get_magazine(self, owner_id: str, magazine_id: MagazineId) -> Magazine | None:
        magazine = self._magazines.get(magazine_id)
        if magazine is None or magazine.owner_id != owner_id:
            return None
        return magazine

    def find_magazine_by_name(self, owner_id: str, name: str) -> Magazine | None:
        for magazine in self.list_magazines(owner_id, include_archived=True):
            if magazine.name == name:
                return magazine
        return None

    def save_magazine(self, magazine: Magazine) -> None:
        self._magazines[magazine.id] = magazine

    def delete_magazine(self, magazine_id: MagazineId) -> None:
        self._magazines.pop(magazine_id, None)

    # Content sizes

    def list_content_sizes(
        self, owner_id: str, include_archived: bool = False
    ) -> list[ContentSize]:
        sizes = [
            c
            for c in self._content_sizes.values()
            if c.owner_id == owner_id and (include_archived or not c.archived)
        ]
        return sorted(sizes, key=lambda c: c.size.value)

    def get_content_size(
        self, owner_id: str, content_size_id: ContentSizeId
    ) -> ContentSize | None:
        content_size = self._content_sizes.get(content_size_id)
        if content_size is None or content_size.owner_id != owner_id:
            return None
        return content_size

    def save_content_size(self, content_size: ContentSize) -> None:
        self._content_sizes[content_size.id] = content_size

    def delete_content_size(self, content_size_id: ContentSizeId) -> None:
        self._content_sizes.pop(content_size_id, None)

    # Labels

    def list_labels(
        self, owner_id: str, kind: LabelKind, include_archived: bool = False
    ) -> list[Label]:
        labels = [
            label
            for label in self._labels.values()
            if label.owner_id == owner_id
            and label.kind is kind
            and (include_archived or not label.archived)
        ]
        return sorted(labels, key=lambda label: label.name)

    def get_label(self, owner_id: str, kind: LabelKind, label_id: LabelId) -> Label | None:
        label = self._labels.get(label_id)
        if label is None or label.owner_id != owner_id or label.kind is not kind:
            return None
        return label

    def find_label_by_name(self, owner_id: str, kind: LabelKind, name: str) -> Label | None:
        for label in self.list_labels(owner_id, kind, include_archived=True):
            if label.name.casefold() == name.casefold():
                return label
        return None

    def save_label(self, label: Label) -> None:
        existing = self.find_label_by_name(label.owner_id, label.kind, label.name)
        if existing is not None and existing.id != label.id:
            raise DuplicateError(entity=label.kind.value, name=label.name)
        self._labels[label.id] = label

    def delete_label(self, label_id: LabelId) -> None:
        self._labels.pop(label_id, None)

    def ensure_labels(self, labels: list[Label]) -> int:
        created = 0
        for label in labels:
            if self.find_label_by_name(label.owner_id, label.kind, label.name) is None:
                self._labels[label.id] = label
                created += 1
        return created

    # Bookings

    def list_bookings(self, owner_id: str) -> list[Booking]:
        bookings = [b for b in self._bookings.values() if b.owner_id == owner_id]
        return sorted(bookings, key=lambda b: b.created_at, reverse=True)

    def get_booking(self, owner_id: str, booking_id: BookingId) -> Booking | None:
        booking = self._bookings.get(booking_id)
        if booking is None or booking.owner_id != owner_id:
            return None
        return booking

    def save_booking(self, booking: Booking) -> None:
        self._bookings[booking.id] = booking

    def delete_booking(self, booking_id: BookingId) -> None:
        self._bookings.pop(booking_id, None)

    def magazine_referenced(self, magazine_id: MagazineId) -> bool:
        return any(magazine_id in b.magazine_ids() for b in self._bookings.values()) or any(
            d.magazine_id == magazine_id for d in self._leaflets.values()
        )

    def content_size_referenced(self, content_size_id: ContentSizeId) -> bool:
        return any(
            entry.content_size_id == content_size_id
            for booking in self._bookings.values()
            for entry in booking.entries
        )

    def content_type_referenced(self, owner_id: str, content_type: str) -> bool:
        return any(
            entry.content_type == content_type
            for booking in self.list_bookings(owner_id)
            for entry in booking.entries
        )

    # Leaflet deliveries

    def list_leaflet_deliveries(self, owner_id: str) -> list[LeafletDelivery]:
        deliveries = [d for d in self._leaflets.values() if d.owner_id == owner_id]
        return sorted(deliveries, key=lambda d: d.created_at, reverse=True)

    def get_leaflet_delivery(
        self, owner_id: str, delivery_id: LeafletDeliveryId
    ) -> LeafletDelivery | None:
        delivery = self._leaflets.get(delivery_id)
        if delivery is None or delivery.owner_id != owner_id:
            return None
        return delivery

    def save_leaflet_delivery(self, delivery: LeafletDelivery) -> None:
        self._leaflets[delivery.id] = delivery

    def delete_leaflet_delivery(self, delivery_id: LeafletDeliveryId) -> None:
        self._leaflets.pop(delivery_id, None)

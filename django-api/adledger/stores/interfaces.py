"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every save writes the
aggregate and all of its children as one unit.
"""

from abc import ABC, abstractmethod

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


class ScheduleStore(ABC):
    """Interface for schedule persistence operations."""

    @abstractmethod
    def list_schedules(self, owner_id: str, include_archived: bool = False) -> list[Schedule]:
        """Return the owner's schedules ordered by created_at descending."""
        ...

    @abstractmethod
    def get_schedule(self, owner_id: str, schedule_id: ScheduleId) -> Schedule | None:
        """Return a schedule by ID, or None if not found."""
        ...

    @abstractmethod
    def find_schedule_by_name(self, owner_id: str, name: str) -> Schedule | None:
        """Return the owner's unarchived schedule with this name, if any."""
        ...

    @abstractmethod
    def save_schedule(self, schedule: Schedule) -> None:
        """Insert or replace a schedule together with its issues.

        Page configurations of bound magazines for issues the schedule no
        longer has are removed in the same write.
        """
        ...

    @abstractmethod
    def delete_schedule(self, schedule_id: ScheduleId) -> None:
        ...

    @abstractmethod
    def schedule_in_use(self, schedule_id: ScheduleId) -> bool:
        """Check if any magazine is bound to the schedule."""
        ...


class MagazineStore(ABC):
    """Interface for magazine persistence operations."""

    @abstractmethod
    def list_magazines(self, owner_id: str, include_archived: bool = False) -> list[Magazine]:
        """Return the owner's magazines ordered by name."""
        ...

    @abstractmethod
    def get_magazine(self, owner_id: str, magazine_id: MagazineId) -> Magazine | None:
        ...

    @abstractmethod
    def find_magazine_by_name(self, owner_id: str, name: str) -> Magazine | None:
        ...

    @abstractmethod
    def save_magazine(self, magazine: Magazine) -> None:
        """Insert or replace a magazine together with its page configurations."""
        ...

    @abstractmethod
    def delete_magazine(self, magazine_id: MagazineId) -> None:
        ...


class ContentSizeStore(ABC):
    """Interface for content size and pricing persistence."""

    @abstractmethod
    def list_content_sizes(
        self, owner_id: str, include_archived: bool = False
    ) -> list[ContentSize]:
        """Return the owner's content sizes ordered by size ascending."""
        ...

    @abstractmethod
    def get_content_size(
        self, owner_id: str, content_size_id: ContentSizeId
    ) -> ContentSize | None:
        ...

    @abstractmethod
    def save_content_size(self, content_size: ContentSize) -> None:
        """Insert or replace a content size together with its prices."""
        ...

    @abstractmethod
    def delete_content_size(self, content_size_id: ContentSizeId) -> None:
        ...


class LabelStore(ABC):
    """Interface for content type and business type persistence."""

    @abstractmethod
    def list_labels(
        self, owner_id: str, kind: LabelKind, include_archived: bool = False
    ) -> list[Label]:
        """Return the owner's labels of one kind ordered by name."""
        ...

    @abstractmethod
    def get_label(self, owner_id: str, kind: LabelKind, label_id: LabelId) -> Label | None:
        ...

    @abstractmethod
    def find_label_by_name(self, owner_id: str, kind: LabelKind, name: str) -> Label | None:
        ...

    @abstractmethod
    def save_label(self, label: Label) -> None:
        """Insert or replace a label.

        Raises:
            DuplicateError: If another label of the owner has the same name.
        """
        ...

    @abstractmethod
    def delete_label(self, label_id: LabelId) -> None:
        ...

    @abstractmethod
    def ensure_labels(self, labels: list[Label]) -> int:
        """Insert labels whose (owner, kind, name) is not yet taken.

        Must be safe to call concurrently for the same owner. Returns the
        number of labels actually inserted.
        """
        ...


class BookingStore(ABC):
    """Interface for booking persistence operations."""

    @abstractmethod
    def list_bookings(self, owner_id: str) -> list[Booking]:
        """Return the owner's bookings ordered by created_at descending."""
        ...

    @abstractmethod
    def get_booking(self, owner_id: str, booking_id: BookingId) -> Booking | None:
        ...

    @abstractmethod
    def save_booking(self, booking: Booking) -> None:
        """Insert or replace a booking and its whole entry set atomically."""
        ...

    @abstractmethod
    def delete_booking(self, booking_id: BookingId) -> None:
        """Permanently remove a booking and its entries."""
        ...

    @abstractmethod
    def magazine_referenced(self, magazine_id: MagazineId) -> bool:
        """Check if any booking entry or leaflet delivery uses the magazine."""
        ...

    @abstractmethod
    def content_size_referenced(self, content_size_id: ContentSizeId) -> bool:
        ...

    @abstractmethod
    def content_type_referenced(self, owner_id: str, content_type: str) -> bool:
        ...


class LeafletStore(ABC):
    """Interface for leaflet delivery persistence operations."""

    @abstractmethod
    def list_leaflet_deliveries(self, owner_id: str) -> list[LeafletDelivery]:
        """Return the owner's leaflet deliveries ordered by created_at descending."""
        ...

    @abstractmethod
    def get_leaflet_delivery(
        self, owner_id: str, delivery_id: LeafletDeliveryId
    ) -> LeafletDelivery | None:
        ...

    @abstractmethod
    def save_leaflet_delivery(self, delivery: LeafletDelivery) -> None:
        ...

    @abstractmethod
    def delete_leaflet_delivery(self, delivery_id: LeafletDeliveryId) -> None:
        ...


class LedgerStore(
    ScheduleStore, MagazineStore, ContentSizeStore, LabelStore, BookingStore, LeafletStore
):
    """Everything the services need from one backing store."""

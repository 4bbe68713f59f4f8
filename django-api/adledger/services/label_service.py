"""Content types and business types: owner-scoped labels with defaults."""

import logging
from collections.abc import Iterable
from dataclasses import replace

from adledger.domain import Label, LabelId, LabelKind
from adledger.domain.errors import DuplicateError, NotFoundError, ProtectedError, ValidationError
from adledger.services.common import parse_id
from adledger.stores.interfaces import BookingStore, LabelStore

logger = logging.getLogger(__name__)

_ENTITY_NAMES = {
    LabelKind.CONTENT_TYPE: "Content type",
    LabelKind.BUSINESS_TYPE: "Business type",
}


class LabelService:
    """Service for ContentType and BusinessType labels.

    Default labels come from a seed table handed in at construction, so the
    list lives in configuration rather than in business logic.
    """

    def __init__(
        self,
        labels: LabelStore,
        bookings: BookingStore,
        default_content_types: Iterable[tuple[str, str]] = (),
        default_business_types: Iterable[str] = (),
    ) -> None:
        self._labels = labels
        self._bookings = bookings
        self._seeds = {
            LabelKind.CONTENT_TYPE: list(default_content_types),
            LabelKind.BUSINESS_TYPE: [(name, "") for name in default_business_types],
        }

    def list_labels(
        self, owner_id: str, kind: LabelKind, include_archived: bool = False
    ) -> list[Label]:
        return self._labels.list_labels(owner_id, kind, include_archived)

    def get_label(self, owner_id: str, kind: LabelKind, label_id: str) -> Label:
        lid = parse_id(LabelId, label_id, "label_id")
        label = self._labels.get_label(owner_id, kind, lid)
        if label is None:
            raise NotFoundError(_ENTITY_NAMES[kind], label_id)
        return label

    def is_active_content_type(self, owner_id: str, name: str) -> bool:
        return self.resolve_content_type(owner_id, name) is not None

    def resolve_content_type(self, owner_id: str, name: str) -> str | None:
        """Stored spelling of an active content type, matched case-insensitively."""
        label = self._labels.find_label_by_name(owner_id, LabelKind.CONTENT_TYPE, name)
        if label is None or label.archived:
            return None
        return label.name

    def create_label(
        self, owner_id: str, kind: LabelKind, name: str, description: str = ""
    ) -> Label:
        name = _clean(name)
        if self._labels.find_label_by_name(owner_id, kind, name) is not None:
            raise DuplicateError(_ENTITY_NAMES[kind], name)
        label = Label(
            id=LabelId.new(),
            kind=kind,
            owner_id=owner_id,
            name=name,
            description=(description or "").strip(),
        )
        self._labels.save_label(label)
        return label

    def rename_label(
        self,
        owner_id: str,
        kind: LabelKind,
        label_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> Label:
        """Change a label's name, its description, or both.

        An argument left as None keeps the stored value. Booking entries
        refer to content types by name, so a content type in use cannot be
        renamed.
        """
        label = self.get_label(owner_id, kind, label_id)
        new_name = label.name if name is None else _clean(name)
        if new_name != label.name:
            clash = self._labels.find_label_by_name(owner_id, kind, new_name)
            if clash is not None and clash.id != label.id:
                raise DuplicateError(_ENTITY_NAMES[kind], new_name)
            if kind is LabelKind.CONTENT_TYPE and self._bookings.content_type_referenced(
                owner_id, label.name
            ):
                raise ProtectedError("Content type is used by bookings; archive it instead")
        new_description = label.description if description is None else description.strip()
        updated = replace(label, name=new_name, description=new_description)
        self._labels.save_label(updated)
        return updated

    def archive_label(self, owner_id: str, kind: LabelKind, label_id: str) -> Label:
        return self._set_archived(owner_id, kind, label_id, True)

    def restore_label(self, owner_id: str, kind: LabelKind, label_id: str) -> Label:
        return self._set_archived(owner_id, kind, label_id, False)

    def delete_label(self, owner_id: str, kind: LabelKind, label_id: str) -> None:
        """Permanently delete a label.

        Raises:
            ProtectedError: If the label is a default, or a content type that
                booking entries still use.
        """
        label = self.get_label(owner_id, kind, label_id)
        if label.is_default:
            raise ProtectedError(f"Cannot delete default {_ENTITY_NAMES[kind].lower()}s")
        if kind is LabelKind.CONTENT_TYPE and self._bookings.content_type_referenced(
            owner_id, label.name
        ):
            raise ProtectedError("Content type is used by bookings; archive it instead")
        self._labels.delete_label(label.id)

    def seed_defaults(self, owner_id: str) -> int:
        """Insert the configured default labels the owner does not have yet.

        Idempotent: the store skips names already taken under its
        (owner, kind, name) uniqueness constraint.
        """
        labels = [
            Label(
                id=LabelId.new(),
                kind=kind,
                owner_id=owner_id,
                name=name,
                description=description,
                is_default=True,
            )
            for kind, seeds in self._seeds.items()
            for name, description in seeds
        ]
        if not labels:
            return 0
        created = self._labels.ensure_labels(labels)
        if created:
            logger.info("Seeded %d default labels for owner %s", created, owner_id)
        return created

    def _set_archived(
        self, owner_id: str, kind: LabelKind, label_id: str, archived: bool
    ) -> Label:
        label = self.get_label(owner_id, kind, label_id)
        updated = replace(label, archived=archived)
        self._labels.save_label(updated)
        return updated


def _clean(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name is required", field="name")
    return cleaned

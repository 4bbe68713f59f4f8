"""Magazine catalog: publications, their schedule and per-issue page budgets."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from adledger.domain import (
    DEFAULT_PAGE_COUNT,
    Magazine,
    MagazineId,
    PageCount,
    Schedule,
    ScheduleId,
)
from adledger.domain.errors import (
    DuplicateError,
    ErrorCode,
    NotFoundError,
    ProtectedError,
    UnknownIssueError,
    ValidationError,
)
from adledger.services.common import Clock, parse_id, utc_now
from adledger.stores.interfaces import BookingStore, MagazineStore, ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssueBudget:
    """An issue of the bound schedule with its effective page count."""

    issue_name: str
    close_date: datetime
    total_pages: int
    configured: bool


class MagazineCatalogService:
    """Service for magazine catalog operations."""

    def __init__(
        self,
        magazines: MagazineStore,
        schedules: ScheduleStore,
        bookings: BookingStore,
        default_page_count: int = DEFAULT_PAGE_COUNT,
        clock: Clock = utc_now,
    ) -> None:
        self._magazines = magazines
        self._schedules = schedules
        self._bookings = bookings
        self._default_page_count = PageCount(default_page_count).value
        self._clock = clock

    @property
    def default_page_count(self) -> int:
        return self._default_page_count

    def list_magazines(self, owner_id: str, include_archived: bool = False) -> list[Magazine]:
        return self._magazines.list_magazines(owner_id, include_archived=include_archived)

    def get_magazine(self, owner_id: str, magazine_id: str) -> Magazine:
        """Return a magazine by ID.

        Raises:
            ValidationError: If the magazine_id is not a valid UUID.
            NotFoundError: If the magazine does not exist for this owner.
        """
        mid = parse_id(MagazineId, magazine_id, "magazine_id")
        magazine = self._magazines.get_magazine(owner_id, mid)
        if magazine is None:
            raise NotFoundError("Magazine", magazine_id)
        return magazine

    def create_magazine(
        self,
        owner_id: str,
        name: str,
        schedule_id: str,
        page_configurations: dict[str, int] | None = None,
    ) -> Magazine:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Magazine name is required", field="name")
        if self._magazines.find_magazine_by_name(owner_id, name) is not None:
            raise DuplicateError("Magazine", name)

        schedule = self._schedule(owner_id, schedule_id)
        pages = _page_configurations(schedule, page_configurations or {})
        magazine = Magazine(
            id=MagazineId.new(),
            owner_id=owner_id,
            name=name,
            schedule_id=schedule.id,
            page_configurations=pages,
            created_at=self._clock(),
        )
        self._magazines.save_magazine(magazine)
        logger.info("Created magazine %s on schedule %s", magazine.id, schedule.id)
        return magazine

    def update_magazine(
        self,
        owner_id: str,
        magazine_id: str,
        name: str | None = None,
        schedule_id: str | None = None,
    ) -> Magazine:
        """Rename and/or rebind a magazine in a single write.

        Every change is validated before anything is saved, so a bad
        schedule leaves the name untouched. On rebind, page configurations
        for issues the new schedule lacks are dropped.

        Raises:
            ValidationError: If the name is blank.
            DuplicateError: If another magazine of this owner has the name.
            NotFoundError: If the magazine or the schedule does not exist.
        """
        magazine = self.get_magazine(owner_id, magazine_id)
        updated = magazine
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Magazine name is required", field="name")
            clash = self._magazines.find_magazine_by_name(owner_id, name)
            if clash is not None and clash.id != magazine.id:
                raise DuplicateError("Magazine", name)
            updated = replace(updated, name=name)
        if schedule_id is not None:
            schedule = self._schedule(owner_id, schedule_id)
            kept = {
                issue_name: pages
                for issue_name, pages in magazine.page_configurations.items()
                if schedule.issue_named(issue_name) is not None
            }
            dropped = sorted(set(magazine.page_configurations) - set(kept))
            if dropped:
                logger.warning(
                    "Dropped page configurations %s of magazine %s on rebind",
                    ", ".join(dropped),
                    magazine.id,
                )
            updated = replace(updated, schedule_id=schedule.id, page_configurations=kept)
        if updated != magazine:
            self._magazines.save_magazine(updated)
        return updated

    def rename(self, owner_id: str, magazine_id: str, name: str) -> Magazine:
        return self.update_magazine(owner_id, magazine_id, name=name or "")

    def bind(self, owner_id: str, magazine_id: str, schedule_id: str) -> Magazine:
        return self.update_magazine(owner_id, magazine_id, schedule_id=schedule_id)

    def set_page_budget(
        self, owner_id: str, magazine_id: str, issue_name: str, total_pages: int
    ) -> Magazine:
        """Set the page count of one issue.

        Raises:
            UnknownIssueError: If the issue is not in the bound schedule.
            ValidationError: If total_pages is not a positive integer.
        """
        magazine = self.get_magazine(owner_id, magazine_id)
        schedule = self._bound_schedule(magazine)
        if schedule is None or schedule.issue_named(issue_name) is None:
            raise UnknownIssueError(issue_name)
        pages = dict(magazine.page_configurations)
        pages[issue_name] = _page_count(total_pages)
        updated = replace(magazine, page_configurations=pages)
        self._magazines.save_magazine(updated)
        return updated

    def page_budget(self, magazine: Magazine, issue_name: str) -> int:
        configured = magazine.page_configurations.get(issue_name)
        if configured is None:
            return self._default_page_count
        return configured.value

    def issue_budgets(self, owner_id: str, magazine_id: str) -> list[IssueBudget]:
        """Every issue of the bound schedule with its page count, read through."""
        magazine = self.get_magazine(owner_id, magazine_id)
        schedule = self._bound_schedule(magazine)
        if schedule is None:
            return []
        return [
            IssueBudget(
                issue_name=issue.name,
                close_date=issue.close_date,
                total_pages=self.page_budget(magazine, issue.name),
                configured=issue.name in magazine.page_configurations,
            )
            for issue in schedule.issues
        ]

    def archive(self, owner_id: str, magazine_id: str) -> Magazine:
        return self._set_archived(owner_id, magazine_id, True)

    def unarchive(self, owner_id: str, magazine_id: str) -> Magazine:
        return self._set_archived(owner_id, magazine_id, False)

    def delete_magazine(self, owner_id: str, magazine_id: str) -> None:
        """Permanently delete a magazine.

        Raises:
            ProtectedError: If a booking or leaflet delivery references the magazine.
        """
        magazine = self.get_magazine(owner_id, magazine_id)
        if self._bookings.magazine_referenced(magazine.id):
            raise ProtectedError(
                "Magazine is referenced by bookings or leaflet deliveries; archive it instead",
                code=ErrorCode.MAGAZINE_IN_USE,
            )
        self._magazines.delete_magazine(magazine.id)
        logger.info("Deleted magazine %s", magazine.id)

    def _set_archived(self, owner_id: str, magazine_id: str, archived: bool) -> Magazine:
        magazine = self.get_magazine(owner_id, magazine_id)
        if magazine.archived == archived:
            return magazine
        updated = replace(magazine, archived=archived)
        self._magazines.save_magazine(updated)
        logger.info("Set archived=%s on magazine %s", archived, magazine.id)
        return updated

    def _schedule(self, owner_id: str, schedule_id: str) -> Schedule:
        sid = parse_id(ScheduleId, schedule_id, "schedule_id")
        schedule = self._schedules.get_schedule(owner_id, sid)
        if schedule is None:
            raise NotFoundError("Schedule", schedule_id)
        return schedule

    def _bound_schedule(self, magazine: Magazine) -> Schedule | None:
        return self._schedules.get_schedule(magazine.owner_id, magazine.schedule_id)


def _page_count(total_pages: int) -> PageCount:
    try:
        return PageCount(total_pages)
    except ValueError as exc:
        raise ValidationError(str(exc), field="total_pages") from exc


def _page_configurations(schedule: Schedule, raw: dict[str, int]) -> dict[str, PageCount]:
    pages = {}
    for issue_name, total_pages in raw.items():
        if schedule.issue_named(issue_name) is None:
            raise UnknownIssueError(issue_name)
        pages[issue_name] = _page_count(total_pages)
    return pages

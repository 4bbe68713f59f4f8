"""Schedule registry: owner-scoped schedules and their dated issues."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from adledger.domain import Issue, IssueDraft, Schedule, ScheduleId
from adledger.domain.errors import (
    DuplicateError,
    DuplicateIssueNameError,
    EmptyScheduleError,
    ErrorCode,
    IssueClosedError,
    NotFoundError,
    ProtectedError,
    ValidationError,
)
from adledger.domain.issues import current_issue, ordering_warnings
from adledger.services.common import Clock, parse_id, utc_now
from adledger.stores.interfaces import ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssueAvailability:
    """Whether an issue name can still be booked."""

    available: bool
    issue_name: str
    close_date: datetime | None = None
    schedule_name: str | None = None


class ScheduleService:
    """Service for schedule registry operations."""

    def __init__(self, store: ScheduleStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock

    def list_schedules(self, owner_id: str, include_archived: bool = False) -> list[Schedule]:
        return self._store.list_schedules(owner_id, include_archived=include_archived)

    def get_schedule(self, owner_id: str, schedule_id: str) -> Schedule:
        """Return a schedule by ID.

        Raises:
            ValidationError: If the schedule_id is not a valid UUID.
            NotFoundError: If the schedule does not exist for this owner.
        """
        sid = parse_id(ScheduleId, schedule_id, "schedule_id")
        schedule = self._store.get_schedule(owner_id, sid)
        if schedule is None:
            raise NotFoundError("Schedule", schedule_id)
        return schedule

    def create_schedule(self, owner_id: str, name: str, issues: list[IssueDraft]) -> Schedule:
        """Create a schedule with at least one uniquely named issue.

        Raises:
            ValidationError: If the name is blank.
            EmptyScheduleError: If no issues are given.
            DuplicateIssueNameError: If two issues share a name.
            DuplicateError: If the owner already has a schedule of that name.
        """
        name = _clean_name(name)
        built = _build_issues(issues)
        if self._store.find_schedule_by_name(owner_id, name) is not None:
            raise DuplicateError("Schedule", name)

        schedule = Schedule(
            id=ScheduleId.new(),
            owner_id=owner_id,
            name=name,
            issues=built,
            created_at=self._clock(),
        )
        self._warn_on_ordering(schedule)
        self._store.save_schedule(schedule)
        logger.info("Created schedule %s with %d issues", schedule.id, len(built))
        return schedule

    def update_schedule(
        self,
        owner_id: str,
        schedule_id: str,
        issues: list[IssueDraft],
        name: str | None = None,
    ) -> Schedule:
        """Replace a schedule's issues, and optionally its name.

        Issues whose close date has passed are locked: they must be present
        with the same name and close date. Reordering and adding future
        issues is allowed. Issues are matched by name.

        Page budgets that magazines set for removed issues are deleted, so an
        issue re-added later starts from the default page count again.

        Raises:
            EmptyScheduleError, DuplicateIssueNameError: As for create.
            IssueClosedError: If a closed issue is renamed, removed or redated.
        """
        schedule = self.get_schedule(owner_id, schedule_id)
        new_name = schedule.name if name is None else _clean_name(name)
        built = _build_issues(issues)

        if new_name != schedule.name:
            clash = self._store.find_schedule_by_name(owner_id, new_name)
            if clash is not None and clash.id != schedule.id:
                raise DuplicateError("Schedule", new_name)

        now = self._clock()
        incoming = {issue.name: issue for issue in built}
        for existing in schedule.issues:
            if not existing.is_closed(now):
                continue
            replacement = incoming.get(existing.name)
            if replacement is None or replacement.close_date != existing.close_date:
                raise IssueClosedError(existing.name)

        updated = replace(schedule, name=new_name, issues=built)
        self._warn_on_ordering(updated)
        removed = sorted(set(schedule.issue_names()) - set(incoming))
        if removed:
            logger.warning(
                "Schedule %s dropped issues %s; their page budgets are removed",
                schedule.id,
                ", ".join(removed),
            )
        self._store.save_schedule(updated)
        logger.info("Updated schedule %s", schedule.id)
        return updated

    def delete_schedule(self, owner_id: str, schedule_id: str) -> None:
        """Delete a schedule.

        Raises:
            ProtectedError: If any magazine is still bound to it.
        """
        schedule = self.get_schedule(owner_id, schedule_id)
        if self._store.schedule_in_use(schedule.id):
            raise ProtectedError(
                "Schedule is still used by a magazine", code=ErrorCode.SCHEDULE_IN_USE
            )
        self._store.delete_schedule(schedule.id)
        logger.info("Deleted schedule %s", schedule.id)

    def toggle_archive(self, owner_id: str, schedule_id: str) -> Schedule:
        schedule = self.get_schedule(owner_id, schedule_id)
        updated = replace(schedule, archived=not schedule.archived)
        self._store.save_schedule(updated)
        return updated

    def available_issues(self, owner_id: str, schedule_id: str) -> list[Issue]:
        """Issues of the schedule that have not passed their close date."""
        schedule = self.get_schedule(owner_id, schedule_id)
        now = self._clock()
        return [issue for issue in schedule.issues if not issue.is_closed(now)]

    def current_issue(self, owner_id: str) -> Issue:
        """The owner's issue with the earliest close date still to come.

        Raises:
            NoFutureIssueError: If every issue of every schedule has closed.
        """
        return current_issue(self._store.list_schedules(owner_id), self._clock())

    def validate_issue(self, owner_id: str, issue_name: str) -> IssueAvailability:
        """Check an issue name against every active schedule of the owner.

        A name no schedule knows is considered available.
        """
        now = self._clock()
        for schedule in self._store.list_schedules(owner_id):
            issue = schedule.issue_named(issue_name)
            if issue is not None and issue.is_closed(now):
                return IssueAvailability(
                    available=False,
                    issue_name=issue_name,
                    close_date=issue.close_date,
                    schedule_name=schedule.name,
                )
        return IssueAvailability(available=True, issue_name=issue_name)

    def _warn_on_ordering(self, schedule: Schedule) -> None:
        for issue_name in ordering_warnings(schedule.issues):
            logger.warning(
                "Issue %s of schedule %s closes before the issue declared ahead of it",
                issue_name,
                schedule.id,
            )


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name is required", field="name")
    return cleaned


def _build_issues(drafts: list[IssueDraft]) -> tuple[Issue, ...]:
    if not drafts:
        raise EmptyScheduleError()
    seen: set[str] = set()
    issues = []
    for position, draft in enumerate(drafts):
        issue_name = (draft.name or "").strip()
        if not issue_name:
            raise ValidationError("Issue name is required", field="issues")
        if draft.close_date is None:
            raise ValidationError("Valid close date is required", field="issues")
        if issue_name in seen:
            raise DuplicateIssueNameError(issue_name)
        seen.add(issue_name)
        issues.append(Issue.create(issue_name, draft.close_date, position))
    return tuple(issues)

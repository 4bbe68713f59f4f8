"""Chronological ordering of issues and booking-range containment.

Two comparators are provided. ``compare_issues`` works on Issue objects and
uses the structured key stored with each issue, so it is a total order.
``compare_issue_labels`` works on bare label strings for callers that only
have names: well-formed "MonYY" labels order chronologically, and every
malformed label sorts after all well-formed ones, lexically among
themselves. That keeps the label comparator transitive too.
"""

from collections.abc import Iterable
from datetime import datetime

from adledger.domain.errors import (
    InvalidRangeError,
    NoFutureIssueError,
    UnknownIssueError,
)
from adledger.domain.models import BookingEntry, Issue, Schedule
from adledger.domain.value_objects import IssueKey


def issue_label_sort_key(label: str) -> tuple[int, int, str]:
    parsed = IssueKey.parse_label(label)
    if parsed is None:
        return (1, 0, label)
    return (0, parsed.ordinal, "")


def compare_issue_labels(a: str, b: str) -> int:
    """Return -1, 0 or 1 comparing two issue labels chronologically."""
    key_a = issue_label_sort_key(a)
    key_b = issue_label_sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def compare_issues(a: Issue, b: Issue) -> int:
    """Return -1, 0 or 1 comparing two issues of the same schedule."""
    if a.key == b.key:
        return compare_issue_labels(a.name, b.name)
    return -1 if a.key < b.key else 1


def sort_issues(issues: Iterable[Issue]) -> list[Issue]:
    return sorted(issues, key=lambda issue: (issue.key, issue_label_sort_key(issue.name)))


def current_issue(schedules: Iterable[Schedule], now: datetime) -> Issue:
    """Return the issue with the earliest close date that has not passed.

    Raises:
        NoFutureIssueError: If every issue has already closed.
    """
    candidates = [
        issue
        for schedule in schedules
        for issue in schedule.issues
        if issue.close_date >= now
    ]
    if not candidates:
        raise NoFutureIssueError()
    return min(candidates, key=lambda issue: (issue.close_date, issue.key))


def ordering_warnings(issues: Iterable[Issue]) -> list[str]:
    """Names of issues whose declared order disagrees with their close date."""
    ordered = sorted(issues, key=lambda issue: issue.sort_order)
    warnings = []
    for previous, issue in zip(ordered, ordered[1:]):
        if issue.close_date < previous.close_date:
            warnings.append(issue.name)
    return warnings


def _resolve(schedule: Schedule, name: str) -> Issue:
    issue = schedule.issue_named(name)
    if issue is None:
        raise UnknownIssueError(name)
    return issue


def covers_issue(entry: BookingEntry, queried: str, schedule: Schedule) -> bool:
    """Whether a booking entry runs in the queried issue.

    An entry covers its start issue, every later issue when ongoing, and
    every issue between start and finish inclusive otherwise. A bounded
    entry without a finish issue runs in its start issue only. Issue names
    are resolved against the magazine's schedule; names the schedule no
    longer holds fall back to label ordering.
    """
    if entry.start_issue == queried:
        return True

    start = schedule.issue_named(entry.start_issue)
    target = schedule.issue_named(queried)
    if start is not None and target is not None:
        after_start = compare_issues(start, target) <= 0
    else:
        after_start = compare_issue_labels(entry.start_issue, queried) <= 0
    if not after_start:
        return False
    if entry.is_ongoing:
        return True
    if entry.finish_issue is None:
        return False

    finish = schedule.issue_named(entry.finish_issue)
    if finish is not None and target is not None:
        return compare_issues(target, finish) <= 0
    return compare_issue_labels(queried, entry.finish_issue) <= 0


def validate_range(
    schedule: Schedule, start_issue: str, finish_issue: str | None, is_ongoing: bool
) -> None:
    """Check that an entry's issues exist and run forwards.

    A bounded entry without a finish issue books its start issue only.

    Raises:
        UnknownIssueError: If either issue is not in the schedule.
        InvalidRangeError: If a bounded range finishes before it starts.
    """
    start = _resolve(schedule, start_issue)
    if is_ongoing or not finish_issue:
        return
    finish = _resolve(schedule, finish_issue)
    if compare_issues(start, finish) > 0:
        raise InvalidRangeError(start_issue, finish_issue)

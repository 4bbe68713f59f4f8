"""Domain error codes for the advertising ledger."""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Broad failure categories surfaced to the boundary layer."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    PROTECTED = "PROTECTED"
    UNKNOWN_ISSUE = "UNKNOWN_ISSUE"
    INVALID_RANGE = "INVALID_RANGE"
    PRICE_NOT_FOUND = "PRICE_NOT_FOUND"
    ISSUE_CLOSED = "ISSUE_CLOSED"


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    PROTECTED = "PROTECTED"
    EMPTY_SCHEDULE = "EMPTY_SCHEDULE"
    DUPLICATE_ISSUE_NAME = "DUPLICATE_ISSUE_NAME"
    ISSUE_CLOSED = "ISSUE_CLOSED"
    SCHEDULE_IN_USE = "SCHEDULE_IN_USE"
    MAGAZINE_IN_USE = "MAGAZINE_IN_USE"
    CONTENT_SIZE_IN_USE = "CONTENT_SIZE_IN_USE"
    UNKNOWN_ISSUE = "UNKNOWN_ISSUE"
    INVALID_RANGE = "INVALID_RANGE"
    PRICE_NOT_FOUND = "PRICE_NOT_FOUND"
    NO_FUTURE_ISSUE = "NO_FUTURE_ISSUE"

    @property
    def kind(self) -> ErrorKind:
        return _CODE_KINDS[self]


_CODE_KINDS = {
    ErrorCode.VALIDATION: ErrorKind.VALIDATION,
    ErrorCode.NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.DUPLICATE: ErrorKind.DUPLICATE,
    ErrorCode.PROTECTED: ErrorKind.PROTECTED,
    ErrorCode.EMPTY_SCHEDULE: ErrorKind.VALIDATION,
    ErrorCode.DUPLICATE_ISSUE_NAME: ErrorKind.DUPLICATE,
    ErrorCode.ISSUE_CLOSED: ErrorKind.ISSUE_CLOSED,
    ErrorCode.SCHEDULE_IN_USE: ErrorKind.PROTECTED,
    ErrorCode.MAGAZINE_IN_USE: ErrorKind.PROTECTED,
    ErrorCode.CONTENT_SIZE_IN_USE: ErrorKind.PROTECTED,
    ErrorCode.UNKNOWN_ISSUE: ErrorKind.UNKNOWN_ISSUE,
    ErrorCode.INVALID_RANGE: ErrorKind.INVALID_RANGE,
    ErrorCode.PRICE_NOT_FOUND: ErrorKind.PRICE_NOT_FOUND,
    ErrorCode.NO_FUTURE_ISSUE: ErrorKind.NOT_FOUND,
}


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    @property
    def kind(self) -> ErrorKind:
        return self.code.kind

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when a required field is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(code=ErrorCode.VALIDATION, message=message)
        self.field = field


class NotFoundError(DomainError):
    """Raised when an id does not resolve within the owner's scope."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=f"{entity} not found",
        )
        self.entity = entity
        self.entity_id = entity_id


class DuplicateError(DomainError):
    """Raised when a name collides under a uniqueness constraint."""

    def __init__(self, entity: str, name: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE,
            message=f"{entity} with this name already exists",
        )
        self.entity = entity
        self.name = name


class ProtectedError(DomainError):
    """Raised when deleting a default or still-referenced record."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.PROTECTED) -> None:
        super().__init__(code=code, message=message)


class EmptyScheduleError(DomainError):
    """Raised when a schedule would have no issues."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EMPTY_SCHEDULE,
            message="At least one issue is required",
        )


class DuplicateIssueNameError(DomainError):
    """Raised when two issues in one schedule share a name."""

    def __init__(self, issue_name: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_ISSUE_NAME,
            message=f"Issue name {issue_name!r} is used more than once",
        )
        self.issue_name = issue_name


class IssueClosedError(DomainError):
    """Raised when a closed issue's name or close date is changed."""

    def __init__(self, issue_name: str) -> None:
        super().__init__(
            code=ErrorCode.ISSUE_CLOSED,
            message=f"Cannot modify {issue_name} as its close date has passed",
        )
        self.issue_name = issue_name


class UnknownIssueError(DomainError):
    """Raised when an issue name is not part of the relevant schedule."""

    def __init__(self, issue_name: str) -> None:
        super().__init__(
            code=ErrorCode.UNKNOWN_ISSUE,
            message=f"Issue {issue_name!r} is not in the magazine's schedule",
        )
        self.issue_name = issue_name


class InvalidRangeError(DomainError):
    """Raised when a finish issue precedes its start issue."""

    def __init__(self, start_issue: str, finish_issue: str | None) -> None:
        super().__init__(
            code=ErrorCode.INVALID_RANGE,
            message=f"Finish issue {finish_issue!r} is before start issue {start_issue!r}",
        )
        self.start_issue = start_issue
        self.finish_issue = finish_issue


class PriceNotFoundError(DomainError):
    """Raised when a content size has no price for a magazine."""

    def __init__(self, content_size_id: str, magazine_id: str) -> None:
        super().__init__(
            code=ErrorCode.PRICE_NOT_FOUND,
            message="No price configured for this content size and magazine",
        )
        self.content_size_id = content_size_id
        self.magazine_id = magazine_id


class NoFutureIssueError(DomainError):
    """Raised when every known issue has passed its close date."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NO_FUTURE_ISSUE,
            message="No current or upcoming issue found",
        )

"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID, uuid4

CENT = Decimal("0.01")


@dataclass(frozen=True)
class _UUIDIdentifier:
    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ScheduleId(_UUIDIdentifier):
    """Unique identifier for a Schedule."""


@dataclass(frozen=True)
class MagazineId(_UUIDIdentifier):
    """Unique identifier for a Magazine."""


@dataclass(frozen=True)
class ContentSizeId(_UUIDIdentifier):
    """Unique identifier for a ContentSize."""


@dataclass(frozen=True)
class BookingId(_UUIDIdentifier):
    """Unique identifier for a Booking."""


@dataclass(frozen=True)
class LeafletDeliveryId(_UUIDIdentifier):
    """Unique identifier for a LeafletDelivery."""


@dataclass(frozen=True)
class LabelId(_UUIDIdentifier):
    """Unique identifier for a ContentType or BusinessType label."""


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if not self.amount.is_finite():
            raise ValueError("Money amount must be a finite number")
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def zero(cls) -> Self:
        return cls(Decimal("0"))

    def rounded(self) -> Self:
        return type(self)(self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

    def __add__(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class PageUnits:
    """Positive fractional number of pages, e.g. 0.25 for a quarter page."""

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))
        if not self.value.is_finite() or self.value <= 0:
            raise ValueError("Content size must be greater than zero")


@dataclass(frozen=True)
class PageCount:
    """Positive whole number of pages in an issue."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("Page count must be an integer")
        if self.value < 1:
            raise ValueError("Page count must be at least 1")


@dataclass(frozen=True)
class Percentage:
    """Discount percentage in the closed range [0, 100]."""

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))
        if not self.value.is_finite() or not Decimal(0) <= self.value <= Decimal(100):
            raise ValueError("Percentage must be between 0 and 100")


MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

# "Jan26", "jan 26", "January26", "Sept 26"
ISSUE_LABEL_PATTERN = re.compile(r"^\s*([A-Za-z]{3,})\s*'?(\d{2})\s*$")


def month_from_name(word: str) -> int | None:
    """Month number for a full name or a prefix of at least three letters."""
    word = word.lower()
    for number, name in enumerate(MONTH_NAMES, start=1):
        if name.startswith(word):
            return number
    return None


@dataclass(frozen=True, order=True)
class IssueKey:
    """Structured chronological identity of an issue.

    Derived once when an issue is created. Labels such as "Jan26" give the
    year and month directly; any other label falls back to the close date.
    The disambiguator is the issue's declared position, which keeps two
    issues in the same month apart.
    """

    year: int
    month: int
    disambiguator: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError("Month must be between 1 and 12")

    @property
    def ordinal(self) -> int:
        return self.year * 100 + self.month

    @classmethod
    def parse_label(cls, label: str) -> Self | None:
        """Return the key encoded in a "MonYY" label, or None."""
        match = ISSUE_LABEL_PATTERN.match(label)
        if match is None:
            return None
        month = month_from_name(match.group(1))
        if month is None:
            return None
        return cls(year=2000 + int(match.group(2)), month=month)

    @classmethod
    def derive(cls, label: str, close_date: datetime, sort_order: int) -> Self:
        parsed = cls.parse_label(label)
        if parsed is None:
            return cls(close_date.year, close_date.month, sort_order)
        return cls(parsed.year, parsed.month, sort_order)

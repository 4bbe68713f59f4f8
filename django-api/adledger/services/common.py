"""Helpers shared by the services: the clock and input coercion."""

from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import TypeVar

from adledger.domain import MagazineId, Money, PageUnits, Percentage, Schedule
from adledger.domain.errors import ValidationError
from adledger.stores.interfaces import MagazineStore, ScheduleStore

Clock = Callable[[], datetime]

IdT = TypeVar("IdT")


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_id(id_type: type[IdT], value: str, field: str) -> IdT:
    """Parse a UUID-backed identifier, mapping bad input to ValidationError."""
    try:
        return id_type.from_string(value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise ValidationError(f"Invalid {field} format", field=field) from exc


def to_decimal(value: Decimal | str | float, field: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid {field}", field=field) from exc


def to_money(value: Decimal | str | float, field: str) -> Money:
    try:
        return Money(to_decimal(value, field))
    except ValueError as exc:
        raise ValidationError(str(exc), field=field) from exc


def to_percentage(value: Decimal | str | float, field: str) -> Percentage:
    try:
        return Percentage(to_decimal(value, field))
    except ValueError as exc:
        raise ValidationError(str(exc), field=field) from exc


def to_page_units(value: Decimal | str | float, field: str) -> PageUnits:
    try:
        return PageUnits(to_decimal(value, field))
    except ValueError as exc:
        raise ValidationError(str(exc), field=field) from exc


class ScheduleLookup:
    """Resolves each magazine's bound schedule once per call."""

    def __init__(self, magazines: MagazineStore, schedules: ScheduleStore, owner_id: str) -> None:
        self._magazines = magazines
        self._schedules = schedules
        self._owner_id = owner_id
        self._cache: dict[MagazineId, Schedule | None] = {}

    def for_magazine(self, magazine_id: MagazineId) -> Schedule | None:
        if magazine_id not in self._cache:
            magazine = self._magazines.get_magazine(self._owner_id, magazine_id)
            schedule = None
            if magazine is not None:
                schedule = self._schedules.get_schedule(self._owner_id, magazine.schedule_id)
            self._cache[magazine_id] = schedule
        return self._cache[magazine_id]

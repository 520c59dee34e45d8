from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet

from core.domain.identifiers import generate_id

DEFAULT_WORKING_DAYS: FrozenSet[int] = frozenset({0, 1, 2, 3, 4})
DEFAULT_BUILD_DAYS = 120


@dataclass(frozen=True)
class WorkingCalendar:
    """Organization work week (Python weekdays, Mon=0), holidays and default build length."""

    id: str
    name: str = "Default"
    working_days: FrozenSet[int] = field(default_factory=lambda: DEFAULT_WORKING_DAYS)
    holidays: FrozenSet[date] = field(default_factory=frozenset)
    default_build_days: int = DEFAULT_BUILD_DAYS

    @staticmethod
    def create_default() -> "WorkingCalendar":
        return WorkingCalendar(id="default", name="Default")


@dataclass(frozen=True)
class Holiday:
    id: str
    calendar_id: str
    date: date
    name: str = ""

    @staticmethod
    def create(calendar_id: str, date: date, name: str = "") -> "Holiday":
        return Holiday(id=generate_id(), calendar_id=calendar_id, date=date, name=name)


__all__ = ["WorkingCalendar", "Holiday", "DEFAULT_WORKING_DAYS", "DEFAULT_BUILD_DAYS"]

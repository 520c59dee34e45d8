from __future__ import annotations

from datetime import date
from typing import Iterable, Set

from core.domain import Holiday, WorkingCalendar
from infra.db.models import HolidayORM, WorkingCalendarORM


def working_days_to_str(days: Iterable[int]) -> str:
    return ",".join(str(day) for day in sorted(days))


def working_days_from_str(raw: str | None) -> frozenset[int]:
    days: Set[int] = set()
    for part in (raw or "").split(","):
        part = part.strip()
        if part:
            days.add(int(part))
    return frozenset(days)


def calendar_from_orm(obj: WorkingCalendarORM, holidays: Iterable[date] = ()) -> WorkingCalendar:
    return WorkingCalendar(
        id=obj.id,
        name=obj.name,
        working_days=working_days_from_str(obj.working_days),
        holidays=frozenset(holidays),
        default_build_days=obj.default_build_days,
    )


def calendar_to_orm(calendar: WorkingCalendar) -> WorkingCalendarORM:
    return WorkingCalendarORM(
        id=calendar.id,
        name=calendar.name,
        working_days=working_days_to_str(calendar.working_days),
        default_build_days=calendar.default_build_days,
    )


def holiday_from_orm(obj: HolidayORM) -> Holiday:
    return Holiday(
        id=obj.id,
        calendar_id=obj.calendar_id,
        date=obj.date,
        name=obj.name,
    )


def holiday_to_orm(holiday: Holiday) -> HolidayORM:
    return HolidayORM(
        id=holiday.id,
        calendar_id=holiday.calendar_id,
        date=holiday.date,
        name=holiday.name,
    )


__all__ = [
    "calendar_from_orm",
    "calendar_to_orm",
    "holiday_from_orm",
    "holiday_to_orm",
    "working_days_from_str",
    "working_days_to_str",
]

# core/services/work_calendar/engine.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, Optional

from core.domain.calendar import WorkingCalendar
from core.exceptions import ValidationError


class WorkCalendarEngine:
    """
    Workday arithmetic over one organization calendar snapshot.

    Every date the scheduling services produce goes through this class.
    Stepping functions only count days that are in the work week and not
    holidays; results always land on a workday.
    """

    def __init__(self, calendar: Optional[WorkingCalendar] = None):
        cal = calendar or WorkingCalendar.create_default()
        working_days = frozenset(int(d) for d in cal.working_days if 0 <= int(d) <= 6)
        if not working_days:
            raise ValidationError(
                "Working calendar must contain at least one working day.",
                code="CALENDAR_NO_WORKING_DAYS",
            )
        self._calendar: WorkingCalendar = cal
        self._working_days: frozenset[int] = working_days
        self._holidays: frozenset[date] = frozenset(cal.holidays)

    @property
    def calendar(self) -> WorkingCalendar:
        return self._calendar

    @property
    def default_build_days(self) -> int:
        return max(1, int(self._calendar.default_build_days or 1))

    def is_working_day(self, d: date) -> bool:
        if d.weekday() not in self._working_days:
            return False
        return d not in self._holidays

    def next_working_day(self, d: date, include_today: bool = True) -> date:
        current = d
        if not include_today:
            current += timedelta(days=1)
        while not self.is_working_day(current):
            current += timedelta(days=1)
        return current

    def previous_working_day(self, d: date, include_today: bool = True) -> date:
        current = d
        if not include_today:
            current -= timedelta(days=1)
        while not self.is_working_day(current):
            current -= timedelta(days=1)
        return current

    def add_working_days(self, start: date, working_days: int) -> date:
        if working_days < 0:
            raise ValidationError("working_days must not be negative.", code="CALENDAR_NEGATIVE_STEP")
        if working_days == 0:
            return self.next_working_day(start)

        current = start
        days_remaining = working_days
        while days_remaining > 0:
            current += timedelta(days=1)
            if self.is_working_day(current):
                days_remaining -= 1
        return current

    def subtract_working_days(self, start: date, working_days: int) -> date:
        if working_days < 0:
            raise ValidationError("working_days must not be negative.", code="CALENDAR_NEGATIVE_STEP")
        if working_days == 0:
            return self.next_working_day(start)

        current = start
        days_remaining = working_days
        while days_remaining > 0:
            current -= timedelta(days=1)
            if self.is_working_day(current):
                days_remaining -= 1
        return current

    def shift_working_days(self, d: date, delta: int) -> date:
        if delta >= 0:
            return self.add_working_days(d, delta)
        return self.subtract_working_days(d, -delta)

    def working_days_between(self, start: date, end: date) -> int:
        """Inclusive count of workdays in [start, end]; 0 when end precedes start."""
        if end < start:
            return 0
        return sum(1 for _ in self.iter_working_days(start, end))

    def working_day_offset(self, start: date, end: date) -> int:
        """
        Signed number of workday steps from start to end.

        For workday dates, shift_working_days(start, offset) == end.
        """
        if end == start:
            return 0
        if end > start:
            return self.working_days_between(start + timedelta(days=1), end)
        return -self.working_days_between(end, start - timedelta(days=1))

    def iter_working_days(self, start: date, end: date) -> Iterator[date]:
        cur = start
        while cur <= end:
            if self.is_working_day(cur):
                yield cur
            cur += timedelta(days=1)


__all__ = ["WorkCalendarEngine"]

from datetime import date, timedelta

import pytest

from core.domain import WorkingCalendar
from core.exceptions import ValidationError
from core.services.work_calendar import WorkCalendarEngine


def test_weekends_and_holidays_are_not_workdays():
    cal = WorkCalendarEngine(
        WorkingCalendar(id="default", holidays=frozenset({date(2024, 1, 3)}))
    )

    assert cal.is_working_day(date(2024, 1, 2))
    assert not cal.is_working_day(date(2024, 1, 3))  # holiday
    assert not cal.is_working_day(date(2024, 1, 6))  # Saturday
    assert not cal.is_working_day(date(2024, 1, 7))  # Sunday


def test_add_and_subtract_skip_non_workdays():
    cal = WorkCalendarEngine()

    assert cal.add_working_days(date(2024, 1, 5), 1) == date(2024, 1, 8)
    assert cal.add_working_days(date(2024, 1, 1), 4) == date(2024, 1, 5)
    assert cal.subtract_working_days(date(2024, 1, 8), 1) == date(2024, 1, 5)
    assert cal.subtract_working_days(date(2024, 1, 10), 5) == date(2024, 1, 3)


def test_zero_step_normalizes_forward():
    cal = WorkCalendarEngine()

    assert cal.add_working_days(date(2024, 1, 6), 0) == date(2024, 1, 8)
    assert cal.add_working_days(date(2024, 1, 2), 0) == date(2024, 1, 2)
    assert cal.subtract_working_days(date(2024, 1, 7), 0) == date(2024, 1, 8)


def test_negative_step_is_rejected():
    cal = WorkCalendarEngine()

    with pytest.raises(ValidationError) as exc:
        cal.add_working_days(date(2024, 1, 2), -1)
    assert exc.value.code == "CALENDAR_NEGATIVE_STEP"

    # signed stepping goes through shift_working_days
    assert cal.shift_working_days(date(2024, 1, 8), -1) == date(2024, 1, 5)


def test_holiday_inside_a_span_pushes_the_result():
    cal = WorkCalendarEngine(
        WorkingCalendar(id="default", holidays=frozenset({date(2024, 1, 3)}))
    )

    assert cal.add_working_days(date(2024, 1, 2), 1) == date(2024, 1, 4)
    assert cal.next_working_day(date(2024, 1, 3)) == date(2024, 1, 4)
    assert cal.previous_working_day(date(2024, 1, 3)) == date(2024, 1, 2)


def test_working_days_between_is_inclusive():
    cal = WorkCalendarEngine()

    assert cal.working_days_between(date(2024, 1, 1), date(2024, 1, 7)) == 5
    assert cal.working_days_between(date(2024, 1, 6), date(2024, 1, 7)) == 0
    assert cal.working_days_between(date(2024, 1, 8), date(2024, 1, 1)) == 0


def test_offset_inverts_stepping_on_workdays():
    cal = WorkCalendarEngine(
        WorkingCalendar(id="default", holidays=frozenset({date(2024, 1, 15), date(2024, 2, 19)}))
    )
    starts = [d for d in (date(2024, 1, 1) + timedelta(days=i) for i in range(40)) if cal.is_working_day(d)]

    for start in starts:
        for n in range(0, 12):
            forward = cal.add_working_days(start, n)
            assert cal.is_working_day(forward)
            assert cal.working_day_offset(start, forward) == n
            assert cal.subtract_working_days(forward, n) == start
            assert cal.shift_working_days(forward, -n) == start


def test_custom_work_week():
    # Monday through Saturday
    cal = WorkCalendarEngine(WorkingCalendar(id="default", working_days=frozenset(range(6))))

    assert cal.add_working_days(date(2024, 1, 5), 1) == date(2024, 1, 6)
    assert cal.add_working_days(date(2024, 1, 6), 1) == date(2024, 1, 8)


def test_calendar_without_workdays_is_rejected():
    with pytest.raises(ValidationError) as exc:
        WorkCalendarEngine(WorkingCalendar(id="default", working_days=frozenset()))
    assert exc.value.code == "CALENDAR_NO_WORKING_DAYS"


def test_default_build_days_comes_from_calendar():
    assert WorkCalendarEngine().default_build_days == 120
    cal = WorkCalendarEngine(WorkingCalendar(id="default", default_build_days=90))
    assert cal.default_build_days == 90


@pytest.mark.parametrize("working_days", [frozenset({0, 1, 2, 3, 4}), frozenset({0, 2, 4}), frozenset({5})])
def test_next_working_day_is_idempotent_and_lands_on_a_workday(working_days):
    holidays = frozenset({date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3), date(2024, 7, 4), date(2024, 12, 25)})
    cal = WorkCalendarEngine(WorkingCalendar(id="default", working_days=working_days, holidays=holidays))

    day = date(2023, 12, 20)
    while day <= date(2025, 1, 10):
        nxt = cal.next_working_day(day)
        assert cal.is_working_day(nxt), day
        assert nxt >= day
        assert cal.next_working_day(nxt) == nxt
        if cal.is_working_day(day):
            assert nxt == day
        day += timedelta(days=1)

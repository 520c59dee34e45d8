from datetime import date

import pytest

from core.events.domain_events import schedule_events
from core.exceptions import NotFoundError, ValidationError


def test_default_calendar_is_created_on_first_use(services):
    wc = services["work_calendar_service"]

    cal = wc.get_calendar()

    assert cal.id == "default"
    assert cal.working_days == frozenset({0, 1, 2, 3, 4})
    assert cal.default_build_days == 120


def test_working_days_round_trip_and_validation(services):
    wc = services["work_calendar_service"]

    cal = wc.set_working_days({0, 1, 2, 3, 4, 5})
    assert cal.working_days == frozenset(range(6))
    assert wc.get_engine().is_working_day(date(2024, 1, 6))

    with pytest.raises(ValidationError) as exc:
        wc.set_working_days(set())
    assert exc.value.code == "CALENDAR_NO_WORKING_DAYS"

    with pytest.raises(ValidationError) as exc:
        wc.set_working_days({0, 7})
    assert exc.value.code == "CALENDAR_INVALID_WEEKDAY"


def test_default_build_days(services):
    wc = services["work_calendar_service"]

    assert wc.set_default_build_days(90).default_build_days == 90
    assert wc.get_engine().default_build_days == 90
    with pytest.raises(ValidationError) as exc:
        wc.set_default_build_days(0)
    assert exc.value.code == "CALENDAR_INVALID_BUILD_DAYS"


def test_holidays_add_list_delete(services):
    wc = services["work_calendar_service"]

    holiday = wc.add_holiday(date(2024, 7, 4), "Independence Day")
    assert [h.date for h in wc.list_holidays()] == [date(2024, 7, 4)]
    assert not wc.get_engine().is_working_day(date(2024, 7, 4))

    with pytest.raises(ValidationError) as exc:
        wc.add_holiday(date(2024, 7, 4))
    assert exc.value.code == "HOLIDAY_DUPLICATE"

    wc.delete_holiday(holiday.id)
    assert wc.list_holidays() == []
    with pytest.raises(NotFoundError) as exc:
        wc.delete_holiday(holiday.id)
    assert exc.value.code == "HOLIDAY_NOT_FOUND"


def test_calendar_changes_emit_events_and_audit(services):
    wc = services["work_calendar_service"]
    seen: list[str] = []
    with schedule_events.calendar_changed.subscribed(seen.append):
        wc.set_working_days({0, 1, 2, 3})
        wc.add_holiday(date(2024, 12, 25), "Christmas")

    assert seen == ["default", "default"]
    actions = {e.action for e in services["audit_service"].list_recent(entity_type="working_calendar")}
    assert actions == {"calendar.working_days", "calendar.holiday_added"}

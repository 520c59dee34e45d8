# core/services/work_calendar/service.py
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, List

from sqlalchemy.orm import Session

from core.domain import Holiday, WorkingCalendar
from core.events.domain_events import schedule_events
from core.exceptions import NotFoundError, ValidationError
from core.interfaces import WorkingCalendarRepository
from core.services.audit.helpers import record_audit
from core.services.work_calendar.engine import WorkCalendarEngine

logger = logging.getLogger(__name__)


class WorkCalendarService:
    """
    High-level API for configuring the organization calendar.
    The engine is read-only; all writes go through this service.
    """

    def __init__(
        self,
        session: Session,
        calendar_repo: WorkingCalendarRepository,
        audit_service=None,
    ):
        self._session: Session = session
        self._repo: WorkingCalendarRepository = calendar_repo
        self._audit_service = audit_service

    def _ensure_calendar(self) -> WorkingCalendar:
        cal = self._repo.get_default()
        if cal is None:
            cal = WorkingCalendar.create_default()
            self._repo.upsert(cal)
            self._session.commit()
        return cal

    def get_calendar(self) -> WorkingCalendar:
        return self._ensure_calendar()

    def get_engine(self) -> WorkCalendarEngine:
        """Engine over the current calendar snapshot, holidays included."""
        return WorkCalendarEngine(self._ensure_calendar())

    def set_working_days(self, working_days: Iterable[int]) -> WorkingCalendar:
        days = frozenset(int(d) for d in working_days)
        if not days:
            raise ValidationError(
                "Working calendar must contain at least one working day.",
                code="CALENDAR_NO_WORKING_DAYS",
            )
        if any(d < 0 or d > 6 for d in days):
            raise ValidationError("Working days must be weekday numbers 0-6.", code="CALENDAR_INVALID_WEEKDAY")
        cal = replace(self._ensure_calendar(), working_days=days)
        return self._save(cal, action="calendar.working_days", details={"working_days": sorted(days)})

    def set_default_build_days(self, build_days: int) -> WorkingCalendar:
        if int(build_days) < 1:
            raise ValidationError("Default build days must be at least 1.", code="CALENDAR_INVALID_BUILD_DAYS")
        cal = replace(self._ensure_calendar(), default_build_days=int(build_days))
        return self._save(cal, action="calendar.build_days", details={"default_build_days": int(build_days)})

    def list_holidays(self) -> List[Holiday]:
        cal = self._ensure_calendar()
        return self._repo.list_holidays(cal.id)

    def add_holiday(self, date_: date, name: str = "") -> Holiday:
        cal = self._ensure_calendar()
        if any(h.date == date_ for h in self._repo.list_holidays(cal.id)):
            raise ValidationError(f"{date_.isoformat()} is already a holiday.", code="HOLIDAY_DUPLICATE")
        holiday = Holiday.create(calendar_id=cal.id, date=date_, name=(name or "").strip())
        try:
            self._repo.add_holiday(holiday)
            record_audit(
                self,
                action="calendar.holiday_added",
                entity_type="working_calendar",
                entity_id=cal.id,
                details={"date": date_.isoformat(), "name": holiday.name},
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Holiday %s added to calendar %s.", date_, cal.id)
        schedule_events.calendar_changed.emit(cal.id)
        return holiday

    def delete_holiday(self, holiday_id: str) -> None:
        cal = self._ensure_calendar()
        if not any(h.id == holiday_id for h in self._repo.list_holidays(cal.id)):
            raise NotFoundError("Holiday not found.", code="HOLIDAY_NOT_FOUND")
        try:
            self._repo.delete_holiday(holiday_id)
            record_audit(
                self,
                action="calendar.holiday_deleted",
                entity_type="working_calendar",
                entity_id=cal.id,
                details={"holiday_id": holiday_id},
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        schedule_events.calendar_changed.emit(cal.id)

    def _save(self, cal: WorkingCalendar, *, action: str, details: dict) -> WorkingCalendar:
        try:
            self._repo.upsert(cal)
            record_audit(self, action=action, entity_type="working_calendar", entity_id=cal.id, details=details)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Working calendar %s updated (%s).", cal.id, action)
        schedule_events.calendar_changed.emit(cal.id)
        return self._ensure_calendar()


__all__ = ["WorkCalendarService"]

from core.services.work_calendar.engine import WorkCalendarEngine
from core.services.work_calendar.service import WorkCalendarService

__all__ = ["WorkCalendarEngine", "WorkCalendarService"]

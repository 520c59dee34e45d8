from .audit import AuditService
from .lot import LotScheduleService, LotSummary
from .scheduling import LotInstantiator, ScheduleCascadeEngine
from .work_calendar import WorkCalendarEngine, WorkCalendarService

__all__ = [
    "AuditService",
    "LotScheduleService",
    "LotSummary",
    "LotInstantiator",
    "ScheduleCascadeEngine",
    "WorkCalendarEngine",
    "WorkCalendarService",
]

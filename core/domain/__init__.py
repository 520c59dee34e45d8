from core.domain.audit import AuditLogEntry
from core.domain.calendar import DEFAULT_BUILD_DAYS, DEFAULT_WORKING_DAYS, Holiday, WorkingCalendar
from core.domain.enums import DependencyType, InspectionResult, LotStatus, TaskStatus, Track
from core.domain.identifiers import derive_id, generate_id
from core.domain.inspection import Inspection
from core.domain.lot import Lot, ScheduleChange
from core.domain.milestone import DEFAULT_MILESTONES, MilestoneDefinition
from core.domain.subcontractor import BlackoutPeriod, Subcontractor
from core.domain.task import Task, TaskDependency, by_sort_order
from core.domain.template import ScheduleTemplate, TemplateTask

__all__ = [
    "generate_id",
    "derive_id",
    "Track",
    "TaskStatus",
    "LotStatus",
    "DependencyType",
    "InspectionResult",
    "WorkingCalendar",
    "Holiday",
    "DEFAULT_WORKING_DAYS",
    "DEFAULT_BUILD_DAYS",
    "Task",
    "TaskDependency",
    "by_sort_order",
    "Lot",
    "ScheduleChange",
    "ScheduleTemplate",
    "TemplateTask",
    "Subcontractor",
    "BlackoutPeriod",
    "Inspection",
    "MilestoneDefinition",
    "DEFAULT_MILESTONES",
    "AuditLogEntry",
]

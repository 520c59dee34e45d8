# infra/db/repositories.py
from infra.db.audit.repository import SqlAlchemyAuditLogRepository
from infra.db.calendar.repository import SqlAlchemyWorkingCalendarRepository
from infra.db.inspection.repository import SqlAlchemyInspectionRepository
from infra.db.lot.repository import SqlAlchemyLotRepository
from infra.db.subcontractor.repository import SqlAlchemySubcontractorRepository

__all__ = [
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyInspectionRepository",
    "SqlAlchemyLotRepository",
    "SqlAlchemySubcontractorRepository",
    "SqlAlchemyWorkingCalendarRepository",
]

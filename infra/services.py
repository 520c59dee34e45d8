from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from core.services.audit import AuditService
from core.services.lot import LotScheduleService
from core.services.work_calendar import WorkCalendarService
from infra.db.repositories import (
    SqlAlchemyAuditLogRepository,
    SqlAlchemyInspectionRepository,
    SqlAlchemyLotRepository,
    SqlAlchemySubcontractorRepository,
    SqlAlchemyWorkingCalendarRepository,
)


@dataclass(frozen=True)
class ServiceGraph:
    session: Session
    audit_service: AuditService
    work_calendar_service: WorkCalendarService
    lot_schedule_service: LotScheduleService

    def as_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "audit_service": self.audit_service,
            "work_calendar_service": self.work_calendar_service,
            "lot_schedule_service": self.lot_schedule_service,
        }


def build_service_graph(session: Session, *, actor: str | None = None) -> ServiceGraph:
    lot_repo = SqlAlchemyLotRepository(session)
    work_calendar_repo = SqlAlchemyWorkingCalendarRepository(session)
    subcontractor_repo = SqlAlchemySubcontractorRepository(session)
    inspection_repo = SqlAlchemyInspectionRepository(session)
    audit_repo = SqlAlchemyAuditLogRepository(session)

    audit_service = AuditService(session=session, audit_repo=audit_repo, actor=actor)
    work_calendar_service = WorkCalendarService(
        session,
        work_calendar_repo,
        audit_service=audit_service,
    )
    lot_schedule_service = LotScheduleService(
        session,
        lot_repo,
        subcontractor_repo,
        inspection_repo,
        work_calendar_service,
        audit_service=audit_service,
    )
    return ServiceGraph(
        session=session,
        audit_service=audit_service,
        work_calendar_service=work_calendar_service,
        lot_schedule_service=lot_schedule_service,
    )


def build_services(session: Session) -> dict[str, Any]:
    return build_service_graph(session).as_dict()


__all__ = ["ServiceGraph", "build_service_graph", "build_services"]

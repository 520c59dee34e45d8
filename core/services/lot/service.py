from __future__ import annotations

from typing import Sequence

from sqlalchemy.orm import Session

from core.domain import DEFAULT_MILESTONES, MilestoneDefinition
from core.interfaces import InspectionRepository, LotRepository, SubcontractorRepository
from core.services.audit.service import AuditService
from core.services.lot.lifecycle import LotLifecycleMixin
from core.services.lot.query import LotQueryMixin
from core.services.lot.rescheduling import LotReschedulingMixin
from core.services.lot.resources import LotResourcesMixin
from core.services.work_calendar.service import WorkCalendarService


class LotScheduleService(
    LotLifecycleMixin,
    LotReschedulingMixin,
    LotResourcesMixin,
    LotQueryMixin,
):
    """
    Application boundary around the scheduling engine.

    Loads lot snapshots, runs the pure engine, and persists the result in
    one transaction per change. Writes to one lot are serialized by the
    lot version check.
    """

    def __init__(
        self,
        session: Session,
        lot_repo: LotRepository,
        subcontractor_repo: SubcontractorRepository,
        inspection_repo: InspectionRepository,
        work_calendar_service: WorkCalendarService,
        audit_service: AuditService | None = None,
        milestones: Sequence[MilestoneDefinition] = DEFAULT_MILESTONES,
    ):
        self._session: Session = session
        self._lot_repo: LotRepository = lot_repo
        self._subcontractor_repo: SubcontractorRepository = subcontractor_repo
        self._inspection_repo: InspectionRepository = inspection_repo
        self._work_calendar_service: WorkCalendarService = work_calendar_service
        self._audit_service: AuditService | None = audit_service
        self._milestones: tuple[MilestoneDefinition, ...] = tuple(milestones)


__all__ = ["LotScheduleService"]

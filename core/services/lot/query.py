from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Sequence

from core.domain import Lot, LotStatus, MilestoneDefinition, ScheduleChange, TaskStatus
from core.interfaces import InspectionRepository, LotRepository
from core.services.lot.models import LotSummary
from core.services.scheduling.milestones import get_current_milestone, list_achieved_milestones
from core.services.scheduling.progress import (
    calculate_lot_progress,
    get_predicted_completion_date,
    get_schedule_variance_days,
)
from core.services.scheduling.status import derive_lot_statuses
from core.services.work_calendar.service import WorkCalendarService


class LotQueryMixin:
    _lot_repo: LotRepository
    _inspection_repo: InspectionRepository
    _work_calendar_service: WorkCalendarService
    _milestones: Sequence[MilestoneDefinition]

    def get_lot(self, lot_id: str) -> Lot:
        return self._require_lot(lot_id)

    def list_lots(self, status: Optional[LotStatus] = None) -> List[Lot]:
        return self._lot_repo.list_all(status)

    def task_statuses(self, lot_id: str, today: date) -> Dict[str, TaskStatus]:
        lot = self._require_lot(lot_id)
        inspections = self._inspection_repo.list_by_tasks([t.id for t in lot.tasks])
        return derive_lot_statuses(lot, inspections, today)

    def achieved_milestones(self, lot_id: str) -> List[MilestoneDefinition]:
        return list_achieved_milestones(self._require_lot(lot_id), self._milestones)

    def schedule_history(self, lot_id: str) -> List[ScheduleChange]:
        return list(self._require_lot(lot_id).schedule_changes)

    def lot_summary(self, lot_id: str, today: date) -> LotSummary:
        lot = self._require_lot(lot_id)
        statuses = self.task_statuses(lot_id, today)
        return LotSummary(
            lot_id=lot.id,
            lot_name=lot.name,
            status=lot.status,
            progress_percent=calculate_lot_progress(lot),
            target_completion=lot.target_completion_date,
            predicted_completion=get_predicted_completion_date(lot),
            variance_working_days=get_schedule_variance_days(lot, self._work_calendar_service.get_engine()),
            current_milestone=get_current_milestone(lot, self._milestones),
            delayed_task_count=sum(1 for s in statuses.values() if s == TaskStatus.DELAYED),
        )

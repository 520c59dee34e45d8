from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from core.domain import Lot, LotStatus
from core.events.domain_events import LotRescheduled, schedule_events
from core.interfaces import LotRepository, SubcontractorRepository
from core.services.audit.helpers import preview_audit_action, preview_audit_details
from core.services.scheduling.cascade import ScheduleCascadeEngine
from core.services.scheduling.cascade_models import ReschedulePreview
from core.services.scheduling.conflict_models import CapacityConflict, MoveConflictPreview
from core.services.scheduling.conflicts import build_capacity_conflicts, preview_move_conflicts
from core.services.work_calendar.service import WorkCalendarService

logger = logging.getLogger(__name__)


class LotReschedulingMixin:
    _lot_repo: LotRepository
    _subcontractor_repo: SubcontractorRepository
    _work_calendar_service: WorkCalendarService

    def _cascade_engine(self) -> ScheduleCascadeEngine:
        return ScheduleCascadeEngine(self._work_calendar_service.get_engine())

    def preview_delay(self, lot_id: str, task_id: str, delay_days: int) -> ReschedulePreview:
        lot = self._require_lot(lot_id)
        return self._cascade_engine().preview_delay(lot, task_id, delay_days)

    def preview_reschedule(self, lot_id: str, task_id: str, target_date: date) -> ReschedulePreview:
        lot = self._require_lot(lot_id)
        return self._cascade_engine().preview_reschedule(lot, task_id, target_date)

    def preview_duration_change(self, lot_id: str, task_id: str, new_duration: int) -> ReschedulePreview:
        lot = self._require_lot(lot_id)
        return self._cascade_engine().preview_duration_change(lot, task_id, new_duration)

    def preview_buffer(self, lot_id: str, task_id: str, buffer_days: int) -> ReschedulePreview:
        lot = self._require_lot(lot_id)
        return self._cascade_engine().preview_buffer(lot, task_id, buffer_days)

    def apply_preview(
        self,
        preview: ReschedulePreview,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        notified: bool = False,
    ) -> Lot:
        """
        Commit a previously shown preview.

        The lot is reloaded, so a preview computed before another change
        raises ConcurrencyError instead of overwriting it.
        """
        lot = self._require_lot(preview.lot_id)
        updated = self._cascade_engine().apply(lot, preview, reason=reason, notes=notes, notified=notified)
        if updated is lot:
            return lot

        self._save_lot(
            lot,
            updated,
            action=preview_audit_action(preview),
            entity_id=preview.task_id,
            details=preview_audit_details(preview, reason=reason, notified=notified),
        )
        logger.info(
            "Lot %s: task %s moved %s workdays, %s tasks affected, completion %s -> %s.",
            lot.id,
            preview.task_id,
            preview.shift_working_days,
            len(preview.affected),
            preview.old_completion,
            preview.new_completion,
        )

        tasks_by_id = updated.task_map()
        affected_ids = tuple(item.task_id for item in preview.affected)
        subcontractor_ids = tuple(
            sorted(
                {
                    tasks_by_id[task_id].subcontractor_id
                    for task_id in affected_ids
                    if task_id in tasks_by_id and tasks_by_id[task_id].subcontractor_id
                }
            )
        )
        schedule_events.lot_rescheduled.emit(
            LotRescheduled(
                lot_id=lot.id,
                task_id=preview.task_id,
                affected_task_ids=affected_ids,
                old_completion=preview.old_completion,
                new_completion=preview.new_completion,
                reason=reason,
                notified=notified,
                subcontractor_ids=subcontractor_ids,
            )
        )
        return updated

    def commit_delay(
        self,
        lot_id: str,
        task_id: str,
        delay_days: int,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        notified: bool = False,
    ) -> Lot:
        preview = self.preview_delay(lot_id, task_id, delay_days)
        return self.apply_preview(preview, reason=reason, notes=notes, notified=notified)

    def commit_reschedule(
        self,
        lot_id: str,
        task_id: str,
        target_date: date,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        notified: bool = False,
    ) -> Lot:
        preview = self.preview_reschedule(lot_id, task_id, target_date)
        return self.apply_preview(preview, reason=reason, notes=notes, notified=notified)

    def commit_duration_change(
        self,
        lot_id: str,
        task_id: str,
        new_duration: int,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        notified: bool = False,
    ) -> Lot:
        preview = self.preview_duration_change(lot_id, task_id, new_duration)
        return self.apply_preview(preview, reason=reason, notes=notes, notified=notified)

    def commit_buffer(
        self,
        lot_id: str,
        task_id: str,
        buffer_days: int,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        notified: bool = False,
    ) -> Lot:
        preview = self.preview_buffer(lot_id, task_id, buffer_days)
        return self.apply_preview(preview, reason=reason, notes=notes, notified=notified)

    def insert_buffer_task(self, lot_id: str, after_task_id: str, buffer_days: int) -> Lot:
        lot = self._require_lot(lot_id)
        updated = self._cascade_engine().insert_buffer_task(lot, after_task_id, buffer_days)
        buffer = next(t for t in updated.tasks if t.is_buffer and t.id not in lot.task_map())
        self._save_lot(
            lot,
            updated,
            action="task.buffer_insert",
            entity_id=buffer.id,
            details={"after_task_id": after_task_id, "buffer_days": buffer.duration_days},
        )
        logger.info("Lot %s: %s-day buffer added after task %s.", lot_id, buffer.duration_days, after_task_id)
        schedule_events.lot_progressed.emit(lot_id)
        return updated

    def remove_buffer_task(self, lot_id: str, buffer_task_id: str) -> Lot:
        lot = self._require_lot(lot_id)
        updated = self._cascade_engine().remove_buffer_task(lot, buffer_task_id)
        self._save_lot(lot, updated, action="task.buffer_remove", entity_id=buffer_task_id)
        logger.info("Lot %s: buffer %s removed.", lot_id, buffer_task_id)
        schedule_events.lot_progressed.emit(lot_id)
        return updated

    def list_capacity_conflicts(self, window_start: date, window_end: date) -> List[CapacityConflict]:
        return build_capacity_conflicts(
            self._lot_repo.list_all(LotStatus.IN_PROGRESS),
            self._subcontractor_repo.list_all(),
            window_start,
            window_end,
            self._work_calendar_service.get_engine(),
        )

    def preview_move_conflicts(
        self,
        lot_id: str,
        task_id: str,
        target_date: date,
        window_start: date,
        window_end: date,
    ) -> MoveConflictPreview:
        self._require_lot(lot_id)
        calendar = self._work_calendar_service.get_engine()
        return preview_move_conflicts(
            self._lot_repo.list_all(LotStatus.IN_PROGRESS),
            self._subcontractor_repo.list_all(),
            lot_id,
            task_id,
            target_date,
            window_start,
            window_end,
            engine=ScheduleCascadeEngine(calendar),
            calendar=calendar,
        )

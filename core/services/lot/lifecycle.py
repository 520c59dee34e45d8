from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from core.domain import Lot, LotStatus, MilestoneDefinition, ScheduleTemplate
from core.events.domain_events import schedule_events
from core.exceptions import NotFoundError, ValidationError
from core.interfaces import LotRepository, SubcontractorRepository
from core.services.audit.helpers import record_audit
from core.services.scheduling.instantiation import LotInstantiator
from core.services.scheduling.progress import record_task_completion, record_task_start
from core.services.work_calendar.service import WorkCalendarService

logger = logging.getLogger(__name__)


class LotLifecycleMixin:
    _session: Session
    _lot_repo: LotRepository
    _subcontractor_repo: SubcontractorRepository
    _work_calendar_service: WorkCalendarService
    _milestones: Sequence[MilestoneDefinition]

    def start_lot(
        self,
        template: ScheduleTemplate,
        start_date: date,
        *,
        name: Optional[str] = None,
        build_days: Optional[int] = None,
        scale_to_build_days: bool = False,
    ) -> Lot:
        if build_days is not None and int(build_days) < 1:
            raise ValidationError("Build days must be at least 1.", code="LOT_INVALID_BUILD_DAYS")
        lot_name = (name or template.name or "").strip()
        if not lot_name:
            raise ValidationError("Lot name cannot be empty.", code="LOT_NAME_REQUIRED")

        instantiator = LotInstantiator(
            self._work_calendar_service.get_engine(),
            self._subcontractor_repo.list_all(active_only=True),
        )
        lot = instantiator.instantiate(
            template,
            start_date,
            lot_name=lot_name,
            build_days=build_days,
            scale_to_build_days=scale_to_build_days,
        )

        try:
            self._lot_repo.add(lot)
            record_audit(
                self,
                action="lot.start",
                entity_type="lot",
                entity_id=lot.id,
                lot=lot,
                details={
                    "template": template.name,
                    "start_date": lot.start_date,
                    "target_completion_date": lot.target_completion_date,
                    "task_count": len(lot.tasks),
                },
            )
            self._session.commit()
        except Exception as exc:
            self._session.rollback()
            logger.error("Error starting lot %s: %s", lot_name, exc)
            raise
        logger.info("Started lot %s (%s) with %s tasks.", lot.id, lot.name, len(lot.tasks))
        schedule_events.lot_started.emit(lot.id)
        return lot

    def record_task_start(self, lot_id: str, task_id: str, actual_start: date) -> Lot:
        lot = self._require_lot(lot_id)
        updated = record_task_start(lot, task_id, actual_start)
        self._save_lot(
            lot,
            updated,
            action="task.start",
            entity_id=task_id,
            details={"actual_start": actual_start},
        )
        schedule_events.lot_progressed.emit(lot_id)
        return updated

    def record_task_completion(self, lot_id: str, task_id: str, actual_end: date) -> Lot:
        lot = self._require_lot(lot_id)
        updated = record_task_completion(lot, task_id, actual_end)
        self._save_lot(
            lot,
            updated,
            action="task.complete",
            entity_id=task_id,
            details={"actual_end": actual_end, "lot_status": updated.status.value},
        )
        if updated.status == LotStatus.COMPLETE:
            logger.info("Lot %s is complete.", lot_id)
        schedule_events.lot_progressed.emit(lot_id)
        return updated

    def set_manual_milestone(self, lot_id: str, milestone_id: str, achieved: bool = True) -> Lot:
        lot = self._require_lot(lot_id)
        manual = next((m for m in self._milestones if m.id == milestone_id and m.manual), None)
        if manual is None:
            raise ValidationError(
                f"'{milestone_id}' is not a manually tracked milestone.",
                code="MILESTONE_NOT_MANUAL",
            )
        flags = dict(lot.manual_milestones)
        flags[milestone_id] = bool(achieved)
        updated = replace(lot, manual_milestones=flags, version=lot.version + 1)
        self._save_lot(
            lot,
            updated,
            action="lot.milestone",
            entity_id=lot.id,
            details={"milestone": milestone_id, "achieved": bool(achieved)},
        )
        schedule_events.lot_progressed.emit(lot_id)
        return updated

    def delete_lot(self, lot_id: str) -> None:
        lot = self._require_lot(lot_id)
        try:
            self._lot_repo.delete(lot_id)
            record_audit(self, action="lot.delete", entity_type="lot", entity_id=lot_id, lot=lot)
            self._session.commit()
        except Exception as exc:
            self._session.rollback()
            logger.error("Error deleting lot %s: %s", lot_id, exc)
            raise

    # ---------- persistence helpers ----------

    def _require_lot(self, lot_id: str) -> Lot:
        lot = self._lot_repo.get(lot_id)
        if lot is None:
            raise NotFoundError("Lot not found.", code="LOT_NOT_FOUND", lot_id=lot_id)
        return lot

    def _save_lot(
        self,
        before: Lot,
        after: Lot,
        *,
        action: str,
        entity_id: str,
        entity_type: str = "task",
        details: Optional[dict] = None,
    ) -> None:
        try:
            self._lot_repo.update(after, expected_version=before.version)
            record_audit(
                self,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                lot=after,
                details=details,
            )
            self._session.commit()
        except Exception as exc:
            self._session.rollback()
            logger.error("Error saving lot %s (%s): %s", after.id, action, exc)
            raise

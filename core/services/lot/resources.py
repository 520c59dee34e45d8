from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from core.domain import Inspection, InspectionResult, Subcontractor
from core.exceptions import NotFoundError, ValidationError
from core.interfaces import InspectionRepository, SubcontractorRepository
from core.services.audit.helpers import record_audit

logger = logging.getLogger(__name__)


class LotResourcesMixin:
    _session: Session
    _subcontractor_repo: SubcontractorRepository
    _inspection_repo: InspectionRepository

    def add_subcontractor(self, name: str, trade: str, **extra) -> Subcontractor:
        name = (name or "").strip()
        trade = (trade or "").strip()
        if not name:
            raise ValidationError("Subcontractor name cannot be empty.", code="SUBCONTRACTOR_NAME_REQUIRED")
        if not trade:
            raise ValidationError("Subcontractor trade cannot be empty.", code="SUBCONTRACTOR_TRADE_REQUIRED")
        capacity = extra.get("max_concurrent_lots", 1)
        if capacity is not None and int(capacity) < 1:
            raise ValidationError(
                "max_concurrent_lots must be at least 1.",
                code="SUBCONTRACTOR_INVALID_CAPACITY",
            )
        sub = Subcontractor.create(name=name, trade=trade, **extra)
        try:
            self._subcontractor_repo.add(sub)
            record_audit(
                self,
                action="subcontractor.create",
                entity_type="subcontractor",
                entity_id=sub.id,
                details={"name": sub.name, "trade": sub.trade},
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return sub

    def set_subcontractor_active(self, subcontractor_id: str, is_active: bool) -> Subcontractor:
        sub = self._subcontractor_repo.get(subcontractor_id)
        if sub is None:
            raise NotFoundError("Subcontractor not found.", code="SUBCONTRACTOR_NOT_FOUND")
        sub = replace(sub, is_active=bool(is_active))
        try:
            self._subcontractor_repo.update(sub)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return sub

    def list_subcontractors(self, *, active_only: bool = False) -> List[Subcontractor]:
        return self._subcontractor_repo.list_all(active_only=active_only)

    def schedule_inspection(
        self,
        task_id: str,
        inspection_type: str,
        scheduled_date: Optional[date] = None,
    ) -> Inspection:
        inspection = Inspection.create(task_id, inspection_type, scheduled_date=scheduled_date)
        try:
            self._inspection_repo.add(inspection)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return inspection

    def record_inspection_result(self, inspection_id: str, result: InspectionResult) -> Inspection:
        inspection = self._inspection_repo.get(inspection_id)
        if inspection is None:
            raise NotFoundError("Inspection not found.", code="INSPECTION_NOT_FOUND")
        inspection = replace(inspection, result=InspectionResult(result), status="completed")
        try:
            self._inspection_repo.update(inspection)
            record_audit(
                self,
                action="inspection.result",
                entity_type="inspection",
                entity_id=inspection.id,
                details={"task_id": inspection.task_id, "result": inspection.result.value},
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Inspection %s recorded as %s.", inspection.id, inspection.result.value)
        return inspection

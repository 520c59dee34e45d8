from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.domain import Inspection
from core.exceptions import NotFoundError
from core.interfaces import InspectionRepository
from infra.db.models import InspectionORM


def inspection_to_orm(inspection: Inspection) -> InspectionORM:
    return InspectionORM(
        id=inspection.id,
        task_id=inspection.task_id,
        inspection_type=inspection.inspection_type,
        result=inspection.result,
        status=inspection.status,
        scheduled_date=inspection.scheduled_date,
    )


def inspection_from_orm(obj: InspectionORM) -> Inspection:
    return Inspection(
        id=obj.id,
        task_id=obj.task_id,
        inspection_type=obj.inspection_type,
        result=obj.result,
        status=obj.status,
        scheduled_date=obj.scheduled_date,
    )


class SqlAlchemyInspectionRepository(InspectionRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, inspection: Inspection) -> None:
        self.session.add(inspection_to_orm(inspection))

    def update(self, inspection: Inspection) -> None:
        obj = self.session.get(InspectionORM, inspection.id)
        if obj is None:
            raise NotFoundError("Inspection not found.", code="INSPECTION_NOT_FOUND")
        obj.inspection_type = inspection.inspection_type
        obj.result = inspection.result
        obj.status = inspection.status
        obj.scheduled_date = inspection.scheduled_date

    def get(self, inspection_id: str) -> Optional[Inspection]:
        obj = self.session.get(InspectionORM, inspection_id)
        return inspection_from_orm(obj) if obj else None

    def list_by_tasks(self, task_ids: List[str]) -> List[Inspection]:
        if not task_ids:
            return []
        stmt = select(InspectionORM).where(InspectionORM.task_id.in_(task_ids))
        rows = self.session.execute(stmt).scalars().all()
        return [inspection_from_orm(row) for row in rows]


__all__ = ["SqlAlchemyInspectionRepository", "inspection_to_orm", "inspection_from_orm"]

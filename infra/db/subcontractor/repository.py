from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.domain import Subcontractor
from core.exceptions import NotFoundError
from core.interfaces import SubcontractorRepository
from infra.db.models import SubcontractorORM
from infra.db.subcontractor.mapper import (
    subcontractor_from_orm,
    subcontractor_to_orm,
    subcontractor_values,
)


class SqlAlchemySubcontractorRepository(SubcontractorRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, subcontractor: Subcontractor) -> None:
        self.session.add(subcontractor_to_orm(subcontractor))

    def update(self, subcontractor: Subcontractor) -> None:
        obj = self.session.get(SubcontractorORM, subcontractor.id)
        if obj is None:
            raise NotFoundError("Subcontractor not found.", code="SUBCONTRACTOR_NOT_FOUND")
        for key, value in subcontractor_values(subcontractor).items():
            setattr(obj, key, value)

    def get(self, subcontractor_id: str) -> Optional[Subcontractor]:
        obj = self.session.get(SubcontractorORM, subcontractor_id)
        return subcontractor_from_orm(obj) if obj else None

    def list_all(self, *, active_only: bool = False) -> List[Subcontractor]:
        stmt = select(SubcontractorORM)
        if active_only:
            stmt = stmt.where(SubcontractorORM.is_active.is_(True))
        stmt = stmt.order_by(SubcontractorORM.name)
        rows = self.session.execute(stmt).scalars().all()
        return [subcontractor_from_orm(row) for row in rows]


__all__ = ["SqlAlchemySubcontractorRepository"]

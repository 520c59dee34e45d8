from __future__ import annotations

from collections import defaultdict
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from core.domain import Lot, LotStatus, TaskDependency
from core.interfaces import LotRepository
from infra.db.lot.mapper import (
    apply_task_values,
    dependency_from_orm,
    dependency_to_orm,
    lot_from_orm,
    lot_to_orm,
    lot_values,
    schedule_change_from_orm,
    schedule_change_to_orm,
    task_from_orm,
    task_to_orm,
)
from infra.db.models import (
    InspectionORM,
    LotORM,
    LotTaskDependencyORM,
    LotTaskORM,
    ScheduleChangeORM,
)
from infra.db.optimistic import update_lot_version


class SqlAlchemyLotRepository(LotRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, lot: Lot) -> None:
        self.session.add(lot_to_orm(lot))
        for position, task in enumerate(lot.tasks):
            self.session.add(task_to_orm(task, position))
        for task in lot.tasks:
            for dep in task.dependencies:
                self.session.add(dependency_to_orm(task.id, dep))
        for sequence, change in enumerate(lot.schedule_changes):
            self.session.add(schedule_change_to_orm(lot.id, change, sequence))

    def update(self, lot: Lot, *, expected_version: int) -> int:
        """
        Write dates, status and history for an existing lot.

        Dependency edges never change after creation. Tasks new to the lot
        (buffer tasks) are inserted, tasks gone from it are deleted, and only
        new schedule changes are inserted.
        """
        next_version = update_lot_version(self.session, lot.id, expected_version, lot_values(lot))

        stmt = select(LotTaskORM).where(LotTaskORM.lot_id == lot.id)
        rows = {row.id: row for row in self.session.execute(stmt).scalars().all()}
        for position, task in enumerate(lot.tasks):
            obj = rows.pop(task.id, None)
            if obj is None:
                self.session.add(task_to_orm(task, position))
                for dep in task.dependencies:
                    self.session.add(dependency_to_orm(task.id, dep))
                continue
            obj.position = position
            apply_task_values(obj, task)
        if rows:
            self._delete_tasks(list(rows))

        stmt = select(ScheduleChangeORM.id).where(ScheduleChangeORM.lot_id == lot.id)
        existing_changes = set(self.session.execute(stmt).scalars().all())
        for sequence, change in enumerate(lot.schedule_changes):
            if change.id not in existing_changes:
                self.session.add(schedule_change_to_orm(lot.id, change, sequence))
        return next_version

    def get(self, lot_id: str) -> Optional[Lot]:
        obj = self.session.get(LotORM, lot_id)
        return self._hydrate(obj) if obj else None

    def list_all(self, status: Optional[LotStatus] = None) -> List[Lot]:
        stmt = select(LotORM)
        if status is not None:
            stmt = stmt.where(LotORM.status == status)
        stmt = stmt.order_by(LotORM.name, LotORM.id)
        rows = self.session.execute(stmt).scalars().all()
        return [self._hydrate(row) for row in rows]

    def delete(self, lot_id: str) -> None:
        task_ids = select(LotTaskORM.id).where(LotTaskORM.lot_id == lot_id)
        self.session.execute(delete(InspectionORM).where(InspectionORM.task_id.in_(task_ids)))
        self.session.execute(
            delete(LotTaskDependencyORM).where(LotTaskDependencyORM.successor_task_id.in_(task_ids))
        )
        self.session.execute(delete(ScheduleChangeORM).where(ScheduleChangeORM.lot_id == lot_id))
        self.session.execute(delete(LotTaskORM).where(LotTaskORM.lot_id == lot_id))
        self.session.execute(delete(LotORM).where(LotORM.id == lot_id))

    def _delete_tasks(self, task_ids: List[str]) -> None:
        self.session.execute(delete(InspectionORM).where(InspectionORM.task_id.in_(task_ids)))
        self.session.execute(
            delete(LotTaskDependencyORM).where(
                LotTaskDependencyORM.successor_task_id.in_(task_ids)
                | LotTaskDependencyORM.predecessor_task_id.in_(task_ids)
            )
        )
        self.session.execute(delete(LotTaskORM).where(LotTaskORM.id.in_(task_ids)))

    def _hydrate(self, obj: LotORM) -> Lot:
        stmt = select(LotTaskORM).where(LotTaskORM.lot_id == obj.id).order_by(LotTaskORM.position)
        task_rows = self.session.execute(stmt).scalars().all()

        deps_by_task: dict[str, list[TaskDependency]] = defaultdict(list)
        if task_rows:
            stmt = select(LotTaskDependencyORM).where(
                LotTaskDependencyORM.successor_task_id.in_([row.id for row in task_rows])
            )
            for dep in self.session.execute(stmt).scalars().all():
                deps_by_task[dep.successor_task_id].append(dependency_from_orm(dep))

        stmt = (
            select(ScheduleChangeORM)
            .where(ScheduleChangeORM.lot_id == obj.id)
            .order_by(ScheduleChangeORM.sequence)
        )
        changes = [schedule_change_from_orm(row) for row in self.session.execute(stmt).scalars().all()]
        tasks = [task_from_orm(row, deps_by_task.get(row.id, ())) for row in task_rows]
        return lot_from_orm(obj, tasks, changes)


__all__ = ["SqlAlchemyLotRepository"]

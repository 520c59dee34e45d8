from __future__ import annotations

import json
from typing import Any, Iterable

from core.domain import Lot, ScheduleChange, Task, TaskDependency, generate_id
from infra.db.models import LotORM, LotTaskDependencyORM, LotTaskORM, ScheduleChangeORM


def _to_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, default=str, ensure_ascii=False, sort_keys=True)


def _from_json(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return value if isinstance(value, dict) else {}


def lot_to_orm(lot: Lot) -> LotORM:
    return LotORM(
        id=lot.id,
        name=lot.name,
        start_date=lot.start_date,
        target_completion_date=lot.target_completion_date,
        build_days=lot.build_days,
        status=lot.status,
        manual_milestones_json=_to_json(dict(lot.manual_milestones)),
        version=lot.version,
    )


def lot_values(lot: Lot) -> dict[str, Any]:
    """Column values written by a versioned lot update."""
    return {
        "name": lot.name,
        "start_date": lot.start_date,
        "target_completion_date": lot.target_completion_date,
        "build_days": lot.build_days,
        "status": lot.status,
        "manual_milestones_json": _to_json(dict(lot.manual_milestones)),
    }


def lot_from_orm(
    obj: LotORM,
    tasks: Iterable[Task],
    changes: Iterable[ScheduleChange],
) -> Lot:
    return Lot(
        id=obj.id,
        name=obj.name,
        start_date=obj.start_date,
        target_completion_date=obj.target_completion_date,
        build_days=obj.build_days,
        status=obj.status,
        tasks=tuple(tasks),
        manual_milestones={str(k): bool(v) for k, v in _from_json(obj.manual_milestones_json).items()},
        schedule_changes=tuple(changes),
        version=obj.version,
    )


def task_to_orm(task: Task, position: int) -> LotTaskORM:
    obj = LotTaskORM(id=task.id, lot_id=task.lot_id, position=position)
    apply_task_values(obj, task)
    return obj


def apply_task_values(obj: LotTaskORM, task: Task) -> None:
    obj.name = task.name
    obj.trade = task.trade
    obj.track = task.track
    obj.duration_days = task.duration_days
    obj.sort_order = task.sort_order
    obj.scheduled_start = task.scheduled_start
    obj.scheduled_end = task.scheduled_end
    obj.actual_start = task.actual_start
    obj.actual_end = task.actual_end
    obj.status = task.status
    obj.subcontractor_id = task.subcontractor_id
    obj.blocks_final = task.blocks_final
    obj.is_critical_path = task.is_critical_path
    obj.requires_inspection = task.requires_inspection
    obj.inspection_type = task.inspection_type
    obj.phase = task.phase
    obj.delay_days = task.delay_days
    obj.delay_reason = task.delay_reason
    obj.delay_notes = task.delay_notes
    obj.delay_logged_at = task.delay_logged_at
    obj.is_buffer = task.is_buffer


def task_from_orm(obj: LotTaskORM, dependencies: Iterable[TaskDependency]) -> Task:
    return Task(
        id=obj.id,
        lot_id=obj.lot_id,
        name=obj.name,
        trade=obj.trade,
        track=obj.track,
        duration_days=obj.duration_days,
        sort_order=obj.sort_order,
        scheduled_start=obj.scheduled_start,
        scheduled_end=obj.scheduled_end,
        actual_start=obj.actual_start,
        actual_end=obj.actual_end,
        status=obj.status,
        subcontractor_id=obj.subcontractor_id,
        dependencies=tuple(dependencies),
        blocks_final=bool(obj.blocks_final),
        is_critical_path=bool(obj.is_critical_path),
        requires_inspection=bool(obj.requires_inspection),
        inspection_type=obj.inspection_type,
        phase=obj.phase,
        delay_days=obj.delay_days or 0,
        delay_reason=obj.delay_reason,
        delay_notes=obj.delay_notes,
        delay_logged_at=obj.delay_logged_at,
        is_buffer=bool(obj.is_buffer),
    )


def dependency_to_orm(successor_task_id: str, dependency: TaskDependency) -> LotTaskDependencyORM:
    return LotTaskDependencyORM(
        id=generate_id(),
        successor_task_id=successor_task_id,
        predecessor_task_id=dependency.predecessor_task_id,
        dependency_type=dependency.dependency_type,
        lag_days=dependency.lag_days,
    )


def dependency_from_orm(obj: LotTaskDependencyORM) -> TaskDependency:
    return TaskDependency(
        predecessor_task_id=obj.predecessor_task_id,
        dependency_type=obj.dependency_type,
        lag_days=obj.lag_days,
    )


def schedule_change_to_orm(lot_id: str, change: ScheduleChange, sequence: int) -> ScheduleChangeORM:
    return ScheduleChangeORM(
        id=change.id,
        lot_id=lot_id,
        task_id=change.task_id,
        sequence=sequence,
        old_start=change.old_start,
        new_start=change.new_start,
        old_end=change.old_end,
        new_end=change.new_end,
        reason=change.reason,
        notes=change.notes,
        delay_days=change.delay_days,
        affected_count=change.affected_count,
        notified=change.notified,
        changed_at=change.changed_at,
    )


def schedule_change_from_orm(obj: ScheduleChangeORM) -> ScheduleChange:
    return ScheduleChange(
        id=obj.id,
        task_id=obj.task_id,
        old_start=obj.old_start,
        new_start=obj.new_start,
        old_end=obj.old_end,
        new_end=obj.new_end,
        reason=obj.reason,
        notes=obj.notes,
        delay_days=obj.delay_days or 0,
        affected_count=obj.affected_count or 0,
        notified=bool(obj.notified),
        changed_at=obj.changed_at,
    )


__all__ = [
    "lot_to_orm",
    "lot_values",
    "lot_from_orm",
    "task_to_orm",
    "apply_task_values",
    "task_from_orm",
    "dependency_to_orm",
    "dependency_from_orm",
    "schedule_change_to_orm",
    "schedule_change_from_orm",
]

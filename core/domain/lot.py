from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from core.domain.enums import LotStatus
from core.domain.identifiers import generate_id
from core.domain.task import Task, by_sort_order
from core.exceptions import NotFoundError


@dataclass(frozen=True)
class ScheduleChange:
    """One committed reschedule of a lot task, kept on the lot as its schedule history."""

    id: str
    task_id: str
    old_start: Optional[date]
    new_start: Optional[date]
    old_end: Optional[date]
    new_end: Optional[date]
    reason: Optional[str]
    notes: Optional[str]
    delay_days: int
    affected_count: int
    notified: bool
    changed_at: datetime

    @staticmethod
    def create(
        task_id: str,
        *,
        old_start: Optional[date],
        new_start: Optional[date],
        old_end: Optional[date] = None,
        new_end: Optional[date] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        delay_days: int = 0,
        affected_count: int = 0,
        notified: bool = False,
        changed_at: Optional[datetime] = None,
    ) -> "ScheduleChange":
        return ScheduleChange(
            id=generate_id(),
            task_id=task_id,
            old_start=old_start,
            new_start=new_start,
            old_end=old_end,
            new_end=new_end,
            reason=reason,
            notes=notes,
            delay_days=delay_days,
            affected_count=affected_count,
            notified=notified,
            changed_at=changed_at or datetime.now(timezone.utc),
        )


@dataclass(frozen=True)
class Lot:
    id: str
    name: str
    start_date: Optional[date] = None
    target_completion_date: Optional[date] = None
    build_days: Optional[int] = None
    status: LotStatus = LotStatus.NOT_STARTED
    tasks: tuple[Task, ...] = ()
    manual_milestones: Mapping[str, bool] = field(default_factory=dict, hash=False)
    schedule_changes: tuple[ScheduleChange, ...] = ()
    version: int = 1

    def __post_init__(self) -> None:
        # read-only view over a private copy
        object.__setattr__(self, "manual_milestones", MappingProxyType(dict(self.manual_milestones)))

    @staticmethod
    def create(name: str, **extra) -> "Lot":
        return Lot(id=generate_id(), name=name, **extra)

    def get_task(self, task_id: str) -> Task:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise NotFoundError("Task not found in lot.", code="TASK_NOT_FOUND", lot_id=self.id, task_id=task_id)

    def task_map(self) -> Dict[str, Task]:
        return {task.id: task for task in self.tasks}

    def sorted_tasks(self) -> list[Task]:
        return sorted(self.tasks, key=by_sort_order)

    def with_tasks(self, tasks: Iterable[Task]) -> "Lot":
        """Copy of the lot with task snapshots swapped in by id; task order is preserved."""
        updates = {task.id: task for task in tasks}
        return replace(self, tasks=tuple(updates.get(t.id, t) for t in self.tasks))


__all__ = ["Lot", "ScheduleChange"]

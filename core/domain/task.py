from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from core.domain.enums import DependencyType, TaskStatus, Track
from core.domain.identifiers import generate_id


@dataclass(frozen=True)
class TaskDependency:
    """Edge stored on the successor, pointing at its predecessor."""

    predecessor_task_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag_days: int = 0

    @staticmethod
    def create(
        predecessor_id: str,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
        lag_days: int = 0,
    ) -> "TaskDependency":
        return TaskDependency(
            predecessor_task_id=predecessor_id,
            dependency_type=DependencyType(dependency_type),
            lag_days=int(lag_days),
        )


@dataclass(frozen=True)
class Task:
    id: str
    lot_id: str
    name: str
    trade: str = "other"
    track: Track = Track.FOUNDATION
    duration_days: int = 1
    sort_order: int = 0
    scheduled_start: Optional[date] = None
    scheduled_end: Optional[date] = None
    actual_start: Optional[date] = None
    actual_end: Optional[date] = None
    status: TaskStatus = TaskStatus.PENDING
    subcontractor_id: Optional[str] = None
    dependencies: tuple[TaskDependency, ...] = ()
    blocks_final: bool = True
    is_critical_path: bool = False
    requires_inspection: bool = False
    inspection_type: Optional[str] = None
    phase: Optional[str] = None
    delay_days: int = 0
    delay_reason: Optional[str] = None
    delay_notes: Optional[str] = None
    delay_logged_at: Optional[datetime] = None
    is_buffer: bool = False

    @staticmethod
    def create(lot_id: str, name: str, **extra) -> "Task":
        return Task(id=generate_id(), lot_id=lot_id, name=name, **extra)

    @property
    def is_complete(self) -> bool:
        return self.actual_end is not None or self.status == TaskStatus.COMPLETE

    @property
    def is_scheduled(self) -> bool:
        return self.scheduled_start is not None and self.scheduled_end is not None

    def depends_on(self, task_id: str) -> bool:
        return any(dep.predecessor_task_id == task_id for dep in self.dependencies)


def by_sort_order(task: Task) -> tuple[int, str]:
    return (task.sort_order, task.name)


__all__ = ["Task", "TaskDependency", "by_sort_order"]

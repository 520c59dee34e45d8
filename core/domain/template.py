from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.domain.enums import Track
from core.domain.identifiers import generate_id
from core.domain.task import TaskDependency


@dataclass(frozen=True)
class TemplateTask:
    """A task blueprint; its dependencies name other template task keys."""

    key: str
    name: str
    trade: str = "other"
    track: Track = Track.FOUNDATION
    duration_days: int = 1
    sort_order: int = 0
    dependencies: tuple[TaskDependency, ...] = ()
    blocks_final: bool = True
    requires_inspection: bool = False
    inspection_type: Optional[str] = None
    phase: Optional[str] = None
    is_buffer: bool = False


@dataclass(frozen=True)
class ScheduleTemplate:
    id: str
    name: str
    tasks: tuple[TemplateTask, ...] = ()
    build_days: Optional[int] = None

    @staticmethod
    def create(name: str, tasks: tuple[TemplateTask, ...] = (), build_days: Optional[int] = None) -> "ScheduleTemplate":
        return ScheduleTemplate(id=generate_id(), name=name, tasks=tuple(tasks), build_days=build_days)


__all__ = ["TemplateTask", "ScheduleTemplate"]

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.services.scheduling.cascade_models import ReschedulePreview


@dataclass(frozen=True)
class ConflictJob:
    lot_id: str
    lot_name: str
    task_id: str
    task_name: str


@dataclass(frozen=True)
class CapacityConflict:
    subcontractor_id: str
    subcontractor_name: str
    conflict_date: date
    booked: int
    capacity: int
    jobs: tuple[ConflictJob, ...]

    @property
    def key(self) -> tuple[str, date]:
        return (self.subcontractor_id, self.conflict_date)


@dataclass(frozen=True)
class MoveConflictPreview:
    """Capacity conflicts before and after a candidate move, for drag-to-reschedule confirmation."""

    preview: ReschedulePreview
    conflicts_before: tuple[CapacityConflict, ...]
    conflicts_after: tuple[CapacityConflict, ...]
    introduced: tuple[CapacityConflict, ...]
    resolved: tuple[CapacityConflict, ...]

    @property
    def has_new_conflicts(self) -> bool:
        return bool(self.introduced)

    def first_introduced(self) -> Optional[CapacityConflict]:
        return self.introduced[0] if self.introduced else None


__all__ = ["ConflictJob", "CapacityConflict", "MoveConflictPreview"]

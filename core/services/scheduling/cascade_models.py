from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional

from core.domain import Track


class CascadeOutcome(str, Enum):
    RESCHEDULED = "rescheduled"
    NO_OP = "no_op"
    DEPENDENCY_VIOLATION = "dependency_violation"
    TASK_COMPLETE = "task_complete"


@dataclass(frozen=True)
class AffectedTask:
    task_id: str
    task_name: str
    track: Track
    old_start: Optional[date]
    new_start: Optional[date]
    old_end: Optional[date]
    new_end: Optional[date]

    def as_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "task_name": self.task_name,
            "track": self.track.value,
            "old_start": self.old_start,
            "new_start": self.new_start,
            "old_end": self.old_end,
            "new_end": self.new_end,
        }


@dataclass(frozen=True)
class ReschedulePreview:
    """
    What a delay, move, duration change or buffer would do to one lot,
    computed against ``lot_version``.

    Only ``RESCHEDULED`` previews carry affected tasks; the other outcomes
    report why nothing would change.
    """

    task_id: str
    lot_id: str
    lot_version: int
    outcome: CascadeOutcome
    normalized_date: Optional[date]
    earliest_start: Optional[date]
    shift_working_days: int
    affected: tuple[AffectedTask, ...]
    old_completion: Optional[date]
    new_completion: Optional[date]
    delay_days: Optional[int] = None
    new_duration: Optional[int] = None
    buffer_days: Optional[int] = None

    @property
    def dependency_violation(self) -> bool:
        return self.outcome == CascadeOutcome.DEPENDENCY_VIOLATION

    @property
    def is_no_op(self) -> bool:
        return self.outcome == CascadeOutcome.NO_OP

    @property
    def can_apply(self) -> bool:
        return self.outcome == CascadeOutcome.RESCHEDULED and bool(self.affected)

    def get_affected(self, task_id: str) -> Optional[AffectedTask]:
        for item in self.affected:
            if item.task_id == task_id:
                return item
        return None

    def as_dict(self) -> dict[str, Any]:
        return {
            "affected": [item.as_dict() for item in self.affected],
            "old_completion": self.old_completion,
            "new_completion": self.new_completion,
            "dependency_violation": self.dependency_violation,
            "earliest_start": self.earliest_start,
            "normalized_date": self.normalized_date,
        }


__all__ = ["CascadeOutcome", "AffectedTask", "ReschedulePreview"]

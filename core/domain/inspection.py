from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.domain.enums import InspectionResult
from core.domain.identifiers import generate_id


@dataclass(frozen=True)
class Inspection:
    id: str
    task_id: str
    inspection_type: str
    result: Optional[InspectionResult] = None
    status: str = "scheduled"
    scheduled_date: Optional[date] = None

    @staticmethod
    def create(task_id: str, inspection_type: str, **extra) -> "Inspection":
        return Inspection(id=generate_id(), task_id=task_id, inspection_type=inspection_type, **extra)

    @property
    def passed(self) -> bool:
        return self.result == InspectionResult.PASS


__all__ = ["Inspection"]

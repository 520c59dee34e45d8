from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.domain import LotStatus, MilestoneDefinition


@dataclass(frozen=True)
class LotSummary:
    lot_id: str
    lot_name: str
    status: LotStatus
    progress_percent: int
    target_completion: Optional[date]
    predicted_completion: Optional[date]
    variance_working_days: Optional[int]
    current_milestone: MilestoneDefinition
    delayed_task_count: int


__all__ = ["LotSummary"]

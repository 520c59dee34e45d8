"""Schedule change notifications for notification composers and dashboards."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from core.events.signal import Signal


@dataclass(frozen=True)
class LotRescheduled:
    lot_id: str
    task_id: str
    affected_task_ids: tuple[str, ...]
    old_completion: Optional[date]
    new_completion: Optional[date]
    reason: Optional[str] = None
    notified: bool = False
    subcontractor_ids: tuple[str, ...] = field(default_factory=tuple)


class ScheduleEvents:
    def __init__(self) -> None:
        self.lot_started: Signal[str] = Signal("lot_started")  # lot_id
        self.lot_rescheduled: Signal[LotRescheduled] = Signal("lot_rescheduled")
        self.lot_progressed: Signal[str] = Signal("lot_progressed")  # lot_id
        self.calendar_changed: Signal[str] = Signal("calendar_changed")  # calendar_id


# SINGLE global instance
schedule_events = ScheduleEvents()

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional

from core.domain import Lot, LotStatus, TaskStatus
from core.exceptions import BusinessRuleError, ValidationError
from core.services.scheduling.status import refresh_ready_statuses
from core.services.work_calendar.engine import WorkCalendarEngine

logger = logging.getLogger(__name__)


def calculate_lot_progress(lot: Lot) -> int:
    if not lot.tasks or lot.status == LotStatus.NOT_STARTED:
        return 0
    done = sum(1 for t in lot.tasks if t.is_complete)
    total = len(lot.tasks)
    # half-up, so 1 of 8 reads as 13%
    return (200 * done + total) // (2 * total)


def get_predicted_completion_date(lot: Lot) -> Optional[date]:
    ends = [t.scheduled_end for t in lot.tasks if t.scheduled_end is not None]
    return max(ends) if ends else None


def get_schedule_variance_days(lot: Lot, calendar: WorkCalendarEngine) -> Optional[int]:
    """Signed workdays the predicted completion runs past the target (negative when ahead)."""
    predicted = get_predicted_completion_date(lot)
    if predicted is None or lot.target_completion_date is None:
        return None
    return calendar.working_day_offset(lot.target_completion_date, predicted)


def record_task_start(lot: Lot, task_id: str, actual_start: date) -> Lot:
    task = lot.get_task(task_id)
    if task.is_complete:
        raise BusinessRuleError("Completed tasks cannot be restarted.", code="TASK_ALREADY_COMPLETE")
    started = replace(task, actual_start=actual_start, status=TaskStatus.IN_PROGRESS)
    status = LotStatus.IN_PROGRESS if lot.status == LotStatus.NOT_STARTED else lot.status
    logger.debug("Task %s in lot %s started on %s.", task_id, lot.id, actual_start)
    updated = lot.with_tasks([started])
    return replace(updated, tasks=tuple(refresh_ready_statuses(updated.tasks)), status=status, version=lot.version + 1)


def record_task_completion(lot: Lot, task_id: str, actual_end: date) -> Lot:
    """Mark a task complete; the lot turns complete once every task is."""
    task = lot.get_task(task_id)
    if task.is_complete:
        raise BusinessRuleError("Task is already complete.", code="TASK_ALREADY_COMPLETE")
    actual_start = task.actual_start or task.scheduled_start or actual_end
    if actual_end < actual_start:
        raise ValidationError("Actual end cannot be before actual start.", code="TASK_ACTUAL_END_BEFORE_START")

    finished = replace(
        task,
        actual_start=actual_start,
        actual_end=actual_end,
        status=TaskStatus.COMPLETE,
    )
    updated = lot.with_tasks([finished])
    if all(t.is_complete for t in updated.tasks):
        status = LotStatus.COMPLETE
    elif updated.status == LotStatus.NOT_STARTED:
        status = LotStatus.IN_PROGRESS
    else:
        status = updated.status
    logger.debug("Task %s in lot %s completed on %s.", task_id, lot.id, actual_end)
    return replace(updated, tasks=tuple(refresh_ready_statuses(updated.tasks)), status=status, version=lot.version + 1)


__all__ = [
    "calculate_lot_progress",
    "get_predicted_completion_date",
    "get_schedule_variance_days",
    "record_task_start",
    "record_task_completion",
]

from __future__ import annotations

from datetime import date
from dataclasses import replace
from typing import Iterable, Mapping, Sequence

from core.domain import Inspection, Lot, Task, TaskStatus, Track


def _has_passed_inspection(task: Task, inspections: Iterable[Inspection]) -> bool:
    return any(insp.task_id == task.id and insp.passed for insp in inspections)


def derive_task_status(
    task: Task,
    tasks: Iterable[Task] | Mapping[str, Task],
    inspections: Iterable[Inspection],
    today: date,
) -> TaskStatus:
    """
    Lifecycle state of one task, first matching rule wins:

    complete > blocked (inspection required, none passed) > delayed
    (past scheduled end, or delay logged and unfinished) > in_progress
    > ready (every predecessor complete, start reached) > pending.
    """
    if task.is_complete:
        return TaskStatus.COMPLETE

    inspections = list(inspections)
    if task.requires_inspection and not _has_passed_inspection(task, inspections):
        return TaskStatus.BLOCKED

    if task.scheduled_end is not None and today > task.scheduled_end:
        return TaskStatus.DELAYED
    if int(task.delay_days or 0) > 0:
        return TaskStatus.DELAYED

    if task.actual_start is not None:
        return TaskStatus.IN_PROGRESS

    tasks_by_id = tasks if isinstance(tasks, Mapping) else {t.id: t for t in tasks}
    predecessors_done = all(
        tasks_by_id[dep.predecessor_task_id].is_complete
        for dep in task.dependencies
        if dep.predecessor_task_id in tasks_by_id
    )
    if predecessors_done and task.scheduled_start is not None and today >= task.scheduled_start:
        return TaskStatus.READY
    return TaskStatus.PENDING


def derive_lot_statuses(lot: Lot, inspections: Iterable[Inspection], today: date) -> dict[str, TaskStatus]:
    tasks_by_id = lot.task_map()
    inspections = list(inspections)
    return {
        task.id: derive_task_status(task, tasks_by_id, inspections, today)
        for task in lot.tasks
    }


_HELD_STATUSES = frozenset({TaskStatus.IN_PROGRESS, TaskStatus.DELAYED, TaskStatus.BLOCKED, TaskStatus.COMPLETE})


def refresh_ready_statuses(tasks: Sequence[Task]) -> list[Task]:
    """
    Recompute the stored ready flag after a schedule mutation.

    Per track, the earliest scheduled task that is not held (started,
    delayed, blocked or complete) and is not a buffer becomes READY; the
    other unheld tasks on that track drop back to PENDING.
    """
    next_ready: dict[Track, Task] = {}
    for task in tasks:
        if task.is_buffer or task.is_complete or task.status in _HELD_STATUSES:
            continue
        best = next_ready.get(task.track)
        if best is None or _ready_key(task) < _ready_key(best):
            next_ready[task.track] = task

    refreshed: list[Task] = []
    for task in tasks:
        if task.is_buffer or task.is_complete or task.status in _HELD_STATUSES:
            refreshed.append(task)
            continue
        status = TaskStatus.READY if next_ready.get(task.track) is task else TaskStatus.PENDING
        refreshed.append(task if task.status == status else replace(task, status=status))
    return refreshed


def _ready_key(task: Task) -> tuple:
    return (task.scheduled_start is None, task.scheduled_start or date.max, task.sort_order)


__all__ = ["derive_task_status", "derive_lot_statuses", "refresh_ready_statuses"]

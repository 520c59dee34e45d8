from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from core.domain import Task, Track, by_sort_order
from core.services.scheduling.dependencies import earliest_allowed_start
from core.services.work_calendar.engine import WorkCalendarEngine


def latest_blocking_end(tasks: Sequence[Task]) -> Optional[date]:
    ends = [
        t.scheduled_end
        for t in tasks
        if t.track != Track.FINAL and t.blocks_final and t.scheduled_end is not None
    ]
    return max(ends) if ends else None


def repack_final_track(
    tasks: Sequence[Task],
    calendar: WorkCalendarEngine,
    moved_task_id: Optional[str] = None,
    *,
    keep_gaps: bool = False,
) -> list[Task]:
    """
    Lay the final track out as contiguous blocks behind the blocking work.

    The first incomplete final task starts the workday after the latest
    blocks_final end outside the final track; each following one starts the
    workday after its predecessor in sort order ends. Completed final tasks
    keep their dates and push the cursor past their end. A moved final task
    never starts earlier than its own requested start, and no final task
    starts before its own dependency edges allow. With ``keep_gaps`` every
    final task only ever moves later, so deliberate gaps survive.

    Returns the tasks in input order with repacked snapshots swapped in.
    """
    blocking_end = latest_blocking_end(tasks)
    if blocking_end is None:
        return list(tasks)

    current = {t.id: t for t in tasks}
    cursor = calendar.add_working_days(blocking_end, 1)
    for task in sorted((t for t in tasks if t.track == Track.FINAL), key=by_sort_order):
        if task.is_complete:
            anchor_end = task.actual_end or task.scheduled_end
            if anchor_end is not None:
                cursor = max(cursor, calendar.add_working_days(anchor_end, 1))
            continue

        start = cursor
        if (keep_gaps or task.id == moved_task_id) and task.scheduled_start is not None:
            start = max(start, task.scheduled_start)
        earliest = earliest_allowed_start(task, current, calendar)
        if earliest is not None:
            start = max(start, earliest)
        end = calendar.add_working_days(start, max(1, task.duration_days) - 1)
        if start != task.scheduled_start or end != task.scheduled_end:
            current[task.id] = replace(task, scheduled_start=start, scheduled_end=end)
        cursor = calendar.add_working_days(end, 1)

    return [current[t.id] for t in tasks]


__all__ = ["latest_blocking_end", "repack_final_track"]

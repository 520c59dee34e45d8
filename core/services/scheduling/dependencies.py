from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional

from core.domain import DependencyType, Task, TaskDependency
from core.services.work_calendar.engine import WorkCalendarEngine


def dependency_constraint(
    dep: TaskDependency,
    predecessor: Task,
    duration_days: int,
    calendar: WorkCalendarEngine,
) -> Optional[date]:
    """
    Earliest successor start implied by one edge, or None if the predecessor is undated.

    FS: start after predecessor end plus lag.
    SS: start on predecessor start plus lag.
    FF: finish on predecessor end plus lag, so start (duration - 1) workdays earlier.
    SF: finish on predecessor start plus lag, so start (duration - 1) workdays earlier.
    """
    lag = max(0, int(dep.lag_days or 0))
    back = max(0, int(duration_days or 1) - 1)
    pred_start = predecessor.scheduled_start
    pred_end = predecessor.scheduled_end

    if dep.dependency_type == DependencyType.FINISH_TO_START:
        if pred_end is None:
            return None
        return calendar.add_working_days(pred_end, 1 + lag)

    if dep.dependency_type == DependencyType.START_TO_START:
        if pred_start is None:
            return None
        return calendar.add_working_days(pred_start, lag)

    if dep.dependency_type == DependencyType.FINISH_TO_FINISH:
        if pred_end is None:
            return None
        ef_s = calendar.add_working_days(pred_end, lag)
        return calendar.subtract_working_days(ef_s, back)

    if dep.dependency_type == DependencyType.START_TO_FINISH:
        if pred_start is None:
            return None
        ef_s = calendar.add_working_days(pred_start, lag)
        return calendar.subtract_working_days(ef_s, back)

    return None


def earliest_allowed_start(
    task: Task,
    tasks: Iterable[Task] | Mapping[str, Task],
    calendar: WorkCalendarEngine,
) -> Optional[date]:
    """
    Latest of all dependency-derived start constraints, normalized to a workday.

    Predecessors that are missing from the lot or not yet dated are skipped;
    a task with no usable edge is unconstrained (None).
    """
    if not task.dependencies:
        return None
    tasks_by_id = tasks if isinstance(tasks, Mapping) else {t.id: t for t in tasks}

    candidates: list[date] = []
    for dep in task.dependencies:
        predecessor = tasks_by_id.get(dep.predecessor_task_id)
        if predecessor is None:
            continue
        candidate = dependency_constraint(dep, predecessor, task.duration_days, calendar)
        if candidate is not None:
            candidates.append(candidate)

    if not candidates:
        return None
    return calendar.next_working_day(max(candidates))


def direct_dependents(task_id: str, tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if t.depends_on(task_id)]


__all__ = ["dependency_constraint", "earliest_allowed_start", "direct_dependents"]

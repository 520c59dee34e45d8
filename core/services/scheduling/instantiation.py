from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from core.domain import (
    Lot,
    LotStatus,
    ScheduleTemplate,
    Subcontractor,
    Task,
    TaskDependency,
    Track,
    derive_id,
    generate_id,
)
from core.services.scheduling.assignment import assign_subcontractors
from core.services.scheduling.dependencies import earliest_allowed_start
from core.services.scheduling.final_track import repack_final_track
from core.services.scheduling.graph import build_template_order
from core.services.scheduling.status import refresh_ready_statuses
from core.services.work_calendar.engine import WorkCalendarEngine

logger = logging.getLogger(__name__)


def calculate_target_completion_date(
    start_date: date,
    build_days: int,
    calendar: WorkCalendarEngine,
) -> date:
    """Last workday of a build of ``build_days`` workdays starting on (or after) ``start_date``."""
    first_day = calendar.next_working_day(start_date)
    return calendar.add_working_days(first_day, max(1, int(build_days or 1)) - 1)


def mark_critical_path(tasks: Sequence[Task]) -> list[Task]:
    """
    Advisory flag: foundation, structure and final are always critical,
    plus whichever of interior/exterior finishes its blocking work later.
    """

    def blocking_end(track: Track) -> Optional[date]:
        ends = [t.scheduled_end for t in tasks if t.track == track and t.blocks_final and t.scheduled_end]
        return max(ends) if ends else None

    interior_end = blocking_end(Track.INTERIOR)
    exterior_end = blocking_end(Track.EXTERIOR)
    if exterior_end is None or (interior_end is not None and interior_end >= exterior_end):
        bottleneck = Track.INTERIOR
    else:
        bottleneck = Track.EXTERIOR

    always = {Track.FOUNDATION, Track.STRUCTURE, Track.FINAL}
    return [
        replace(t, is_critical_path=(t.track in always or t.track == bottleneck))
        for t in tasks
    ]


def scale_durations_to_target(
    template: ScheduleTemplate,
    tasks: Sequence[Task],
    target_build_days: int,
    calendar: WorkCalendarEngine,
) -> dict[str, int]:
    """
    Template durations rescaled so the laid-out span approaches ``target_build_days``.

    The ratio is the target over the inclusive workday span of ``tasks``.
    Each duration rounds half-up and never drops below one day; buffers keep
    their length.
    """
    durations = {tt.key: int(tt.duration_days) for tt in template.tasks}
    starts = [t.scheduled_start for t in tasks if t.scheduled_start is not None]
    ends = [t.scheduled_end for t in tasks if t.scheduled_end is not None]
    if not starts or not ends:
        return durations

    current = max(1, calendar.working_days_between(min(starts), max(ends)))
    target = max(1, int(target_build_days))
    if current == target:
        return durations
    return {
        tt.key: durations[tt.key] if tt.is_buffer else max(1, (2 * durations[tt.key] * target + current) // (2 * current))
        for tt in template.tasks
    }


class LotInstantiator:
    def __init__(
        self,
        calendar: Optional[WorkCalendarEngine] = None,
        subcontractors: Sequence[Subcontractor] = (),
    ):
        self._calendar = calendar or WorkCalendarEngine()
        self._subcontractors = tuple(subcontractors)

    def instantiate(
        self,
        template: ScheduleTemplate,
        start_date: date,
        *,
        lot_name: Optional[str] = None,
        lot_id: Optional[str] = None,
        build_days: Optional[int] = None,
        subcontractors: Optional[Sequence[Subcontractor]] = None,
        scale_to_build_days: bool = False,
    ) -> Lot:
        """
        Build a fully dated lot from a template.

        With ``scale_to_build_days`` and a ``build_days`` override that differs
        from the template's, task durations are stretched or squeezed so the
        laid-out schedule spans roughly the overridden number of workdays.
        Template problems raise ConfigurationError before any task is built.
        """
        cal = self._calendar
        order = build_template_order(template.tasks)
        lot_id = lot_id or generate_id()
        lot_start = cal.next_working_day(start_date)
        durations = {tt.key: int(tt.duration_days) for tt in template.tasks}

        tasks = self._layout(template, order, lot_id, lot_start, durations)
        base_build_days = template.build_days or cal.default_build_days
        if scale_to_build_days and build_days and int(build_days) != base_build_days:
            scaled = scale_durations_to_target(template, tasks, int(build_days), cal)
            if scaled != durations:
                tasks = self._layout(template, order, lot_id, lot_start, scaled)

        subs = self._subcontractors if subcontractors is None else tuple(subcontractors)
        if subs:
            tasks = assign_subcontractors(tasks, subs)
        tasks = mark_critical_path(tasks)
        tasks = refresh_ready_statuses(tasks)

        effective_build_days = int(build_days or template.build_days or cal.default_build_days)
        lot = Lot(
            id=lot_id,
            name=lot_name or template.name,
            start_date=lot_start,
            target_completion_date=calculate_target_completion_date(lot_start, effective_build_days, cal),
            build_days=effective_build_days,
            status=LotStatus.IN_PROGRESS,
            tasks=tuple(tasks),
        )
        logger.debug(
            "Instantiated lot %s from template %s: %s tasks, target completion %s.",
            lot.id,
            template.name,
            len(tasks),
            lot.target_completion_date,
        )
        return lot

    def _layout(
        self,
        template: ScheduleTemplate,
        order: Sequence[str],
        lot_id: str,
        lot_start: date,
        durations: dict[str, int],
    ) -> list[Task]:
        cal = self._calendar
        ids_by_key = {tt.key: derive_id(lot_id, tt.key) for tt in template.tasks}
        by_key = {tt.key: tt for tt in template.tasks}

        built: dict[str, Task] = {}
        for key in order:
            tt = by_key[key]
            task = Task(
                id=ids_by_key[key],
                lot_id=lot_id,
                name=tt.name,
                trade=tt.trade,
                track=Track(tt.track),
                duration_days=durations[key],
                sort_order=tt.sort_order,
                dependencies=tuple(
                    TaskDependency.create(ids_by_key[dep.predecessor_task_id], dep.dependency_type, dep.lag_days)
                    for dep in tt.dependencies
                ),
                blocks_final=tt.blocks_final,
                requires_inspection=tt.requires_inspection,
                inspection_type=tt.inspection_type,
                phase=tt.phase,
                is_buffer=tt.is_buffer,
            )
            earliest = earliest_allowed_start(task, built, cal)
            start = max(earliest, lot_start) if earliest is not None else lot_start
            end = cal.add_working_days(start, task.duration_days - 1)
            built[task.id] = replace(task, scheduled_start=start, scheduled_end=end)

        tasks = [built[ids_by_key[tt.key]] for tt in template.tasks]
        return repack_final_track(tasks, cal)


__all__ = [
    "LotInstantiator",
    "calculate_target_completion_date",
    "mark_critical_path",
    "scale_durations_to_target",
]

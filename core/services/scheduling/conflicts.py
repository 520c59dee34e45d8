from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterator, Optional, Sequence

from core.domain import Lot, Subcontractor
from core.exceptions import NotFoundError
from core.services.scheduling.cascade import ScheduleCascadeEngine
from core.services.scheduling.conflict_models import CapacityConflict, ConflictJob, MoveConflictPreview
from core.services.work_calendar.engine import WorkCalendarEngine


def _iter_days(start: date, end: date, calendar: Optional[WorkCalendarEngine]) -> Iterator[date]:
    if calendar is not None:
        yield from calendar.iter_working_days(start, end)
        return
    cur = start
    while cur <= end:
        yield cur
        cur += timedelta(days=1)


def build_capacity_conflicts(
    lots: Sequence[Lot],
    subcontractors: Sequence[Subcontractor],
    window_start: date,
    window_end: date,
    calendar: Optional[WorkCalendarEngine] = None,
) -> list[CapacityConflict]:
    """
    One record per (subcontractor, date) where more distinct lots hold an
    incomplete task for that subcontractor than it can work at once.

    Only workdays are scanned when a calendar is given. A subcontractor
    without a max_concurrent_lots value is never over-booked.
    """
    if window_end < window_start:
        return []
    subs_by_id = {sub.id: sub for sub in subcontractors}

    bucket: dict[tuple[str, date], dict[str, list[ConflictJob]]] = defaultdict(lambda: defaultdict(list))
    for lot in lots:
        for task in lot.tasks:
            if task.is_complete or not task.subcontractor_id or not task.is_scheduled:
                continue
            sub = subs_by_id.get(task.subcontractor_id)
            if sub is None or sub.max_concurrent_lots is None:
                continue
            start = max(task.scheduled_start, window_start)
            end = min(task.scheduled_end, window_end)
            if end < start:
                continue
            job = ConflictJob(lot_id=lot.id, lot_name=lot.name, task_id=task.id, task_name=task.name)
            for day in _iter_days(start, end, calendar):
                bucket[(sub.id, day)][lot.id].append(job)

    conflicts: list[CapacityConflict] = []
    for (sub_id, day), jobs_by_lot in bucket.items():
        sub = subs_by_id[sub_id]
        capacity = int(sub.max_concurrent_lots)
        if len(jobs_by_lot) <= capacity:
            continue
        jobs = [job for lot_jobs in jobs_by_lot.values() for job in lot_jobs]
        jobs.sort(key=lambda j: (j.lot_name.lower(), j.task_name.lower()))
        conflicts.append(
            CapacityConflict(
                subcontractor_id=sub_id,
                subcontractor_name=sub.name,
                conflict_date=day,
                booked=len(jobs_by_lot),
                capacity=capacity,
                jobs=tuple(jobs),
            )
        )

    conflicts.sort(key=lambda c: (c.conflict_date, c.subcontractor_name.lower()))
    return conflicts


def preview_move_conflicts(
    lots: Sequence[Lot],
    subcontractors: Sequence[Subcontractor],
    lot_id: str,
    task_id: str,
    target_date: date,
    window_start: date,
    window_end: date,
    engine: Optional[ScheduleCascadeEngine] = None,
    calendar: Optional[WorkCalendarEngine] = None,
) -> MoveConflictPreview:
    """
    What-if scan: preview moving one task, overlay the proposed dates on its
    lot, and compare conflicts before and after. Nothing is committed.
    """
    engine = engine or ScheduleCascadeEngine(calendar)
    target_lot = next((lot for lot in lots if lot.id == lot_id), None)
    if target_lot is None:
        raise NotFoundError("Lot not found.", code="LOT_NOT_FOUND", lot_id=lot_id)

    preview = engine.preview_reschedule(target_lot, task_id, target_date)
    before = build_capacity_conflicts(lots, subcontractors, window_start, window_end, calendar)

    if preview.can_apply:
        candidate = engine.apply(target_lot, preview)
        candidate_lots = [candidate if lot.id == lot_id else lot for lot in lots]
        after = build_capacity_conflicts(candidate_lots, subcontractors, window_start, window_end, calendar)
    else:
        after = list(before)

    before_keys = {c.key for c in before}
    after_keys = {c.key for c in after}
    return MoveConflictPreview(
        preview=preview,
        conflicts_before=tuple(before),
        conflicts_after=tuple(after),
        introduced=tuple(c for c in after if c.key not in before_keys),
        resolved=tuple(c for c in before if c.key not in after_keys),
    )


__all__ = ["build_capacity_conflicts", "preview_move_conflicts"]

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from core.domain import Lot, ScheduleChange, Task, TaskStatus, Track, by_sort_order, generate_id
from core.exceptions import BusinessRuleError, ConcurrencyError, ValidationError
from core.services.scheduling.cascade_models import AffectedTask, CascadeOutcome, ReschedulePreview
from core.services.scheduling.dependencies import earliest_allowed_start
from core.services.scheduling.final_track import repack_final_track
from core.services.scheduling.progress import get_predicted_completion_date
from core.services.scheduling.status import refresh_ready_statuses
from core.services.work_calendar.engine import WorkCalendarEngine

logger = logging.getLogger(__name__)


class ScheduleCascadeEngine:
    """
    Propagates one task's date change through its lot.

    Delay-by-N and move-to-date both resolve a target start and run the same
    propagation, so a preview is exactly what ``apply`` writes. Duration
    changes and buffer days settle through the same final-track repack and
    diff. Nothing here mutates its arguments; every result is a new snapshot
    or a report.
    """

    def __init__(self, calendar: Optional[WorkCalendarEngine] = None):
        self._calendar = calendar or WorkCalendarEngine()

    @property
    def calendar(self) -> WorkCalendarEngine:
        return self._calendar

    # ---------- previews ----------

    def preview_delay(self, lot: Lot, task_id: str, delay_days: int) -> ReschedulePreview:
        delay_days = int(delay_days)
        if delay_days < 0:
            raise ValidationError("Delay days must be zero or positive.", code="DELAY_NEGATIVE")
        task = lot.get_task(task_id)
        if task.is_complete:
            return self._blocked_by_completion(lot, task, delay_days=delay_days)
        start = self._require_start(task)
        target = self._calendar.add_working_days(start, delay_days)
        return self._propagate(lot, task, target, delay_days=delay_days)

    def preview_reschedule(self, lot: Lot, task_id: str, target_date: date) -> ReschedulePreview:
        task = lot.get_task(task_id)
        if task.is_complete:
            return self._blocked_by_completion(lot, task, target=target_date)
        self._require_start(task)
        return self._propagate(lot, task, target_date)

    def preview_duration_change(self, lot: Lot, task_id: str, new_duration: int) -> ReschedulePreview:
        """
        Keep the task's start and stretch or shrink it to ``new_duration`` workdays.

        Everything the delay cascade would select shifts by the change in
        length, then the final track repacks.
        """
        new_duration = int(new_duration)
        if new_duration < 1:
            raise ValidationError("Duration must be at least one workday.", code="DURATION_INVALID")
        task = lot.get_task(task_id)
        if task.is_complete:
            return replace(self._blocked_by_completion(lot, task, target=task.scheduled_start), new_duration=new_duration)
        start = self._require_start(task)

        cal = self._calendar
        delta = new_duration - max(1, cal.working_days_between(start, task.scheduled_end))
        new_end = cal.add_working_days(start, new_duration - 1)
        selected = self._select_affected(lot, task)
        shifted: list[Task] = []
        for t in lot.tasks:
            if t.id == task.id:
                shifted.append(replace(t, scheduled_end=new_end))
            elif delta and t.id in selected and t.is_scheduled:
                shifted.append(self._shift(t, delta))
            else:
                shifted.append(t)

        return self._settle(
            lot,
            task,
            shifted,
            shift=delta,
            normalized=start,
            earliest=earliest_allowed_start(task, lot.task_map(), cal),
            moved_task_id=task.id,
            new_duration=new_duration,
        )

    def preview_buffer(self, lot: Lot, task_id: str, buffer_days: int) -> ReschedulePreview:
        """
        Open ``buffer_days`` workdays after a task.

        The task itself stays put; its unstarted followers on the same track
        slide later, unstarted dependents are pushed until their edges hold,
        and the final track only ever moves later to make room.
        """
        buffer_days = int(buffer_days)
        if buffer_days < 0:
            raise ValidationError("Buffer days must be zero or positive.", code="BUFFER_NEGATIVE")
        task = lot.get_task(task_id)
        self._require_start(task)

        cal = self._calendar
        buffer_start = cal.add_working_days(task.scheduled_end, 1)
        if buffer_days == 0:
            return self._report(lot, task, CascadeOutcome.NO_OP, normalized=buffer_start, buffer_days=0)

        followers = {t.id for t in self._unstarted_followers(lot, task)}
        shifted = self._push_dependents([self._shift(t, buffer_days) if t.id in followers else t for t in lot.tasks])
        return self._settle(
            lot,
            task,
            shifted,
            shift=buffer_days,
            normalized=buffer_start,
            keep_gaps=True,
            buffer_days=buffer_days,
        )

    # ---------- commit ----------

    def apply(
        self,
        lot: Lot,
        preview: ReschedulePreview,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        notified: bool = False,
        changed_at: Optional[datetime] = None,
    ) -> Lot:
        """
        Write a preview's dates back onto the lot it was computed from.

        Delay bookkeeping and a new duration land on the moved task only. Each
        applied preview appends one ScheduleChange and bumps the lot version.
        """
        if preview.lot_id != lot.id:
            raise ValidationError("Preview was computed for a different lot.", code="PREVIEW_LOT_MISMATCH")
        if preview.lot_version != lot.version:
            raise ConcurrencyError(
                "Lot changed since this preview was computed. Preview again before applying.",
                code="STALE_PREVIEW",
                lot_id=lot.id,
                task_id=preview.task_id,
            )
        if not preview.can_apply:
            logger.debug("Preview for task %s has outcome %s; nothing to apply.", preview.task_id, preview.outcome.value)
            return lot

        changed_at = changed_at or datetime.now(timezone.utc)
        updates: list[Task] = []
        for item in preview.affected:
            task = lot.get_task(item.task_id)
            changes: dict = {"scheduled_start": item.new_start, "scheduled_end": item.new_end}
            if task.id == preview.task_id and preview.delay_days is not None:
                changes.update(
                    delay_days=preview.delay_days,
                    delay_reason=reason,
                    delay_notes=notes,
                    delay_logged_at=changed_at,
                    status=TaskStatus.DELAYED,
                )
            if task.id == preview.task_id and preview.new_duration is not None:
                changes["duration_days"] = preview.new_duration
            updates.append(replace(task, **changes))

        moved = preview.get_affected(preview.task_id)
        if moved is None:
            current = lot.get_task(preview.task_id)
            old_start = new_start = current.scheduled_start
            old_end = new_end = current.scheduled_end
        else:
            old_start, new_start = moved.old_start, moved.new_start
            old_end, new_end = moved.old_end, moved.new_end

        change = ScheduleChange.create(
            preview.task_id,
            old_start=old_start,
            new_start=new_start,
            old_end=old_end,
            new_end=new_end,
            reason=reason,
            notes=notes,
            delay_days=preview.delay_days or 0,
            affected_count=len(preview.affected),
            notified=notified,
            changed_at=changed_at,
        )
        updated = lot.with_tasks(updates)
        return replace(
            updated,
            tasks=tuple(refresh_ready_statuses(updated.tasks)),
            schedule_changes=lot.schedule_changes + (change,),
            version=lot.version + 1,
        )

    def commit_delay(
        self,
        lot: Lot,
        task_id: str,
        delay_days: int,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        notified: bool = False,
        changed_at: Optional[datetime] = None,
    ) -> tuple[Lot, ReschedulePreview]:
        preview = self.preview_delay(lot, task_id, delay_days)
        updated = self.apply(lot, preview, reason=reason, notes=notes, notified=notified, changed_at=changed_at)
        return updated, preview

    def commit_reschedule(
        self,
        lot: Lot,
        task_id: str,
        target_date: date,
        *,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        notified: bool = False,
        changed_at: Optional[datetime] = None,
    ) -> tuple[Lot, ReschedulePreview]:
        preview = self.preview_reschedule(lot, task_id, target_date)
        updated = self.apply(lot, preview, reason=reason, notes=notes, notified=notified, changed_at=changed_at)
        return updated, preview

    # ---------- buffer tasks ----------

    def insert_buffer_task(
        self,
        lot: Lot,
        after_task_id: str,
        buffer_days: int,
        *,
        buffer_task_id: Optional[str] = None,
    ) -> Lot:
        """
        Add a visible buffer task right after ``after_task_id`` on its track.

        Later tasks on the track move down one sort slot; the unstarted ones
        slide by the buffer length.
        """
        days = int(buffer_days)
        if days < 1:
            raise ValidationError("A buffer task needs at least one workday.", code="BUFFER_INVALID")
        anchor = lot.get_task(after_task_id)
        self._require_start(anchor)

        cal = self._calendar
        start = cal.add_working_days(anchor.scheduled_end, 1)
        buffer = Task(
            id=buffer_task_id or generate_id(),
            lot_id=lot.id,
            name="Buffer",
            trade="buffer",
            track=anchor.track,
            duration_days=days,
            sort_order=anchor.sort_order + 1,
            scheduled_start=start,
            scheduled_end=cal.add_working_days(start, days - 1),
            blocks_final=False,
            phase="misc",
            is_buffer=True,
        )

        followers = {t.id for t in self._unstarted_followers(lot, anchor)}
        tasks: list[Task] = []
        for t in lot.tasks:
            if t.track == anchor.track and t.sort_order > anchor.sort_order:
                t = replace(t, sort_order=t.sort_order + 1)
                if t.id in followers:
                    t = self._shift(t, days)
            tasks.append(t)
            if t.id == anchor.id:
                tasks.append(buffer)

        tasks = repack_final_track(self._push_dependents(tasks), cal, keep_gaps=True)
        logger.debug("Inserted %s-day buffer %s after task %s in lot %s.", days, buffer.id, anchor.id, lot.id)
        return self._restructure(lot, tasks)

    def remove_buffer_task(self, lot: Lot, buffer_task_id: str) -> Lot:
        """Drop a buffer task and pull its unstarted followers back, never past their dependencies."""
        buffer = lot.get_task(buffer_task_id)
        if not buffer.is_buffer:
            raise BusinessRuleError(
                "Only buffer tasks can be removed from a schedule.",
                code="TASK_NOT_BUFFER",
                lot_id=lot.id,
                task_id=buffer.id,
            )

        cal = self._calendar
        days = max(1, buffer.duration_days)
        remaining = [t for t in lot.tasks if t.id != buffer.id]
        followers = {
            t.id
            for t in remaining
            if t.track == buffer.track and t.sort_order > buffer.sort_order and self._can_slide(t)
        }
        current = {t.id: t for t in remaining}
        for t in sorted(remaining, key=by_sort_order):
            if t.id not in followers:
                continue
            pulled = self._shift(t, -days)
            earliest = earliest_allowed_start(pulled, current, cal)
            if earliest is not None and pulled.scheduled_start < earliest:
                span = cal.working_days_between(t.scheduled_start, t.scheduled_end)
                pulled = replace(
                    pulled,
                    scheduled_start=earliest,
                    scheduled_end=cal.add_working_days(earliest, max(1, span) - 1),
                )
            current[t.id] = pulled

        tasks = repack_final_track([current[t.id] for t in remaining], cal, keep_gaps=True)
        logger.debug("Removed buffer %s from lot %s.", buffer.id, lot.id)
        return self._restructure(lot, tasks)

    # ---------- propagation ----------

    def _propagate(
        self,
        lot: Lot,
        task: Task,
        target: date,
        *,
        delay_days: Optional[int] = None,
    ) -> ReschedulePreview:
        cal = self._calendar
        normalized = cal.next_working_day(target)
        earliest = earliest_allowed_start(task, lot.task_map(), cal)

        if earliest is not None and normalized < earliest:
            logger.debug(
                "Moving task %s to %s violates its dependencies (earliest %s).",
                task.id,
                normalized,
                earliest,
            )
            return self._report(
                lot,
                task,
                CascadeOutcome.DEPENDENCY_VIOLATION,
                normalized=normalized,
                earliest=earliest,
                delay_days=delay_days,
            )

        shift = cal.working_day_offset(task.scheduled_start, normalized)
        if shift == 0:
            return self._report(
                lot, task, CascadeOutcome.NO_OP, normalized=normalized, earliest=earliest, delay_days=delay_days
            )

        selected = self._select_affected(lot, task)
        shifted: list[Task] = []
        for t in lot.tasks:
            if t.id not in selected or not t.is_scheduled:
                shifted.append(t)
            elif t.id == task.id:
                shifted.append(
                    replace(t, scheduled_start=normalized, scheduled_end=cal.shift_working_days(t.scheduled_end, shift))
                )
            else:
                shifted.append(self._shift(t, shift))

        return self._settle(
            lot,
            task,
            shifted,
            shift=shift,
            normalized=normalized,
            earliest=earliest,
            moved_task_id=task.id,
            delay_days=delay_days,
        )

    def _settle(
        self,
        lot: Lot,
        task: Task,
        shifted: Sequence[Task],
        *,
        shift: int,
        normalized: Optional[date],
        earliest: Optional[date] = None,
        moved_task_id: Optional[str] = None,
        keep_gaps: bool = False,
        **extra,
    ) -> ReschedulePreview:
        """Repack the final track over ``shifted`` and report what changed against ``lot``."""
        repacked = repack_final_track(shifted, self._calendar, moved_task_id=moved_task_id, keep_gaps=keep_gaps)

        affected: list[AffectedTask] = []
        for before, after in zip(lot.tasks, repacked):
            if before.scheduled_start == after.scheduled_start and before.scheduled_end == after.scheduled_end:
                continue
            affected.append(
                AffectedTask(
                    task_id=before.id,
                    task_name=before.name,
                    track=before.track,
                    old_start=before.scheduled_start,
                    new_start=after.scheduled_start,
                    old_end=before.scheduled_end,
                    new_end=after.scheduled_end,
                )
            )
        if not affected:
            return self._report(
                lot, task, CascadeOutcome.NO_OP, normalized=normalized, earliest=earliest, shift=shift, **extra
            )

        sort_order = {t.id: t.sort_order for t in lot.tasks}
        affected.sort(
            key=lambda a: (
                a.task_id != task.id,
                a.old_start or date.min,
                sort_order.get(a.task_id, 0),
            )
        )
        return self._report(
            lot,
            task,
            CascadeOutcome.RESCHEDULED,
            normalized=normalized,
            earliest=earliest,
            shift=shift,
            affected=affected,
            new_completion=get_predicted_completion_date(replace(lot, tasks=tuple(repacked))),
            **extra,
        )

    def _report(
        self,
        lot: Lot,
        task: Task,
        outcome: CascadeOutcome,
        *,
        normalized: Optional[date],
        earliest: Optional[date] = None,
        shift: int = 0,
        affected: Sequence[AffectedTask] = (),
        new_completion: Optional[date] = None,
        **extra,
    ) -> ReschedulePreview:
        old_completion = get_predicted_completion_date(lot)
        return ReschedulePreview(
            task_id=task.id,
            lot_id=lot.id,
            lot_version=lot.version,
            outcome=outcome,
            normalized_date=normalized,
            earliest_start=earliest,
            shift_working_days=shift,
            affected=tuple(affected),
            old_completion=old_completion,
            new_completion=new_completion if affected else old_completion,
            **extra,
        )

    @staticmethod
    def _select_affected(lot: Lot, moved: Task) -> set[str]:
        selected = {moved.id}
        for t in lot.tasks:
            if t.id == moved.id or t.is_complete:
                continue
            if t.track == moved.track and t.sort_order > moved.sort_order:
                selected.add(t.id)
            elif t.depends_on(moved.id):
                selected.add(t.id)
        return selected

    @classmethod
    def _unstarted_followers(cls, lot: Lot, anchor: Task) -> list[Task]:
        return [
            t
            for t in lot.tasks
            if t.track == anchor.track and t.sort_order > anchor.sort_order and cls._can_slide(t)
        ]

    @staticmethod
    def _can_slide(task: Task) -> bool:
        return task.is_scheduled and not task.is_complete and task.actual_start is None

    def _shift(self, task: Task, delta: int) -> Task:
        cal = self._calendar
        return replace(
            task,
            scheduled_start=cal.shift_working_days(task.scheduled_start, delta),
            scheduled_end=cal.shift_working_days(task.scheduled_end, delta),
        )

    def _push_dependents(self, tasks: Sequence[Task]) -> list[Task]:
        """Move unstarted non-final tasks later until every dependency edge holds again."""
        cal = self._calendar
        current = {t.id: t for t in tasks}
        for _ in range(len(current)):
            moved = False
            for t in sorted(current.values(), key=lambda t: (t.scheduled_start or date.max, t.sort_order)):
                if t.track == Track.FINAL or not self._can_slide(t):
                    continue
                earliest = earliest_allowed_start(t, current, cal)
                if earliest is None or t.scheduled_start >= earliest:
                    continue
                span = max(1, cal.working_days_between(t.scheduled_start, t.scheduled_end))
                current[t.id] = replace(
                    t,
                    scheduled_start=earliest,
                    scheduled_end=cal.add_working_days(earliest, span - 1),
                )
                moved = True
            if not moved:
                break
        return [current[t.id] for t in tasks]

    @staticmethod
    def _restructure(lot: Lot, tasks: Sequence[Task]) -> Lot:
        return replace(lot, tasks=tuple(refresh_ready_statuses(tasks)), version=lot.version + 1)

    def _blocked_by_completion(
        self,
        lot: Lot,
        task: Task,
        *,
        target: Optional[date] = None,
        delay_days: Optional[int] = None,
    ) -> ReschedulePreview:
        if target is None and task.scheduled_start is not None:
            target = self._calendar.add_working_days(task.scheduled_start, delay_days or 0)
        return self._report(
            lot,
            task,
            CascadeOutcome.TASK_COMPLETE,
            normalized=self._calendar.next_working_day(target) if target is not None else None,
            delay_days=delay_days,
        )

    @staticmethod
    def _require_start(task: Task) -> date:
        if task.scheduled_start is None or task.scheduled_end is None:
            raise ValidationError(f"Task '{task.name}' has no scheduled dates yet.", code="TASK_NOT_SCHEDULED")
        return task.scheduled_start


__all__ = ["ScheduleCascadeEngine"]

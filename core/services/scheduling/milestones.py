from __future__ import annotations

from typing import Optional, Sequence

from core.domain import DEFAULT_MILESTONES, Lot, MilestoneDefinition, Task

NOT_STARTED_MILESTONE = MilestoneDefinition("not_started", "Not Started", 0, manual=True, short="---")


def _find_task(lot: Lot, name: str) -> Optional[Task]:
    for task in lot.tasks:
        if task.name == name:
            return task
    return None


def is_milestone_achieved(milestone: MilestoneDefinition, lot: Lot) -> bool:
    if milestone.manual:
        return bool(lot.manual_milestones.get(milestone.id))

    if milestone.trigger_tasks:
        for name in milestone.trigger_tasks:
            task = _find_task(lot, name)
            if task is None or not task.is_complete:
                return False
        return True

    if milestone.trigger_task:
        task = _find_task(lot, milestone.trigger_task)
        return task is not None and task.is_complete

    return False


def list_achieved_milestones(
    lot: Lot,
    milestones: Sequence[MilestoneDefinition] = DEFAULT_MILESTONES,
) -> list[MilestoneDefinition]:
    return [m for m in milestones if is_milestone_achieved(m, lot)]


def get_current_milestone(
    lot: Lot,
    milestones: Sequence[MilestoneDefinition] = DEFAULT_MILESTONES,
) -> MilestoneDefinition:
    """Achieved milestone with the highest percent; the 0% sentinel when nothing is reached."""
    achieved = list_achieved_milestones(lot, milestones)
    if not achieved:
        return NOT_STARTED_MILESTONE
    return max(achieved, key=lambda m: m.percent)


__all__ = [
    "NOT_STARTED_MILESTONE",
    "is_milestone_achieved",
    "list_achieved_milestones",
    "get_current_milestone",
]

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from core.domain import Subcontractor, Task


def _preference_key(sub: Subcontractor) -> tuple[int, int, float, str]:
    return (
        0 if sub.is_preferred else 1,
        0 if sub.is_backup else 1,
        -float(sub.rating or 0.0),
        sub.name.lower(),
    )


def choose_subcontractor(
    trade: str,
    subcontractors: Iterable[Subcontractor],
    on_date: Optional[date] = None,
) -> Optional[Subcontractor]:
    """
    Best-effort pick for one trade: active, trade match, not blacked out.

    Preferred beats backup beats the rest; ties go to the higher rating.
    Nothing is reserved, so the same subcontractor may win several tasks.
    """
    candidates = [
        sub
        for sub in subcontractors
        if sub.is_active
        and sub.covers_trade(trade)
        and (on_date is None or sub.is_available_on(on_date))
    ]
    if not candidates:
        return None
    candidates.sort(key=_preference_key)
    return candidates[0]


def assign_subcontractors(tasks: Sequence[Task], subcontractors: Sequence[Subcontractor]) -> list[Task]:
    assigned: list[Task] = []
    for task in tasks:
        if task.subcontractor_id:
            assigned.append(task)
            continue
        sub = choose_subcontractor(task.trade, subcontractors, task.scheduled_start)
        assigned.append(replace(task, subcontractor_id=sub.id) if sub else task)
    return assigned


__all__ = ["choose_subcontractor", "assign_subcontractors"]

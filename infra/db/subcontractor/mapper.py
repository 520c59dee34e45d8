from __future__ import annotations

import json
from datetime import date

from core.domain import BlackoutPeriod, Subcontractor
from infra.db.models import SubcontractorORM


def _blackouts_to_json(periods: tuple[BlackoutPeriod, ...]) -> str:
    return json.dumps([{"start": p.start.isoformat(), "end": p.end.isoformat()} for p in periods])


def _blackouts_from_json(raw: str | None) -> tuple[BlackoutPeriod, ...]:
    if not raw:
        return ()
    try:
        items = json.loads(raw)
    except json.JSONDecodeError:
        return ()
    periods: list[BlackoutPeriod] = []
    for item in items if isinstance(items, list) else []:
        try:
            periods.append(
                BlackoutPeriod(start=date.fromisoformat(item["start"]), end=date.fromisoformat(item["end"]))
            )
        except (KeyError, TypeError, ValueError):
            continue
    return tuple(periods)


def subcontractor_values(sub: Subcontractor) -> dict:
    return {
        "name": sub.name,
        "trade": sub.trade,
        "secondary_trades": ",".join(sub.secondary_trades),
        "max_concurrent_lots": sub.max_concurrent_lots,
        "is_active": sub.is_active,
        "is_preferred": sub.is_preferred,
        "is_backup": sub.is_backup,
        "rating": float(sub.rating or 0.0),
        "blackout_json": _blackouts_to_json(sub.blackout_periods),
    }


def subcontractor_to_orm(sub: Subcontractor) -> SubcontractorORM:
    return SubcontractorORM(id=sub.id, **subcontractor_values(sub))


def subcontractor_from_orm(obj: SubcontractorORM) -> Subcontractor:
    return Subcontractor(
        id=obj.id,
        name=obj.name,
        trade=obj.trade,
        max_concurrent_lots=obj.max_concurrent_lots,
        secondary_trades=tuple(t.strip() for t in (obj.secondary_trades or "").split(",") if t.strip()),
        is_active=bool(obj.is_active),
        is_preferred=bool(obj.is_preferred),
        is_backup=bool(obj.is_backup),
        rating=float(obj.rating or 0.0),
        blackout_periods=_blackouts_from_json(obj.blackout_json),
    )


__all__ = ["subcontractor_to_orm", "subcontractor_from_orm", "subcontractor_values"]

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from core.domain import Lot
    from core.services.scheduling.cascade_models import ReschedulePreview


def _plain(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


def record_audit(
    owner: object,
    *,
    action: str,
    entity_type: str,
    entity_id: str,
    lot: Optional[Lot] = None,
    details: dict[str, Any] | None = None,
) -> None:
    """
    Record through ``owner._audit_service`` when one is wired; the caller commits.

    Passing the lot snapshot being written files the entry under that lot and
    stamps the version it was saved at, so history lines up with ScheduleChange
    rows. Dates in ``details`` are stored as ISO strings.
    """
    audit_service = getattr(owner, "_audit_service", None)
    if audit_service is None:
        return
    payload = {key: _plain(value) for key, value in (details or {}).items()}
    if lot is not None:
        payload.setdefault("lot_version", lot.version)
    audit_service.record(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        lot_id=lot.id if lot is not None else None,
        details=payload,
    )


def preview_audit_action(preview: ReschedulePreview) -> str:
    if preview.new_duration is not None:
        return "task.duration"
    if preview.buffer_days is not None:
        return "task.buffer"
    if preview.delay_days is not None:
        return "task.delay"
    return "task.reschedule"


def preview_audit_details(preview: ReschedulePreview, **extra: Any) -> dict[str, Any]:
    details: dict[str, Any] = {
        "normalized_date": preview.normalized_date,
        "shift_working_days": preview.shift_working_days,
        "affected_count": len(preview.affected),
        "old_completion": preview.old_completion,
        "new_completion": preview.new_completion,
    }
    for key in ("delay_days", "new_duration", "buffer_days"):
        value = getattr(preview, key)
        if value is not None:
            details[key] = value
    details.update(extra)
    return details


__all__ = ["record_audit", "preview_audit_action", "preview_audit_details"]

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from core.domain.identifiers import generate_id


@dataclass
class AuditLogEntry:
    id: str
    occurred_at: datetime
    actor: str | None
    action: str
    entity_type: str
    entity_id: str
    lot_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def create(
        action: str,
        entity_type: str,
        entity_id: str,
        *,
        actor: str | None = None,
        lot_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> "AuditLogEntry":
        return AuditLogEntry(
            id=generate_id(),
            occurred_at=datetime.now(timezone.utc),
            actor=actor,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            lot_id=lot_id,
            details=details or {},
        )


__all__ = ["AuditLogEntry"]

from __future__ import annotations

from typing import Any, List

from sqlalchemy.orm import Session

from core.domain import AuditLogEntry
from core.interfaces import AuditLogRepository


class AuditService:
    def __init__(
        self,
        session: Session,
        audit_repo: AuditLogRepository,
        actor: str | None = None,
    ):
        self._session = session
        self._audit_repo = audit_repo
        self._actor = actor

    def set_actor(self, actor: str | None) -> None:
        self._actor = (actor or "").strip() or None

    def record(
        self,
        *,
        action: str,
        entity_type: str,
        entity_id: str,
        lot_id: str | None = None,
        details: dict[str, Any] | None = None,
        commit: bool = False,
    ) -> AuditLogEntry:
        entry = AuditLogEntry.create(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=self._actor,
            lot_id=lot_id,
            details=details or {},
        )
        self._audit_repo.add(entry)
        if commit:
            self._session.commit()
        return entry

    def list_recent(
        self,
        limit: int = 200,
        *,
        lot_id: str | None = None,
        entity_type: str | None = None,
    ) -> List[AuditLogEntry]:
        return self._audit_repo.list_recent(
            limit=limit,
            lot_id=lot_id,
            entity_type=entity_type,
        )


__all__ = ["AuditService"]

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from core.exceptions import ConcurrencyError, NotFoundError
from infra.db.models import LotORM


def update_lot_version(
    session: Session,
    lot_id: str,
    expected_version: int,
    values: dict[str, Any],
) -> int:
    """
    Write ``values`` onto a lot row only while it is still at ``expected_version``.

    Returns the bumped version. A lot that moved on raises STALE_WRITE naming
    both versions, so the caller can tell a lost race from a missing lot.
    """
    next_version = int(expected_version) + 1
    stmt = (
        update(LotORM)
        .where(LotORM.id == lot_id, LotORM.version == expected_version)
        .values(**values, version=next_version)
        .execution_options(synchronize_session="fetch")
    )
    if session.execute(stmt).rowcount == 1:
        return next_version

    stored = session.execute(select(LotORM.version).where(LotORM.id == lot_id)).scalar_one_or_none()
    if stored is None:
        raise NotFoundError("Lot not found.", code="LOT_NOT_FOUND", lot_id=lot_id)
    raise ConcurrencyError(
        f"Lot was updated by another user (now version {stored}, expected {expected_version}).",
        code="STALE_WRITE",
        lot_id=lot_id,
    )


__all__ = ["update_lot_version"]

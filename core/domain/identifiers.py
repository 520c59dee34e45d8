from __future__ import annotations

from uuid import NAMESPACE_URL, uuid4, uuid5

_LOT_TASK_NAMESPACE = uuid5(NAMESPACE_URL, "lot-schedule/task")


def generate_id() -> str:
    return str(uuid4())


def derive_id(*parts: str) -> str:
    """Deterministic id from its parts; the same lot and template key always map to the same task id."""
    return str(uuid5(_LOT_TASK_NAMESPACE, ":".join(str(p) for p in parts)))


__all__ = ["generate_id", "derive_id"]

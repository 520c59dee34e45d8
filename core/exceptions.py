# core/exceptions.py
from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """
    Base class for scheduling errors.

    ``code`` is the stable machine-readable reason; ``lot_id`` and ``task_id``
    name the records involved when the raiser knows them.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        lot_id: Optional[str] = None,
        task_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.lot_id = lot_id
        self.task_id = task_id

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.__class__.__name__, "code": self.code, "message": self.message}
        if self.lot_id is not None:
            payload["lot_id"] = self.lot_id
        if self.task_id is not None:
            payload["task_id"] = self.task_id
        return payload


class ValidationError(DomainError):
    """Bad input: negative delays, empty work weeks, durations under a day."""


class NotFoundError(DomainError):
    """A lot, task, holiday, subcontractor or inspection that does not exist."""


class BusinessRuleError(DomainError):
    """A request the schedule rules refuse, e.g. restarting a completed task."""


class ConcurrencyError(DomainError):
    """The lot moved on: a stale preview or a lost optimistic-lock race."""


class ConfigurationError(DomainError):
    """A schedule template that cannot be instantiated (unknown predecessor, cycle)."""

from __future__ import annotations

from enum import Enum


class Track(str, Enum):
    FOUNDATION = "foundation"
    STRUCTURE = "structure"
    INTERIOR = "interior"
    EXTERIOR = "exterior"
    FINAL = "final"


class TaskStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DELAYED = "delayed"
    COMPLETE = "complete"


class LotStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class DependencyType(str, Enum):
    FINISH_TO_START = "FS"
    FINISH_TO_FINISH = "FF"
    START_TO_START = "SS"
    START_TO_FINISH = "SF"


class InspectionResult(str, Enum):
    PASS = "pass"
    FAIL = "fail"


__all__ = ["Track", "TaskStatus", "LotStatus", "DependencyType", "InspectionResult"]

from .cascade import ScheduleCascadeEngine
from .cascade_models import AffectedTask, CascadeOutcome, ReschedulePreview
from .conflict_models import CapacityConflict, ConflictJob, MoveConflictPreview
from .conflicts import build_capacity_conflicts, preview_move_conflicts
from .dependencies import earliest_allowed_start
from .final_track import repack_final_track
from .instantiation import LotInstantiator, calculate_target_completion_date, scale_durations_to_target
from .milestones import get_current_milestone, is_milestone_achieved, list_achieved_milestones
from .progress import (
    calculate_lot_progress,
    get_predicted_completion_date,
    get_schedule_variance_days,
    record_task_completion,
    record_task_start,
)
from .status import derive_lot_statuses, derive_task_status, refresh_ready_statuses

__all__ = [
    "ScheduleCascadeEngine",
    "AffectedTask",
    "CascadeOutcome",
    "ReschedulePreview",
    "CapacityConflict",
    "ConflictJob",
    "MoveConflictPreview",
    "build_capacity_conflicts",
    "preview_move_conflicts",
    "earliest_allowed_start",
    "LotInstantiator",
    "calculate_target_completion_date",
    "scale_durations_to_target",
    "repack_final_track",
    "is_milestone_achieved",
    "get_current_milestone",
    "list_achieved_milestones",
    "calculate_lot_progress",
    "get_predicted_completion_date",
    "get_schedule_variance_days",
    "record_task_start",
    "record_task_completion",
    "derive_task_status",
    "derive_lot_statuses",
    "refresh_ready_statuses",
]

"""create lot schedule tables

Revision ID: 4a1e0c7b9d12
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "4a1e0c7b9d12"
down_revision = None
branch_labels = None
depends_on = None

_LOT_STATUS = sa.Enum("NOT_STARTED", "IN_PROGRESS", "COMPLETE", name="lotstatus")
_TRACK = sa.Enum("FOUNDATION", "STRUCTURE", "INTERIOR", "EXTERIOR", "FINAL", name="track")
_TASK_STATUS = sa.Enum(
    "PENDING", "READY", "IN_PROGRESS", "BLOCKED", "DELAYED", "COMPLETE", name="taskstatus"
)
_DEPENDENCY_TYPE = sa.Enum(
    "FINISH_TO_START", "FINISH_TO_FINISH", "START_TO_START", "START_TO_FINISH", name="dependencytype"
)
_INSPECTION_RESULT = sa.Enum("PASS", "FAIL", name="inspectionresult")


def upgrade() -> None:
    op.create_table(
        "lots",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("target_completion_date", sa.Date(), nullable=True),
        sa.Column("build_days", sa.Integer(), nullable=True),
        sa.Column("status", _LOT_STATUS, nullable=False),
        sa.Column("manual_milestones_json", sa.Text(), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_lots_status", "lots", ["status"], unique=False)

    op.create_table(
        "subcontractors",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("trade", sa.String(length=64), nullable=False),
        sa.Column("secondary_trades", sa.String(), nullable=False, server_default=sa.text("''")),
        sa.Column("max_concurrent_lots", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_preferred", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_backup", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("rating", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("blackout_json", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_subcontractors_trade", "subcontractors", ["trade"], unique=False)

    op.create_table(
        "lot_tasks",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("lot_id", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("trade", sa.String(length=64), nullable=False, server_default=sa.text("'other'")),
        sa.Column("track", _TRACK, nullable=False),
        sa.Column("duration_days", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("scheduled_start", sa.Date(), nullable=True),
        sa.Column("scheduled_end", sa.Date(), nullable=True),
        sa.Column("actual_start", sa.Date(), nullable=True),
        sa.Column("actual_end", sa.Date(), nullable=True),
        sa.Column("status", _TASK_STATUS, nullable=False),
        sa.Column("subcontractor_id", sa.String(), nullable=True),
        sa.Column("blocks_final", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_critical_path", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("requires_inspection", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("inspection_type", sa.String(length=64), nullable=True),
        sa.Column("phase", sa.String(length=64), nullable=True),
        sa.Column("delay_days", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("delay_reason", sa.String(), nullable=True),
        sa.Column("delay_notes", sa.Text(), nullable=True),
        sa.Column("delay_logged_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["lot_id"], ["lots.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["subcontractor_id"], ["subcontractors.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_lot_tasks_lot_id", "lot_tasks", ["lot_id"], unique=False)
    op.create_index("idx_lot_tasks_subcontractor", "lot_tasks", ["subcontractor_id"], unique=False)

    op.create_table(
        "lot_task_dependencies",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("successor_task_id", sa.String(), nullable=False),
        sa.Column("predecessor_task_id", sa.String(), nullable=False),
        sa.Column("dependency_type", _DEPENDENCY_TYPE, nullable=False),
        sa.Column("lag_days", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["successor_task_id"], ["lot_tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["predecessor_task_id"], ["lot_tasks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_lot_dep_successor", "lot_task_dependencies", ["successor_task_id"], unique=False)
    op.create_index("idx_lot_dep_predecessor", "lot_task_dependencies", ["predecessor_task_id"], unique=False)

    op.create_table(
        "schedule_changes",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("lot_id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("old_start", sa.Date(), nullable=True),
        sa.Column("new_start", sa.Date(), nullable=True),
        sa.Column("old_end", sa.Date(), nullable=True),
        sa.Column("new_end", sa.Date(), nullable=True),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("delay_days", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("affected_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("notified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("changed_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["lot_id"], ["lots.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["task_id"], ["lot_tasks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_schedule_changes_lot", "schedule_changes", ["lot_id", "sequence"], unique=False)

    op.create_table(
        "inspections",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("inspection_type", sa.String(length=64), nullable=False),
        sa.Column("result", _INSPECTION_RESULT, nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'scheduled'")),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(["task_id"], ["lot_tasks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_inspections_task", "inspections", ["task_id"], unique=False)

    op.create_table(
        "working_calendars",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("working_days", sa.String(), nullable=False, server_default=sa.text("'0,1,2,3,4'")),
        sa.Column("default_build_days", sa.Integer(), nullable=False, server_default=sa.text("120")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "holidays",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("calendar_id", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("name", sa.String(), nullable=False, server_default=sa.text("''")),
        sa.ForeignKeyConstraint(["calendar_id"], ["working_calendars.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_holiday_calendar_date", "holidays", ["calendar_id", "date"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.Column("actor", sa.String(length=128), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("entity_type", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(), nullable=False),
        sa.Column("lot_id", sa.String(), nullable=True),
        sa.Column("details_json", sa.Text(), nullable=False, server_default=sa.text("'{}'")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_audit_logs_occurred_at", "audit_logs", ["occurred_at"], unique=False)
    op.create_index("idx_audit_logs_lot", "audit_logs", ["lot_id"], unique=False)
    op.create_index("idx_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_audit_logs_entity", table_name="audit_logs")
    op.drop_index("idx_audit_logs_lot", table_name="audit_logs")
    op.drop_index("idx_audit_logs_occurred_at", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("idx_holiday_calendar_date", table_name="holidays")
    op.drop_table("holidays")
    op.drop_table("working_calendars")
    op.drop_index("idx_inspections_task", table_name="inspections")
    op.drop_table("inspections")
    op.drop_index("idx_schedule_changes_lot", table_name="schedule_changes")
    op.drop_table("schedule_changes")
    op.drop_index("idx_lot_dep_predecessor", table_name="lot_task_dependencies")
    op.drop_index("idx_lot_dep_successor", table_name="lot_task_dependencies")
    op.drop_table("lot_task_dependencies")
    op.drop_index("idx_lot_tasks_subcontractor", table_name="lot_tasks")
    op.drop_index("idx_lot_tasks_lot_id", table_name="lot_tasks")
    op.drop_table("lot_tasks")
    op.drop_index("idx_subcontractors_trade", table_name="subcontractors")
    op.drop_table("subcontractors")
    op.drop_index("idx_lots_status", table_name="lots")
    op.drop_table("lots")

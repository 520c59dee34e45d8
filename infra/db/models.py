# infra/db/models.py
from __future__ import annotations
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    String,
    Date,
    DateTime,
    Float,
    Boolean,
    ForeignKey,
    Enum as SAEnum,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from infra.db.base import Base
from core.domain import (
    DependencyType,
    InspectionResult,
    LotStatus,
    TaskStatus,
    Track,
)


class LotORM(Base):
    __tablename__ = "lots"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    target_completion_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    build_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[LotStatus] = mapped_column(
        SAEnum(LotStatus), default=LotStatus.NOT_STARTED, nullable=False
    )
    # {"permit_issued": true, ...}
    manual_milestones_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

Index("idx_lots_status", LotORM.status)


class SubcontractorORM(Base):
    __tablename__ = "subcontractors"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    trade: Mapped[str] = mapped_column(String(64), nullable=False)
    # comma-separated trade ids, e.g. "plumbing,hvac"
    secondary_trades: Mapped[str] = mapped_column(String, nullable=False, default="")
    max_concurrent_lots: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_preferred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_backup: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    blackout_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")

Index("idx_subcontractors_trade", SubcontractorORM.trade)


class LotTaskORM(Base):
    __tablename__ = "lot_tasks"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    lot_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("lots.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String, nullable=False)
    trade: Mapped[str] = mapped_column(String(64), nullable=False, default="other")
    track: Mapped[Track] = mapped_column(SAEnum(Track), default=Track.FOUNDATION, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scheduled_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    scheduled_end: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    actual_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    actual_end: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        SAEnum(TaskStatus), default=TaskStatus.PENDING, nullable=False
    )
    subcontractor_id: Mapped[Optional[str]] = mapped_column(
        String,
        ForeignKey("subcontractors.id", ondelete="SET NULL"),
        nullable=True,
    )
    blocks_final: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_critical_path: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    requires_inspection: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    inspection_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    phase: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    delay_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    delay_reason: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    delay_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    delay_logged_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    is_buffer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

Index("idx_lot_tasks_lot_id", LotTaskORM.lot_id)
Index("idx_lot_tasks_subcontractor", LotTaskORM.subcontractor_id)


class LotTaskDependencyORM(Base):
    __tablename__ = "lot_task_dependencies"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    successor_task_id: Mapped[str] = mapped_column(
        String, ForeignKey("lot_tasks.id", ondelete="CASCADE"), nullable=False
    )
    predecessor_task_id: Mapped[str] = mapped_column(
        String, ForeignKey("lot_tasks.id", ondelete="CASCADE"), nullable=False
    )
    dependency_type: Mapped[DependencyType] = mapped_column(
        SAEnum(DependencyType), default=DependencyType.FINISH_TO_START, nullable=False
    )
    lag_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

Index("idx_lot_dep_successor", LotTaskDependencyORM.successor_task_id)
Index("idx_lot_dep_predecessor", LotTaskDependencyORM.predecessor_task_id)


class ScheduleChangeORM(Base):
    __tablename__ = "schedule_changes"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    lot_id: Mapped[str] = mapped_column(String, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False)
    task_id: Mapped[str] = mapped_column(String, ForeignKey("lot_tasks.id", ondelete="CASCADE"), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    old_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    new_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    old_end: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    new_end: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    delay_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    affected_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

Index("idx_schedule_changes_lot", ScheduleChangeORM.lot_id, ScheduleChangeORM.sequence)


class InspectionORM(Base):
    __tablename__ = "inspections"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    task_id: Mapped[str] = mapped_column(String, ForeignKey("lot_tasks.id", ondelete="CASCADE"), nullable=False)
    inspection_type: Mapped[str] = mapped_column(String(64), nullable=False)
    result: Mapped[Optional[InspectionResult]] = mapped_column(SAEnum(InspectionResult), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="scheduled")
    scheduled_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

Index("idx_inspections_task", InspectionORM.task_id)


class WorkingCalendarORM(Base):
    __tablename__ = "working_calendars"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # store working days as a comma-separated string, e.g. "0,1,2,3,4"
    working_days: Mapped[str] = mapped_column(String, nullable=False, default="0,1,2,3,4")
    default_build_days: Mapped[int] = mapped_column(Integer, nullable=False, default=120)


class HolidayORM(Base):
    __tablename__ = "holidays"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    calendar_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("working_calendars.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    name: Mapped[str] = mapped_column(String, default="")

Index("idx_holiday_calendar_date", HolidayORM.calendar_id, HolidayORM.date)


class AuditLogORM(Base):
    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    actor: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    lot_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    details_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

Index("idx_audit_logs_occurred_at", AuditLogORM.occurred_at)
Index("idx_audit_logs_lot", AuditLogORM.lot_id)
Index("idx_audit_logs_entity", AuditLogORM.entity_type, AuditLogORM.entity_id)

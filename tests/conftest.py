# tests/conftest.py
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from infra.db.base import Base
from infra.db.repositories import (
    SqlAlchemyAuditLogRepository,
    SqlAlchemyInspectionRepository,
    SqlAlchemyLotRepository,
    SqlAlchemySubcontractorRepository,
    SqlAlchemyWorkingCalendarRepository,
)

from core.domain import (
    DependencyType,
    Lot,
    LotStatus,
    ScheduleTemplate,
    Task,
    TaskDependency,
    TemplateTask,
    Track,
)
from core.services.audit import AuditService
from core.services.lot import LotScheduleService
from core.services.work_calendar import WorkCalendarEngine, WorkCalendarService


# 2024-01-01 is a Monday
MONDAY = date(2024, 1, 1)


@pytest.fixture
def session():
    # separate in-memory DB for tests
    engine = create_engine("sqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def services(session):
    # Recreate what build_service_graph() does, but with the test session
    lot_repo = SqlAlchemyLotRepository(session)
    work_calendar_repo = SqlAlchemyWorkingCalendarRepository(session)
    subcontractor_repo = SqlAlchemySubcontractorRepository(session)
    inspection_repo = SqlAlchemyInspectionRepository(session)
    audit_repo = SqlAlchemyAuditLogRepository(session)

    audit_service = AuditService(session, audit_repo, actor="tester")
    work_calendar_service = WorkCalendarService(session, work_calendar_repo, audit_service=audit_service)
    lot_schedule_service = LotScheduleService(
        session,
        lot_repo,
        subcontractor_repo,
        inspection_repo,
        work_calendar_service,
        audit_service=audit_service,
    )

    return {
        "session": session,
        "lot_repo": lot_repo,
        "subcontractor_repo": subcontractor_repo,
        "audit_service": audit_service,
        "work_calendar_service": work_calendar_service,
        "lot_schedule_service": lot_schedule_service,
    }


@pytest.fixture
def calendar():
    return WorkCalendarEngine()


def fs(key: str, lag: int = 0) -> TaskDependency:
    return TaskDependency.create(key, DependencyType.FINISH_TO_START, lag)


@pytest.fixture
def house_template():
    """
    Small single-family template.

    From a Monday 2024-01-01 start on a Mon-Fri calendar it lays out as:
    Slab Grade 01-01..01-03, Framing 01-04..01-10, Roofing 01-11..01-12,
    Drywall Hang 01-15..01-18, Siding 01-15..01-17, Final Inspection 01-19,
    Punch Complete 01-22..01-23.
    """
    return ScheduleTemplate.create(
        "Plan 1800",
        tasks=(
            TemplateTask("slab", "Slab Grade", trade="concrete", track=Track.FOUNDATION, duration_days=3, sort_order=1),
            TemplateTask(
                "frame",
                "Framing",
                trade="framing",
                track=Track.STRUCTURE,
                duration_days=5,
                sort_order=2,
                dependencies=(fs("slab"),),
            ),
            TemplateTask(
                "roof",
                "Roofing",
                trade="roofing",
                track=Track.STRUCTURE,
                duration_days=2,
                sort_order=3,
                dependencies=(fs("frame"),),
            ),
            TemplateTask(
                "drywall",
                "Drywall Hang",
                trade="drywall",
                track=Track.INTERIOR,
                duration_days=4,
                sort_order=4,
                dependencies=(fs("roof"),),
            ),
            TemplateTask(
                "siding",
                "Siding",
                trade="siding",
                track=Track.EXTERIOR,
                duration_days=3,
                sort_order=5,
                dependencies=(fs("roof"),),
            ),
            TemplateTask("final", "Final Inspection", trade="inspection", track=Track.FINAL, duration_days=1, sort_order=6),
            TemplateTask("punch", "Punch Complete", trade="general", track=Track.FINAL, duration_days=2, sort_order=7),
        ),
    )


@pytest.fixture
def make_task():
    def _make(name: str, start: date, end: date, **extra) -> Task:
        extra.setdefault("duration_days", 1)
        return Task(
            id=extra.pop("id", name.lower().replace(" ", "-")),
            lot_id=extra.pop("lot_id", "lot-1"),
            name=name,
            scheduled_start=start,
            scheduled_end=end,
            **extra,
        )

    return _make


@pytest.fixture
def make_lot():
    def _make(*tasks: Task, **extra) -> Lot:
        extra.setdefault("status", LotStatus.IN_PROGRESS)
        lot_id = extra.pop("id", tasks[0].lot_id if tasks else "lot-1")
        return Lot(id=lot_id, name=extra.pop("name", lot_id), tasks=tuple(tasks), **extra)

    return _make

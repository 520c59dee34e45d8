from infra.db.calendar.repository import SqlAlchemyWorkingCalendarRepository

__all__ = ["SqlAlchemyWorkingCalendarRepository"]

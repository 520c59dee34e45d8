from infra.db.inspection.repository import SqlAlchemyInspectionRepository

__all__ = ["SqlAlchemyInspectionRepository"]

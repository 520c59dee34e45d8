from infra.db.subcontractor.repository import SqlAlchemySubcontractorRepository

__all__ = ["SqlAlchemySubcontractorRepository"]

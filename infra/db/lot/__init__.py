from infra.db.lot.repository import SqlAlchemyLotRepository

__all__ = ["SqlAlchemyLotRepository"]

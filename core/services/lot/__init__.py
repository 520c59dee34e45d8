from core.services.lot.models import LotSummary
from core.services.lot.service import LotScheduleService

__all__ = ["LotScheduleService", "LotSummary"]

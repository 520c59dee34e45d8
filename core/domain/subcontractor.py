from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.domain.identifiers import generate_id


@dataclass(frozen=True)
class BlackoutPeriod:
    start: date
    end: date

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class Subcontractor:
    id: str
    name: str
    trade: str
    max_concurrent_lots: Optional[int] = 1
    secondary_trades: tuple[str, ...] = ()
    is_active: bool = True
    is_preferred: bool = False
    is_backup: bool = False
    rating: float = 0.0
    blackout_periods: tuple[BlackoutPeriod, ...] = ()

    @staticmethod
    def create(name: str, trade: str, **extra) -> "Subcontractor":
        return Subcontractor(id=generate_id(), name=name, trade=trade, **extra)

    def covers_trade(self, trade: str) -> bool:
        return self.trade == trade or trade in self.secondary_trades

    def is_available_on(self, day: date) -> bool:
        return not any(period.covers(day) for period in self.blackout_periods)


__all__ = ["BlackoutPeriod", "Subcontractor"]

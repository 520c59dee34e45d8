# core/interfaces.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from core.domain import (
    AuditLogEntry,
    Holiday,
    Inspection,
    Lot,
    LotStatus,
    Subcontractor,
    WorkingCalendar,
)


class LotRepository(ABC):
    @abstractmethod
    def add(self, lot: Lot) -> None: ...

    @abstractmethod
    def update(self, lot: Lot, *, expected_version: int) -> None: ...

    @abstractmethod
    def get(self, lot_id: str) -> Optional[Lot]: ...

    @abstractmethod
    def list_all(self, status: Optional[LotStatus] = None) -> List[Lot]: ...

    @abstractmethod
    def delete(self, lot_id: str) -> None: ...


class WorkingCalendarRepository(ABC):
    @abstractmethod
    def get(self, calendar_id: str) -> Optional[WorkingCalendar]: ...

    @abstractmethod
    def get_default(self) -> Optional[WorkingCalendar]: ...

    @abstractmethod
    def upsert(self, calendar: WorkingCalendar) -> None: ...

    @abstractmethod
    def list_holidays(self, calendar_id: str) -> List[Holiday]: ...

    @abstractmethod
    def add_holiday(self, holiday: Holiday) -> None: ...

    @abstractmethod
    def delete_holiday(self, holiday_id: str) -> None: ...


class SubcontractorRepository(ABC):
    @abstractmethod
    def add(self, subcontractor: Subcontractor) -> None: ...

    @abstractmethod
    def update(self, subcontractor: Subcontractor) -> None: ...

    @abstractmethod
    def get(self, subcontractor_id: str) -> Optional[Subcontractor]: ...

    @abstractmethod
    def list_all(self, *, active_only: bool = False) -> List[Subcontractor]: ...


class InspectionRepository(ABC):
    @abstractmethod
    def add(self, inspection: Inspection) -> None: ...

    @abstractmethod
    def update(self, inspection: Inspection) -> None: ...

    @abstractmethod
    def get(self, inspection_id: str) -> Optional[Inspection]: ...

    @abstractmethod
    def list_by_tasks(self, task_ids: List[str]) -> List[Inspection]: ...


class AuditLogRepository(ABC):
    @abstractmethod
    def add(self, entry: AuditLogEntry) -> None: ...

    @abstractmethod
    def list_recent(
        self,
        limit: int = 200,
        *,
        lot_id: str | None = None,
        entity_type: str | None = None,
    ) -> List[AuditLogEntry]: ...

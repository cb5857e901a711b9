from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import EntryStatus
from .model import TimeEntry, TimeEntryRow


class TimeEntryRepository(Protocol):
    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def list_for_student(self, student_id: int, *, on_date: Optional[date] = None) -> Sequence[TimeEntry]:
        """Newest first."""
        raise NotImplementedError

    def list_rows(
        self,
        *,
        student_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        status: Optional[EntryStatus] = None,
    ) -> Sequence[TimeEntryRow]:
        """Joined rows, newest date first."""
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: int,
        entry_date: date,
        start_time: time,
        end_time: time,
        total_hours: Decimal,
        project_id: int,
        task_id: int,
        description: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        entry_id: int,
        *,
        entry_date: date,
        start_time: time,
        end_time: time,
        total_hours: Decimal,
        description: Optional[str],
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def set_status(self, entry_id: int, status: EntryStatus, *, updated_at: datetime) -> bool:
        raise NotImplementedError

    def delete_by_id(self, entry_id: int) -> bool:
        raise NotImplementedError

    def delete_for_student(self, student_id: int) -> int:
        raise NotImplementedError

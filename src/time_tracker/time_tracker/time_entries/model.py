from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ..core.enums import EntryStatus


@dataclass(frozen=True)
class TimeEntry:
    id: int
    student_id: int
    date: date
    start_time: time
    end_time: time
    total_hours: Decimal
    project_id: Optional[int]
    task_id: Optional[int]
    description: Optional[str] = None
    status: EntryStatus = EntryStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == EntryStatus.PENDING


@dataclass(frozen=True)
class TimeEntryRow:
    """An entry joined with the names the screens and exports need."""

    entry: TimeEntry
    student_name: str
    student_email: str
    project_name: Optional[str] = None
    task_title: Optional[str] = None

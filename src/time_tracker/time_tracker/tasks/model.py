from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Task:
    id: int
    title: str
    project_id: Optional[int]
    description: Optional[str] = None
    assigned_by: Optional[int] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    assigned_student_ids: Tuple[int, ...] = field(default_factory=tuple)

    def is_overdue(self, today: date) -> bool:
        if self.due_date is None or self.status == TaskStatus.COMPLETED:
            return False
        return self.due_date < today

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import TaskPriority, TaskStatus
from .model import Task


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Task]:
        """Newest first, with assigned student ids filled in."""
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[Task]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        project_id: int,
        assigned_by: Optional[int],
        priority: TaskPriority,
        due_date: Optional[date],
    ) -> int:
        raise NotImplementedError

    def assign_students(self, task_id: int, student_ids: Sequence[int]) -> None:
        raise NotImplementedError

    def is_assigned(self, task_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def update_status(self, task_id: int, status: TaskStatus) -> bool:
        raise NotImplementedError

    def delete_by_id(self, task_id: int) -> bool:
        raise NotImplementedError

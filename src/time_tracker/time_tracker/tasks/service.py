from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

from ..common.datetime_utils import parse_optional_date
from ..core.enums import Role, TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..projects.model import Project
from .model import Task
from .repository import TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectTaskGroup:
    project: Optional[Project]
    tasks: List[Task]


def group_by_project(tasks: Iterable[Task], projects: Sequence[Project]) -> List[ProjectTaskGroup]:
    """Group tasks under their project; tasks with an unknown project go last."""
    tasks = list(tasks)
    groups = [ProjectTaskGroup(project=p, tasks=[t for t in tasks if t.project_id == p.id]) for p in projects]
    known = {p.id for p in projects}
    orphans = [t for t in tasks if t.project_id not in known]
    result = [g for g in groups if g.tasks]
    if orphans:
        result.append(ProjectTaskGroup(project=None, tasks=orphans))
    return result


class TaskService:
    def __init__(self, tasks: TaskRepository):
        self._tasks = tasks

    def list_tasks(self) -> Sequence[Task]:
        return self._tasks.list_all()

    def list_for_student(self, student_id: int) -> Sequence[Task]:
        return self._tasks.list_for_student(int(student_id))

    def create_task(
        self,
        *,
        current_role: Role,
        assigned_by: Optional[int],
        title: str,
        description: str = "",
        project_id: Optional[int],
        student_ids: Sequence[int],
        priority: str = TaskPriority.MEDIUM.value,
        due_date: str = "",
    ) -> int:
        """Insert the task, then its assignments.

        Two separate writes: if the assignment insert fails the task row stays.
        """
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to manage tasks")

        title = (title or "").strip()
        student_ids = [int(s) for s in student_ids or []]
        if not title or not project_id or not student_ids:
            raise ValidationError(
                "Please fill in the title, choose a project and assign at least one student"
            )
        try:
            prio = TaskPriority(priority or TaskPriority.MEDIUM.value)
        except ValueError:
            raise ValidationError("Invalid priority")

        task_id = self._tasks.create(
            title=title,
            description=(description or "").strip() or None,
            project_id=int(project_id),
            assigned_by=assigned_by,
            priority=prio,
            due_date=parse_optional_date(due_date, "Due date"),
        )
        self._tasks.assign_students(task_id, student_ids)
        logger.info("Task %s created with %d assignment(s)", task_id, len(student_ids))
        return task_id

    def update_status(self, *, current_role: Role, task_id: int, status: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to manage tasks")
        try:
            new_status = TaskStatus(status)
        except ValueError:
            raise ValidationError("Invalid task status")
        if not self._tasks.update_status(int(task_id), new_status):
            raise NotFoundError("Task not found")

    def delete_task(self, *, current_role: Role, task_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to manage tasks")
        if not self._tasks.delete_by_id(int(task_id)):
            raise NotFoundError("Task not found")
        logger.info("Task %s deleted", task_id)

    @staticmethod
    def overdue_ids(tasks: Iterable[Task], today: date) -> set:
        return {t.id for t in tasks if t.is_overdue(today)}

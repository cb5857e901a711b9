from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..common.hours import get_total_hours
from ..core.enums import EntryStatus, Role, TaskStatus
from ..projects.repository import ProjectRepository
from ..tasks.repository import TaskRepository
from ..time_entries.repository import TimeEntryRepository
from ..users.repository import StudentRepository


@dataclass(frozen=True)
class DashboardStats:
    students: int
    projects: int
    tasks: int
    total_hours: Decimal
    pending_entries: int
    pending_tasks: int


class DashboardService:
    def __init__(
        self,
        students: StudentRepository,
        projects: ProjectRepository,
        tasks: TaskRepository,
        entries: TimeEntryRepository,
    ):
        self._students = students
        self._projects = projects
        self._tasks = tasks
        self._entries = entries

    def stats(self) -> DashboardStats:
        tasks = self._tasks.list_all()
        entries = [r.entry for r in self._entries.list_rows()]
        return DashboardStats(
            students=len(self._students.list_by_role(Role.STUDENT)),
            projects=len(self._projects.list_all()),
            tasks=len(tasks),
            total_hours=get_total_hours(entries),
            pending_entries=sum(1 for e in entries if e.status == EntryStatus.PENDING),
            pending_tasks=sum(1 for t in tasks if t.status == TaskStatus.PENDING),
        )

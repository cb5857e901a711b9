"""In-memory repositories and a container wired on top of them."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, Sequence

from werkzeug.security import generate_password_hash

from src.time_tracker.time_tracker.auth.model import AuthUser
from src.time_tracker.time_tracker.container import Container, wire_services
from src.time_tracker.time_tracker.core.enums import AccountStatus, EntryStatus, Role, TaskPriority, TaskStatus
from src.time_tracker.time_tracker.mail.sender import EmailMessage, SendResult
from src.time_tracker.time_tracker.projects.model import Project
from src.time_tracker.time_tracker.projects.repository import DuplicateNameError
from src.time_tracker.time_tracker.settings.model import AppSetting
from src.time_tracker.time_tracker.tasks.model import Task
from src.time_tracker.time_tracker.time_entries.model import TimeEntry, TimeEntryRow
from src.time_tracker.time_tracker.users.model import Student


class InMemoryStudents:
    def __init__(self):
        self.rows: dict[int, Student] = {}
        self._id = 0

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.rows.get(student_id)

    def get_by_email(self, email: str) -> Optional[Student]:
        return next((s for s in self.rows.values() if s.email == email.lower()), None)

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Student]:
        return next((s for s in self.rows.values() if s.auth_user_id == auth_user_id), None)

    def list_all(self) -> Sequence[Student]:
        return sorted(self.rows.values(), key=lambda s: s.name)

    def list_by_role(self, role: Role) -> Sequence[Student]:
        return [s for s in self.list_all() if s.role == role]

    def create(self, *, auth_user_id, email, name, role, first_login=True) -> int:
        self._id += 1
        self.rows[self._id] = Student(
            id=self._id, auth_user_id=auth_user_id, email=email, name=name, role=role, first_login=first_login
        )
        return self._id

    def _patch(self, student_id: int, **changes) -> bool:
        if student_id not in self.rows:
            return False
        self.rows[student_id] = replace(self.rows[student_id], **changes)
        return True

    def set_role(self, student_id: int, role: Role) -> bool:
        return self._patch(student_id, role=role)

    def set_status(self, student_id: int, status: AccountStatus) -> bool:
        return self._patch(student_id, status=status)

    def set_first_login(self, student_id: int, first_login: bool) -> bool:
        return self._patch(student_id, first_login=first_login)

    def delete_by_id(self, student_id: int) -> bool:
        return self.rows.pop(student_id, None) is not None


class InMemoryAuthUsers:
    def __init__(self):
        self.rows: dict[str, AuthUser] = {}
        self.sign_ins: list[str] = []

    def get_by_id(self, user_id: str) -> Optional[AuthUser]:
        return self.rows.get(user_id)

    def get_by_email(self, email: str) -> Optional[AuthUser]:
        return next((u for u in self.rows.values() if u.email == email.lower()), None)

    def create(self, *, user_id, email, password_hash, email_confirmed) -> None:
        self.rows[user_id] = AuthUser(
            id=user_id, email=email, password_hash=password_hash, email_confirmed=email_confirmed
        )

    def update_password_hash(self, user_id: str, password_hash: str) -> bool:
        if user_id not in self.rows:
            return False
        self.rows[user_id] = replace(self.rows[user_id], password_hash=password_hash)
        return True

    def touch_last_sign_in(self, user_id: str) -> None:
        self.sign_ins.append(user_id)

    def delete(self, user_id: str) -> bool:
        return self.rows.pop(user_id, None) is not None


class InMemoryProjects:
    def __init__(self):
        self.rows: dict[int, Project] = {}
        self.calls: list[str] = []
        self._id = 0

    def get_by_id(self, project_id: int) -> Optional[Project]:
        self.calls.append("get_by_id")
        return self.rows.get(project_id)

    def list_all(self) -> Sequence[Project]:
        self.calls.append("list_all")
        return sorted(self.rows.values(), key=lambda p: p.name)

    def create(self, *, name, description, color, created_by) -> int:
        self.calls.append("create")
        if any(p.name == name for p in self.rows.values()):
            raise DuplicateNameError(name)
        self._id += 1
        self.rows[self._id] = Project(
            id=self._id, name=name, description=description, color=color, created_by=created_by
        )
        return self._id

    def update(self, project_id: int, *, name, description, color) -> bool:
        self.calls.append("update")
        if project_id not in self.rows:
            return False
        if any(p.name == name and p.id != project_id for p in self.rows.values()):
            raise DuplicateNameError(name)
        self.rows[project_id] = replace(self.rows[project_id], name=name, description=description, color=color)
        return True

    def delete_by_id(self, project_id: int) -> bool:
        self.calls.append("delete_by_id")
        return self.rows.pop(project_id, None) is not None


class InMemoryTasks:
    def __init__(self):
        self.rows: dict[int, Task] = {}
        self._id = 0

    def get_by_id(self, task_id: int) -> Optional[Task]:
        return self.rows.get(task_id)

    def list_all(self) -> Sequence[Task]:
        return sorted(self.rows.values(), key=lambda t: t.id, reverse=True)

    def list_for_student(self, student_id: int) -> Sequence[Task]:
        return [t for t in self.list_all() if student_id in t.assigned_student_ids]

    def create(self, *, title, description, project_id, assigned_by, priority: TaskPriority, due_date) -> int:
        self._id += 1
        self.rows[self._id] = Task(
            id=self._id,
            title=title,
            project_id=project_id,
            description=description,
            assigned_by=assigned_by,
            priority=priority,
            due_date=due_date,
        )
        return self._id

    def assign_students(self, task_id: int, student_ids: Sequence[int]) -> None:
        task = self.rows[task_id]
        ids = tuple(dict.fromkeys(task.assigned_student_ids + tuple(student_ids)))
        self.rows[task_id] = replace(task, assigned_student_ids=ids)

    def is_assigned(self, task_id: int, student_id: int) -> bool:
        task = self.rows.get(task_id)
        return bool(task and student_id in task.assigned_student_ids)

    def update_status(self, task_id: int, status: TaskStatus) -> bool:
        if task_id not in self.rows:
            return False
        self.rows[task_id] = replace(self.rows[task_id], status=status)
        return True

    def delete_by_id(self, task_id: int) -> bool:
        return self.rows.pop(task_id, None) is not None


class InMemoryEntries:
    def __init__(self, students: InMemoryStudents, projects: InMemoryProjects, tasks: InMemoryTasks):
        self.rows: dict[int, TimeEntry] = {}
        self._students = students
        self._projects = projects
        self._tasks = tasks
        self._id = 0

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        return self.rows.get(entry_id)

    def list_for_student(self, student_id: int, *, on_date: Optional[date] = None) -> Sequence[TimeEntry]:
        items = [e for e in self.rows.values() if e.student_id == student_id and (on_date is None or e.date == on_date)]
        return sorted(items, key=lambda e: (e.date, e.start_time), reverse=True)

    def list_rows(self, *, student_id=None, date_from=None, date_to=None, status=None) -> Sequence[TimeEntryRow]:
        rows = []
        for e in sorted(self.rows.values(), key=lambda e: (e.date, e.start_time), reverse=True):
            if student_id is not None and e.student_id != student_id:
                continue
            if date_from is not None and e.date < date_from:
                continue
            if date_to is not None and e.date > date_to:
                continue
            if status is not None and e.status != status:
                continue
            student = self._students.rows.get(e.student_id)
            project = self._projects.rows.get(e.project_id)
            task = self._tasks.rows.get(e.task_id)
            rows.append(
                TimeEntryRow(
                    entry=e,
                    student_name=student.name if student else "",
                    student_email=student.email if student else "",
                    project_name=project.name if project else None,
                    task_title=task.title if task else None,
                )
            )
        return rows

    def create(self, *, student_id, entry_date, start_time, end_time, total_hours, project_id, task_id, description) -> int:
        self._id += 1
        self.rows[self._id] = TimeEntry(
            id=self._id,
            student_id=student_id,
            date=entry_date,
            start_time=start_time,
            end_time=end_time,
            total_hours=total_hours,
            project_id=project_id,
            task_id=task_id,
            description=description,
        )
        return self._id

    def update(self, entry_id, *, entry_date, start_time, end_time, total_hours, description, updated_at) -> bool:
        if entry_id not in self.rows:
            return False
        self.rows[entry_id] = replace(
            self.rows[entry_id],
            date=entry_date,
            start_time=start_time,
            end_time=end_time,
            total_hours=total_hours,
            description=description,
            updated_at=updated_at,
        )
        return True

    def set_status(self, entry_id: int, status: EntryStatus, *, updated_at: datetime) -> bool:
        if entry_id not in self.rows:
            return False
        self.rows[entry_id] = replace(self.rows[entry_id], status=status, updated_at=updated_at)
        return True

    def delete_by_id(self, entry_id: int) -> bool:
        return self.rows.pop(entry_id, None) is not None

    def delete_for_student(self, student_id: int) -> int:
        ids = [i for i, e in self.rows.items() if e.student_id == student_id]
        for i in ids:
            del self.rows[i]
        return len(ids)

    def add(self, *, student_id, day, start, end, hours, status=EntryStatus.PENDING, project_id=1, task_id=1) -> int:
        entry_id = self.create(
            student_id=student_id,
            entry_date=day,
            start_time=start,
            end_time=end,
            total_hours=Decimal(hours),
            project_id=project_id,
            task_id=task_id,
            description=None,
        )
        if status != EntryStatus.PENDING:
            self.rows[entry_id] = replace(self.rows[entry_id], status=status)
        return entry_id


class InMemorySettings:
    def __init__(self):
        self.rows: dict[str, AppSetting] = {}

    def list_all(self) -> Sequence[AppSetting]:
        return sorted(self.rows.values(), key=lambda s: s.key)

    def get(self, key: str) -> Optional[AppSetting]:
        return self.rows.get(key)

    def save(self, key: str, value: str, *, updated_by, updated_at) -> None:
        self.rows[key] = AppSetting(key=key, value=value, updated_by=updated_by, updated_at=updated_at)


class BrokenSettings(InMemorySettings):
    def get(self, key: str) -> Optional[AppSetting]:
        raise RuntimeError("backend unavailable")


class RecordingMailer:
    """Mailer that records messages and fails for chosen addresses."""

    def __init__(self, fail_for: Sequence[str] = (), error: str = "Resend rejected the request"):
        self.sent: list[EmailMessage] = []
        self.fail_for = {a.lower() for a in fail_for}
        self.error = error

    def send(self, message: EmailMessage) -> SendResult:
        if message.to.lower() in self.fail_for:
            return SendResult(ok=False, error=self.error)
        self.sent.append(message)
        return SendResult(ok=True)


def build_test_container(tmp_path, *, mailer=None, settings_repo=None, **overrides) -> Container:
    students = InMemoryStudents()
    projects = InMemoryProjects()
    tasks = InMemoryTasks()
    settings = {
        "SECRET_KEY": "test-secret",
        "APP_BASE_URL": "http://testserver",
        "EMAIL_SEND_DELAY_SECONDS": 0,
        "DATA_DIR": str(tmp_path),
        "LONG_DAY_HOURS": 16,
    }
    settings.update(overrides)
    return wire_services(
        conn=None,
        students_repo=students,
        auth_users_repo=InMemoryAuthUsers(),
        projects_repo=projects,
        tasks_repo=tasks,
        entries_repo=InMemoryEntries(students, projects, tasks),
        settings_repo=settings_repo or InMemorySettings(),
        mailer=mailer or RecordingMailer(),
        settings=settings,
        sleep=lambda _s: None,
    )


def add_account(container: Container, *, email: str, password: str, name: str, role: Role, first_login=False) -> Student:
    """Insert an auth user plus profile directly, bypassing sign-up rules."""
    user_id = f"uid-{email}"
    container.auth_users_repo.create(
        user_id=user_id,
        email=email,
        password_hash=generate_password_hash(password),
        email_confirmed=True,
    )
    student_id = container.students_repo.create(
        auth_user_id=user_id, email=email, name=name, role=role, first_login=first_login
    )
    return container.students_repo.get_by_id(student_id)


def add_project_with_task(container: Container, *, student_id: int, project="Website", task="Landing page"):
    project_id = container.projects_repo.create(name=project, description=None, color="#667eea", created_by=None)
    task_id = container.tasks_repo.create(
        title=task,
        description=None,
        project_id=project_id,
        assigned_by=None,
        priority=TaskPriority.MEDIUM,
        due_date=None,
    )
    container.tasks_repo.assign_students(task_id, [student_id])
    return project_id, task_id


def clock(value: str) -> time:
    h, m = value.split(":")
    return time(int(h), int(m))

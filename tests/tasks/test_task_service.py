from datetime import date

import pytest

from src.time_tracker.time_tracker.core.enums import Role, TaskPriority, TaskStatus
from src.time_tracker.time_tracker.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.time_tracker.time_tracker.projects.model import Project
from src.time_tracker.time_tracker.tasks.model import Task
from src.time_tracker.time_tracker.tasks.service import TaskService, group_by_project
from tests.fakes import InMemoryTasks


def make():
    repo = InMemoryTasks()
    return TaskService(repo), repo


def test_create_task_with_assignments():
    service, repo = make()
    task_id = service.create_task(
        current_role=Role.ADMIN,
        assigned_by=1,
        title=" Landing page ",
        project_id=3,
        student_ids=["5", 6],
        priority="high",
        due_date="2025-04-01",
    )
    task = repo.get_by_id(task_id)
    assert task.title == "Landing page"
    assert task.priority == TaskPriority.HIGH
    assert task.due_date == date(2025, 4, 1)
    assert task.assigned_student_ids == (5, 6)


@pytest.mark.parametrize(
    "title, project_id, student_ids",
    [("", 1, [1]), ("Task", None, [1]), ("Task", 1, [])],
)
def test_title_project_and_students_required(title, project_id, student_ids):
    service, repo = make()
    with pytest.raises(ValidationError):
        service.create_task(
            current_role=Role.ADMIN, assigned_by=1, title=title, project_id=project_id, student_ids=student_ids
        )
    assert repo.rows == {}


def test_invalid_due_date():
    service, _ = make()
    with pytest.raises(ValidationError):
        service.create_task(
            current_role=Role.ADMIN, assigned_by=1, title="T", project_id=1, student_ids=[1], due_date="soon"
        )


def test_only_admin_manages_tasks():
    service, _ = make()
    with pytest.raises(AuthorizationError):
        service.create_task(current_role=Role.STUDENT, assigned_by=1, title="T", project_id=1, student_ids=[1])
    with pytest.raises(AuthorizationError):
        service.delete_task(current_role=Role.HR, task_id=1)


def test_update_status_and_delete():
    service, repo = make()
    task_id = service.create_task(current_role=Role.ADMIN, assigned_by=1, title="T", project_id=1, student_ids=[1])
    service.update_status(current_role=Role.ADMIN, task_id=task_id, status="in_progress")
    assert repo.get_by_id(task_id).status == TaskStatus.IN_PROGRESS

    with pytest.raises(ValidationError):
        service.update_status(current_role=Role.ADMIN, task_id=task_id, status="done")

    service.delete_task(current_role=Role.ADMIN, task_id=task_id)
    with pytest.raises(NotFoundError):
        service.delete_task(current_role=Role.ADMIN, task_id=task_id)


def test_overdue_excludes_completed_and_undated():
    today = date(2025, 3, 14)
    tasks = [
        Task(id=1, title="late", project_id=1, due_date=date(2025, 3, 13)),
        Task(id=2, title="done", project_id=1, due_date=date(2025, 3, 1), status=TaskStatus.COMPLETED),
        Task(id=3, title="today", project_id=1, due_date=today),
        Task(id=4, title="open", project_id=1),
    ]
    assert TaskService.overdue_ids(tasks, today) == {1}


def test_group_by_project_keeps_project_order_and_orphans_last():
    projects = [Project(id=1, name="Alpha"), Project(id=2, name="Beta"), Project(id=3, name="Empty")]
    tasks = (t for t in [
        Task(id=3, title="b", project_id=2),
        Task(id=2, title="x", project_id=99),
        Task(id=1, title="a", project_id=1),
    ])
    groups = group_by_project(tasks, projects)
    assert [g.project.name if g.project else None for g in groups] == ["Alpha", "Beta", None]
    assert [t.id for t in groups[2].tasks] == [2]

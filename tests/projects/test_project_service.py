import pytest

from src.time_tracker.time_tracker.core.enums import Role
from src.time_tracker.time_tracker.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.time_tracker.time_tracker.projects.service import ProjectService
from tests.fakes import InMemoryProjects


def make():
    repo = InMemoryProjects()
    return ProjectService(repo), repo


@pytest.mark.parametrize("name", ["General", "allgemein", "  ALLGEMEIN  ", "general"])
def test_protected_project_refused_without_backend_call(name):
    service, repo = make()
    with pytest.raises(ValidationError):
        service.delete_project(current_role=Role.ADMIN, project_id=1, name=name)
    assert repo.calls == []


def test_protected_name_rechecked_against_stored_row():
    service, repo = make()
    project_id = repo.create(name="Allgemein", description=None, color="#667eea", created_by=None)
    with pytest.raises(ValidationError):
        service.delete_project(current_role=Role.ADMIN, project_id=project_id, name="Renamed in form")
    assert project_id in repo.rows


def test_create_update_delete():
    service, repo = make()
    project_id = service.create_project(current_role=Role.ADMIN, created_by=1, name="  Website ", color="")
    assert repo.rows[project_id].name == "Website"
    assert repo.rows[project_id].color == "#667eea"

    service.update_project(current_role=Role.ADMIN, project_id=project_id, name="Shop", description="new")
    assert repo.rows[project_id].description == "new"

    service.delete_project(current_role=Role.ADMIN, project_id=project_id, name="Shop")
    assert repo.rows == {}


def test_duplicate_name_reported():
    service, _ = make()
    service.create_project(current_role=Role.ADMIN, created_by=1, name="Website")
    with pytest.raises(ValidationError, match="already exists"):
        service.create_project(current_role=Role.ADMIN, created_by=1, name="Website")


def test_name_required():
    service, repo = make()
    with pytest.raises(ValidationError):
        service.create_project(current_role=Role.ADMIN, created_by=1, name="   ")
    assert repo.calls == []


def test_only_admin_manages_projects():
    service, _ = make()
    with pytest.raises(AuthorizationError):
        service.create_project(current_role=Role.HR, created_by=1, name="Website")


def test_missing_project():
    service, _ = make()
    with pytest.raises(NotFoundError):
        service.update_project(current_role=Role.ADMIN, project_id=99, name="X")
    with pytest.raises(NotFoundError):
        service.delete_project(current_role=Role.ADMIN, project_id=99, name="X")

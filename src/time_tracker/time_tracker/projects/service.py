from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import DEFAULT_PROJECT_COLOR, Project, is_protected_project_name
from .repository import DuplicateNameError, ProjectRepository

logger = logging.getLogger(__name__)


def _require_admin(current_role: Role) -> None:
    if current_role != Role.ADMIN:
        raise AuthorizationError("You do not have permission to manage projects")


class ProjectService:
    def __init__(self, projects: ProjectRepository):
        self._projects = projects

    def list_projects(self) -> Sequence[Project]:
        return self._projects.list_all()

    def create_project(
        self,
        *,
        current_role: Role,
        created_by: Optional[int],
        name: str,
        description: str = "",
        color: str = DEFAULT_PROJECT_COLOR,
    ) -> int:
        _require_admin(current_role)
        name = require_non_empty(name, "Project name")
        try:
            project_id = self._projects.create(
                name=name,
                description=(description or "").strip() or None,
                color=(color or "").strip() or DEFAULT_PROJECT_COLOR,
                created_by=created_by,
            )
        except DuplicateNameError:
            raise ValidationError("A project with this name already exists")
        logger.info("Project %s created (%s)", project_id, name)
        return project_id

    def update_project(
        self,
        *,
        current_role: Role,
        project_id: int,
        name: str,
        description: str = "",
        color: str = DEFAULT_PROJECT_COLOR,
    ) -> None:
        _require_admin(current_role)
        name = require_non_empty(name, "Project name")
        try:
            ok = self._projects.update(
                int(project_id),
                name=name,
                description=(description or "").strip() or None,
                color=(color or "").strip() or DEFAULT_PROJECT_COLOR,
            )
        except DuplicateNameError:
            raise ValidationError("A project with this name already exists")
        if not ok:
            raise NotFoundError("Project not found")

    def delete_project(self, *, current_role: Role, project_id: int, name: str) -> None:
        """Delete a project; the general project is refused before any lookup."""
        _require_admin(current_role)
        if is_protected_project_name(name):
            raise ValidationError(f'The project "{name.strip()}" cannot be deleted')

        project = self._projects.get_by_id(int(project_id))
        if project is None:
            raise NotFoundError("Project not found")
        if project.is_protected:
            raise ValidationError(f'The project "{project.name}" cannot be deleted')

        if not self._projects.delete_by_id(project.id):
            raise NotFoundError("Project not found")
        logger.info("Project %s deleted", project_id)

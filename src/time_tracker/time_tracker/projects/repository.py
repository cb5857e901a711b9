from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Project


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Project]:
        """Ordered by name."""
        raise NotImplementedError

    def create(self, *, name: str, description: Optional[str], color: str, created_by: Optional[int]) -> int:
        """Raise ``DuplicateNameError`` when the name is taken."""
        raise NotImplementedError

    def update(self, project_id: int, *, name: str, description: Optional[str], color: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, project_id: int) -> bool:
        raise NotImplementedError


class DuplicateNameError(Exception):
    pass

from __future__ import annotations

from typing import Optional, Sequence

from mysql.connector import Error as MySQLError

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_entry
from .model import DEFAULT_PROJECT_COLOR, Project
from .repository import DuplicateNameError, ProjectRepository

_COLUMNS = "id, name, description, color, created_by, created_at, updated_at"


def _to_project(row: dict) -> Project:
    return Project(
        id=int(row["id"]),
        name=row["name"],
        description=row.get("description"),
        color=row.get("color") or DEFAULT_PROJECT_COLOR,
        created_by=row.get("created_by"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM projects WHERE id=%s", (int(project_id),))
            row = fetchone(cur)
            return _to_project(row) if row else None

    def list_all(self) -> Sequence[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM projects ORDER BY name")
            return [_to_project(r) for r in fetchall(cur)]

    def create(self, *, name: str, description: Optional[str], color: str, created_by: Optional[int]) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO projects(name, description, color, created_by) VALUES(%s,%s,%s,%s)",
                    (name, description, color, created_by),
                )
                return int(cur.lastrowid)
        except MySQLError as e:
            if is_duplicate_entry(e):
                raise DuplicateNameError(name) from e
            raise

    def update(self, project_id: int, *, name: str, description: Optional[str], color: str) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE projects SET name=%s, description=%s, color=%s, updated_at=NOW() WHERE id=%s",
                    (name, description, color, int(project_id)),
                )
                return cur.rowcount > 0
        except MySQLError as e:
            if is_duplicate_entry(e):
                raise DuplicateNameError(name) from e
            raise

    def delete_by_id(self, project_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM projects WHERE id=%s", (int(project_id),))
            return cur.rowcount > 0

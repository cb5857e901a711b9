from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AccountStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = "id, auth_user_id, email, name, role, first_login, status, created_at"


def _to_student(row: dict) -> Student:
    return Student(
        id=int(row["id"]),
        auth_user_id=row.get("auth_user_id"),
        email=row["email"],
        name=row["name"],
        role=Role(row["role"]),
        first_login=as_bool(row.get("first_login")),
        status=AccountStatus(row.get("status") or AccountStatus.ACTIVE.value),
        created_at=row.get("created_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._get_one("id", int(student_id))

    def get_by_email(self, email: str) -> Optional[Student]:
        return self._get_one("email", email)

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Student]:
        return self._get_one("auth_user_id", auth_user_id)

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY id")
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_role(self, role: Role) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE role=%s ORDER BY name", (role.value,))
            return [_to_student(r) for r in fetchall(cur)]

    def create(self, *, auth_user_id: Optional[str], email: str, name: str, role: Role, first_login: bool = True) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(auth_user_id, email, name, role, first_login, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (auth_user_id, email, name, role.value, int(first_login), AccountStatus.ACTIVE.value),
            )
            return int(cur.lastrowid)

    def set_role(self, student_id: int, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET role=%s WHERE id=%s", (role.value, int(student_id)))
            return cur.rowcount > 0

    def set_status(self, student_id: int, status: AccountStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET status=%s WHERE id=%s", (status.value, int(student_id)))
            return cur.rowcount > 0

    def set_first_login(self, student_id: int, first_login: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET first_login=%s WHERE id=%s", (int(first_login), int(student_id)))
            return cur.rowcount > 0

    def delete_by_id(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE id=%s", (int(student_id),))
            return cur.rowcount > 0

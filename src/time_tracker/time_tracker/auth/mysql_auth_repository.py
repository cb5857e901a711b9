from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchone
from .model import AuthUser
from .repository import AuthUserRepository

_COLUMNS = "id, email, password_hash, email_confirmed, last_sign_in_at, created_at"


def _to_auth_user(row: dict) -> AuthUser:
    return AuthUser(
        id=str(row["id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        email_confirmed=as_bool(row.get("email_confirmed")),
        last_sign_in_at=row.get("last_sign_in_at"),
        created_at=row.get("created_at"),
    )


class MySQLAuthUserRepository(AuthUserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[AuthUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM auth_users WHERE id=%s", (user_id,))
            row = fetchone(cur)
            return _to_auth_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[AuthUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM auth_users WHERE LOWER(email)=LOWER(%s)", (email,))
            row = fetchone(cur)
            return _to_auth_user(row) if row else None

    def create(self, *, user_id: str, email: str, password_hash: str, email_confirmed: bool) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO auth_users(id, email, password_hash, email_confirmed) VALUES(%s,%s,%s,%s)",
                (user_id, email, password_hash, int(email_confirmed)),
            )

    def update_password_hash(self, user_id: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE auth_users SET password_hash=%s WHERE id=%s", (password_hash, user_id))
            return cur.rowcount > 0

    def touch_last_sign_in(self, user_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE auth_users SET last_sign_in_at=NOW() WHERE id=%s", (user_id,))

    def delete(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM auth_users WHERE id=%s", (user_id,))
            return cur.rowcount > 0

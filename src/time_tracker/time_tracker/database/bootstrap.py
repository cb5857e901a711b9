from __future__ import annotations

import re
import uuid
from pathlib import Path
from typing import Iterable, List

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

# email, password, name, role
DEMO_ACCOUNTS = (
    ("admin@example.com", "Admin123", "Admin Demo", "admin"),
    ("hr@example.com", "Hr123456", "HR Demo", "hr"),
    ("student@example.com", "Student123", "Student Demo", "student"),
)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: List[str] = []
    quote = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_sql_file(db_config: dict, path: Path) -> None:
    target = DBConfig.from_dict(db_config)
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path) -> None:
    ensure_database_exists(db_config)
    _run_sql_file(db_config, Path(schema_path))


def apply_seed_sql(db_config: dict, *, seed_path) -> None:
    _run_sql_file(db_config, Path(seed_path))


def ensure_demo_users(db_config: dict) -> None:
    """Create (or reset the password of) one account per role."""
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        for email, password, name, role in DEMO_ACCOUNTS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT id FROM auth_users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                auth_id = existing["id"]
                cur.execute("UPDATE auth_users SET password_hash=%s, email_confirmed=1 WHERE id=%s", (password_hash, auth_id))
            else:
                auth_id = str(uuid.uuid4())
                cur.execute(
                    "INSERT INTO auth_users(id, email, password_hash, email_confirmed) VALUES(%s,%s,%s,1)",
                    (auth_id, email, password_hash),
                )

            cur.execute("SELECT id FROM students WHERE email=%s", (email,))
            if cur.fetchone():
                cur.execute(
                    "UPDATE students SET auth_user_id=%s, name=%s, role=%s, status='active' WHERE email=%s",
                    (auth_id, name, role, email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO students(auth_user_id, email, name, role, first_login, status)
                    VALUES(%s,%s,%s,%s,0,'active')
                    """,
                    (auth_id, email, name, role),
                )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> List[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()

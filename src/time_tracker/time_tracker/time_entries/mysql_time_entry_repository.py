from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional, Sequence

from ..core.enums import EntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import TimeEntry, TimeEntryRow
from .repository import TimeEntryRepository

_COLUMNS = (
    "e.id, e.student_id, e.date, e.start_time, e.end_time, e.total_hours, "
    "e.project_id, e.task_id, e.description, e.status, e.created_at, e.updated_at"
)


def _to_entry(row: dict) -> TimeEntry:
    return TimeEntry(
        id=int(row["id"]),
        student_id=int(row["student_id"]),
        date=row["date"],
        start_time=normalize_mysql_time(row["start_time"]),
        end_time=normalize_mysql_time(row["end_time"]),
        total_hours=as_decimal(row.get("total_hours")),
        project_id=row.get("project_id"),
        task_id=row.get("task_id"),
        description=row.get("description"),
        status=EntryStatus(row.get("status") or EntryStatus.PENDING.value),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM time_entries e WHERE e.id=%s", (int(entry_id),))
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def list_for_student(self, student_id: int, *, on_date: Optional[date] = None) -> Sequence[TimeEntry]:
        sql = f"SELECT {_COLUMNS} FROM time_entries e WHERE e.student_id=%s"
        params: List[object] = [int(student_id)]
        if on_date:
            sql += " AND e.date=%s"
            params.append(on_date)
        sql += " ORDER BY e.date DESC, e.start_time DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_entry(r) for r in fetchall(cur)]

    def list_rows(
        self,
        *,
        student_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        status: Optional[EntryStatus] = None,
    ) -> Sequence[TimeEntryRow]:
        where = []
        params: List[object] = []
        if student_id is not None:
            where.append("e.student_id=%s")
            params.append(int(student_id))
        if date_from:
            where.append("e.date>=%s")
            params.append(date_from)
        if date_to:
            where.append("e.date<=%s")
            params.append(date_to)
        if status:
            where.append("e.status=%s")
            params.append(status.value)

        sql = f"""
            SELECT {_COLUMNS},
                   s.name AS student_name, s.email AS student_email,
                   p.name AS project_name, t.title AS task_title
            FROM time_entries e
            JOIN students s ON s.id = e.student_id
            LEFT JOIN projects p ON p.id = e.project_id
            LEFT JOIN tasks t ON t.id = e.task_id
        """
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY e.date DESC, e.start_time DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                TimeEntryRow(
                    entry=_to_entry(r),
                    student_name=r["student_name"],
                    student_email=r["student_email"],
                    project_name=r.get("project_name"),
                    task_title=r.get("task_title"),
                )
                for r in fetchall(cur)
            ]

    def create(
        self,
        *,
        student_id: int,
        entry_date: date,
        start_time: time,
        end_time: time,
        total_hours: Decimal,
        project_id: int,
        task_id: int,
        description: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(
                    student_id, date, start_time, end_time, total_hours, project_id, task_id, description, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    entry_date,
                    start_time,
                    end_time,
                    total_hours,
                    int(project_id),
                    int(task_id),
                    description,
                    EntryStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def update(
        self,
        entry_id: int,
        *,
        entry_date: date,
        start_time: time,
        end_time: time,
        total_hours: Decimal,
        description: Optional[str],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET date=%s, start_time=%s, end_time=%s, total_hours=%s, description=%s, updated_at=%s
                WHERE id=%s
                """,
                (entry_date, start_time, end_time, total_hours, description, updated_at, int(entry_id)),
            )
            return cur.rowcount > 0

    def set_status(self, entry_id: int, status: EntryStatus, *, updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE time_entries SET status=%s, updated_at=%s WHERE id=%s",
                (status.value, updated_at, int(entry_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_entries WHERE id=%s", (int(entry_id),))
            return cur.rowcount > 0

    def delete_for_student(self, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_entries WHERE student_id=%s", (int(student_id),))
            return int(cur.rowcount)

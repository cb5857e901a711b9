from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Task
from .repository import TaskRepository

_COLUMNS = "t.id, t.title, t.description, t.project_id, t.assigned_by, t.priority, t.status, t.due_date, t.created_at"


def _to_task(row: dict, student_ids: Sequence[int] = ()) -> Task:
    return Task(
        id=int(row["id"]),
        title=row["title"],
        description=row.get("description"),
        project_id=row.get("project_id"),
        assigned_by=row.get("assigned_by"),
        priority=TaskPriority(row.get("priority") or TaskPriority.MEDIUM.value),
        status=TaskStatus(row.get("status") or TaskStatus.PENDING.value),
        due_date=row.get("due_date"),
        created_at=row.get("created_at"),
        assigned_student_ids=tuple(student_ids),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _assignments(cur, task_ids: Sequence[int]) -> Dict[int, List[int]]:
        by_task: Dict[int, List[int]] = defaultdict(list)
        if not task_ids:
            return by_task
        cur.execute(
            f"SELECT task_id, student_id FROM task_assignments WHERE task_id IN ({in_clause(task_ids)}) "
            "ORDER BY student_id",
            tuple(task_ids),
        )
        for r in fetchall(cur):
            by_task[int(r["task_id"])].append(int(r["student_id"]))
        return by_task

    def _load(self, sql: str, params: tuple = ()) -> List[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            rows = fetchall(cur)
            by_task = self._assignments(cur, [int(r["id"]) for r in rows])
            return [_to_task(r, by_task.get(int(r["id"]), ())) for r in rows]

    def get_by_id(self, task_id: int) -> Optional[Task]:
        tasks = self._load(f"SELECT {_COLUMNS} FROM tasks t WHERE t.id=%s", (int(task_id),))
        return tasks[0] if tasks else None

    def list_all(self) -> Sequence[Task]:
        return self._load(f"SELECT {_COLUMNS} FROM tasks t ORDER BY t.created_at DESC, t.id DESC")

    def list_for_student(self, student_id: int) -> Sequence[Task]:
        return self._load(
            f"""
            SELECT {_COLUMNS}
            FROM tasks t
            JOIN task_assignments a ON a.task_id = t.id
            WHERE a.student_id=%s
            ORDER BY t.created_at DESC, t.id DESC
            """,
            (int(student_id),),
        )

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        project_id: int,
        assigned_by: Optional[int],
        priority: TaskPriority,
        due_date: Optional[date],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(title, description, project_id, assigned_by, priority, status, due_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (title, description, int(project_id), assigned_by, priority.value, TaskStatus.PENDING.value, due_date),
            )
            return int(cur.lastrowid)

    def assign_students(self, task_id: int, student_ids: Sequence[int]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                "INSERT INTO task_assignments(task_id, student_id) VALUES(%s,%s)",
                [(int(task_id), int(sid)) for sid in student_ids],
            )

    def is_assigned(self, task_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM task_assignments WHERE task_id=%s AND student_id=%s",
                (int(task_id), int(student_id)),
            )
            return fetchone(cur) is not None

    def update_status(self, task_id: int, status: TaskStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE tasks SET status=%s WHERE id=%s", (status.value, int(task_id)))
            return cur.rowcount > 0

    def delete_by_id(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM task_assignments WHERE task_id=%s", (int(task_id),))
            cur.execute("DELETE FROM tasks WHERE id=%s", (int(task_id),))
            return cur.rowcount > 0

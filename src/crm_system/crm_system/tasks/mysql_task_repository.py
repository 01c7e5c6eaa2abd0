from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import RecurringPattern, TaskCategory, TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_set, build_where, db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Task
from .repository import TaskRepository
from .serializers import comment_from_dict, comment_to_dict

_COLUMNS = """
    task_id, title, description, assigned_to, employees, deadline, priority, status, progress,
    machine, category, comments, estimated_hours, actual_hours, tags, location, is_recurring,
    recurring_pattern, created_by, created_at, updated_at
"""

_WRITABLE = {
    "title": "title",
    "description": "description",
    "assigned_to": "assigned_to",
    "employees": "employees",
    "deadline": "deadline",
    "priority": "priority",
    "status": "status",
    "progress": "progress",
    "machine": "machine",
    "category": "category",
    "comments": "comments",
    "estimated_hours": "estimated_hours",
    "actual_hours": "actual_hours",
    "tags": "tags",
    "location": "location",
    "is_recurring": "is_recurring",
    "recurring_pattern": "recurring_pattern",
    "created_by": "created_by",
}


def _to_task(row: dict) -> Task:
    return Task(
        task_id=int(row["task_id"]),
        title=row["title"],
        description=row["description"],
        assigned_to=int(row["assigned_to"]),
        employees=tuple(int(e) for e in load_json(row.get("employees"), [])),
        deadline=row["deadline"],
        priority=TaskPriority(row["priority"]),
        status=TaskStatus(row["status"]),
        progress=int(row.get("progress") or 0),
        machine=row.get("machine"),
        category=TaskCategory(row["category"]),
        comments=tuple(comment_from_dict(c) for c in load_json(row.get("comments"), [])),
        estimated_hours=float(row.get("estimated_hours") or 0),
        actual_hours=float(row.get("actual_hours") or 0),
        tags=tuple(load_json(row.get("tags"), [])),
        location=row.get("location") or "",
        is_recurring=bool(row.get("is_recurring")),
        recurring_pattern=RecurringPattern(row["recurring_pattern"]),
        created_by=row.get("created_by"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _to_db(fields: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for attr, value in fields.items():
        if isinstance(value, Enum):
            value = value.value
        elif attr in ("employees", "tags"):
            value = dump_json(list(value or ()))
        elif attr == "comments":
            value = dump_json([comment_to_dict(c) for c in value or ()])
        elif attr == "is_recurring":
            value = 1 if value else 0
        out[attr] = value
    return out


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE task_id=%s", (int(task_id),))
            row = fetchone(cur)
            return _to_task(row) if row else None

    def list_tasks(
        self,
        *,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        assigned_to: Optional[int] = None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Task], int]:
        where, params = build_where(
            [
                ("status", status.value if status else None),
                ("priority", priority.value if priority else None),
                ("assigned_to", assigned_to),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM tasks {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"SELECT {_COLUMNS} FROM tasks {where} ORDER BY task_id LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_to_task(r) for r in fetchall(cur)], total

    def list_all(self, *, assigned_to: Optional[int] = None) -> Sequence[Task]:
        where, params = build_where([("assigned_to", assigned_to)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks {where} ORDER BY task_id", tuple(params))
            return [_to_task(r) for r in fetchall(cur)]

    def list_recent(self, limit: int) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM tasks ORDER BY created_at DESC, task_id DESC LIMIT %s",
                (int(limit),),
            )
            return [_to_task(r) for r in fetchall(cur)]

    def count_by_assignee(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM tasks WHERE assigned_to=%s", (int(user_id),))
            return int((fetchone(cur) or {}).get("total") or 0)

    def create_task(self, fields: Mapping[str, Any]) -> int:
        values = _to_db(fields)
        columns = [_WRITABLE[k] for k in values]
        placeholders = ",".join(["%s"] * len(columns))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO tasks({', '.join(columns)}) VALUES({placeholders})",
                tuple(values.values()),
            )
            return int(cur.lastrowid)

    def update_task(self, task_id: int, fields: Mapping[str, Any]) -> bool:
        if not fields:
            return True
        assignments, params = build_set(_to_db(fields), _WRITABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE tasks SET {assignments} WHERE task_id=%s", (*params, int(task_id)))
            return cur.rowcount > 0

    def delete_by_id(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (int(task_id),))
            return cur.rowcount > 0

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import AVERAGEABLE, GROUPABLE, AnalyticsRepository


def _check(allowed: dict, table: str, column: Optional[str]) -> None:
    if table not in GROUPABLE:
        raise ValueError(f"Unknown table {table!r}")
    if column is not None and column not in allowed.get(table, ()):
        raise ValueError(f"Column {column!r} of {table!r} cannot be aggregated")


class MySQLAnalyticsRepository(AnalyticsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def count(self, table: str, *, column: Optional[str] = None, value: Any = None) -> int:
        _check(GROUPABLE, table, column)
        sql = f"SELECT COUNT(*) AS total FROM {table}"
        params: tuple = ()
        if column is not None:
            sql += f" WHERE {column}=%s"
            params = (getattr(value, "value", value),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return int((fetchone(cur) or {}).get("total") or 0)

    def grouped_counts(self, table: str, column: str) -> Sequence[tuple[Any, int]]:
        _check(GROUPABLE, table, column)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {column} AS value, COUNT(*) AS total FROM {table} GROUP BY {column}")
            return [(r["value"], int(r["total"])) for r in fetchall(cur)]

    def average(self, table: str, column: str) -> Optional[float]:
        _check(AVERAGEABLE, table, column)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT AVG({column}) AS average FROM {table}")
            row = fetchone(cur) or {}
            return float(row["average"]) if row.get("average") is not None else None

    def task_counts_by_assignee(self) -> Sequence[tuple[str, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.name AS name, COUNT(*) AS total
                FROM tasks t
                JOIN users u ON u.user_id = t.assigned_to
                GROUP BY u.user_id, u.name
                ORDER BY u.user_id
                """
            )
            return [(r["name"], int(r["total"])) for r in fetchall(cur)]

    def maintenance_counts(self) -> Sequence[tuple[str, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT name, COALESCE(JSON_LENGTH(maintenance_history), 0) AS total
                FROM machines
                ORDER BY machine_id
                """
            )
            return [(r["name"], int(r["total"])) for r in fetchall(cur)]

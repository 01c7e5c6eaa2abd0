from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json(value: Any, default: Any) -> Any:
    """Decode a MySQL JSON column.

    mysql-connector can return JSON columns as str, bytes/bytearray or an
    already decoded object depending on the connector implementation.
    """

    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        if not value.strip():
            return default
        return json.loads(value)
    return value


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def build_where(filters: Iterable[Tuple[str, Any]]) -> Tuple[str, list]:
    """Build ``WHERE a=%s AND b=%s`` from (column, value) pairs, skipping None values.

    Column names must come from code, never from request input.
    """

    clauses: list[str] = []
    params: list = []
    for column, value in filters:
        if value is None:
            continue
        clauses.append(f"{column}=%s")
        params.append(value)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def build_set(fields: Mapping[str, Any], columns: Mapping[str, str]) -> Tuple[str, list]:
    """Build ``SET col=%s, ...`` for the known attribute names in ``fields``."""

    parts: list[str] = []
    params: list = []
    for attr, value in fields.items():
        column = columns.get(attr)
        if column is None:
            raise KeyError(f"Unknown column for attribute {attr!r}")
        parts.append(f"{column}=%s")
        params.append(value)
    return ", ".join(parts), params

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # name, email, password, role, department
    ("Admin Demo", "admin@crm.local", "admin123", "Admin", "Management"),
    ("Sub Admin Demo", "subadmin@crm.local", "subadmin123", "Sub Admin", "Management"),
    ("Ana Manager", "ana@crm.local", "manager123", "Manager", "Production"),
    ("Ben Employee", "ben@crm.local", "employee123", "Employee", "Production"),
    ("Cara Employee", "cara@crm.local", "employee123", "Employee", "Maintenance"),
)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "use_pure": True,
    }
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql_file(db_config: dict, path: str | Path) -> int:
    target = DBConfig.from_dict(db_config)
    sql = _strip_line_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        count = 0
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
        return count
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _exec_sql_file(db_config, schema_path)
    logger.info("Applied schema %s (%d statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _exec_sql_file(db_config, seed_path)
    logger.info("Applied seed %s (%d statements)", seed_path, count)


def ensure_demo_users(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)

    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)

        for name, email, password, role, department in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE users
                    SET name=%s, password_hash=%s, role=%s, department=%s, status='Active'
                    WHERE email=%s
                    """,
                    (name, password_hash, role, department, email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (name, email, password_hash, role, department)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (name, email, password_hash, role, department),
                )

        conn.commit()
        logger.info("Demo users ready (%d accounts)", len(DEMO_USERS))
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()

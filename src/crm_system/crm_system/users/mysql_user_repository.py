from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import Role, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_set, build_where, db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, name, email, password_hash, role, status, department, phone, address,
    last_login, created_at, updated_at
"""

_UPDATABLE = {
    "name": "name",
    "email": "email",
    "role": "role",
    "status": "status",
    "department": "department",
    "phone": "phone",
    "address": "address",
    "password_hash": "password_hash",
}


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        status=UserStatus(row["status"]),
        department=row.get("department"),
        phone=row.get("phone") or "",
        address=row.get("address") or "",
        last_login=row.get("last_login"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, (Role, UserStatus)) else value


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, param: Any) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where}=%s LIMIT 1", (param,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("user_id", int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email", email.lower())

    def get_by_name(self, name: str, *, role: Optional[Role] = None) -> Optional[User]:
        where, params = build_where([("name", name), ("role", _db_value(role))])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users {where} ORDER BY user_id LIMIT 1", tuple(params))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_by_ids(self, user_ids: Sequence[int]) -> Sequence[User]:
        ids = sorted({int(i) for i in user_ids})
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id IN ({placeholders})", tuple(ids))
            return [_to_user(r) for r in fetchall(cur)]

    def list_users(
        self,
        *,
        role: Optional[Role] = None,
        department: Optional[str] = None,
        status: Optional[UserStatus] = None,
    ) -> Sequence[User]:
        where, params = build_where(
            [
                ("role", _db_value(role)),
                ("department", department),
                ("status", _db_value(status)),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users {where} ORDER BY user_id", tuple(params))
            return [_to_user(r) for r in fetchall(cur)]

    def list_recent(self, limit: int) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users ORDER BY created_at DESC, user_id DESC LIMIT %s",
                (int(limit),),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        status: UserStatus,
        department: str,
        phone: str,
        address: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, email, password_hash, role, status, department, phone, address)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, email.lower(), password_hash, role.value, status.value, department, phone, address),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, fields: Mapping[str, Any]) -> bool:
        if not fields:
            return True
        assignments, params = build_set({k: _db_value(v) for k, v in fields.items()}, _UPDATABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE users SET {assignments} WHERE user_id=%s", (*params, int(user_id)))
            return cur.rowcount > 0

    def set_password(self, user_id: int, password_hash: str) -> bool:
        return self.update_user(user_id, {"password_hash": password_hash})

    def touch_last_login(self, user_id: int, when: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET last_login=%s WHERE user_id=%s", (when, int(user_id)))
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

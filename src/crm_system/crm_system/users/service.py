from __future__ import annotations

import logging
import secrets
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..auth.gate import Action, AuthorizationGate, Caller
from ..common.datetime_utils import now_local
from ..common.validators import (
    require_enum,
    require_max_length,
    require_min_length,
    require_non_empty,
)
from ..core.constants import (
    DEFAULT_USER_DEPARTMENT,
    MIN_PASSWORD_LENGTH,
    RESET_PASSWORD_BYTES,
    UNASSIGNED_KEY,
    USER_NAME_MAX_LENGTH,
)
from ..core.enums import Role, UserStatus
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..tasks.repository import TaskRepository
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _clean_email(value: Any) -> str:
    email = require_non_empty(value, "Email").lower()
    local, _, domain = email.partition("@")
    if not local or "." not in domain or " " in email:
        raise ValidationError("Email is invalid")
    return email


def _clean_name(value: Any) -> str:
    name = require_non_empty(value, "Name")
    require_max_length(name, "Name", USER_NAME_MAX_LENGTH)
    return name


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> Caller:
        user = self._users.get_by_email((email or "").strip().lower()) if email else None
        if not user or user.status != UserStatus.ACTIVE:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        self._users.touch_last_login(user.user_id, now_local())
        logger.info("User %s logged in", user.user_id)
        return Caller(user_id=user.user_id, role=user.role, name=user.name)

    def current_user(self, caller: Optional[Caller]) -> User:
        if caller is None:
            raise AuthenticationError("Not authorized to access this route")
        user = self._users.get_by_id(caller.user_id)
        if not user or user.status != UserStatus.ACTIVE:
            raise AuthenticationError("Not authorized to access this route")
        return user

    def session_caller(self, user_id: int) -> Optional[Caller]:
        """Caller for a session's user id, read from the store; None unless the user is active."""
        user = self._users.get_by_id(user_id)
        if not user or user.status != UserStatus.ACTIVE:
            return None
        return Caller(user_id=user.user_id, role=user.role, name=user.name)


class UserService:
    """Use case: manage users (Admin / Sub Admin)."""

    def __init__(self, users: UserRepository, tasks: TaskRepository, gate: Optional[AuthorizationGate] = None):
        self._users = users
        self._tasks = tasks
        self._gate = gate or AuthorizationGate()

    def list_users(
        self,
        caller: Optional[Caller],
        *,
        role: Optional[str] = None,
        department: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Sequence[User]:
        self._gate.authorize(caller, Action.LIST_USERS)
        return self._users.list_users(
            role=require_enum(Role, role, "Role") if role else None,
            department=department or None,
            status=require_enum(UserStatus, status, "Status") if status else None,
        )

    def list_employees(self, caller: Optional[Caller]) -> Sequence[User]:
        self._gate.authorize(caller, Action.LIST_EMPLOYEES)
        return self._users.list_users(role=Role.EMPLOYEE)

    def get_user(self, caller: Optional[Caller], user_id: int) -> User:
        self._gate.authorize(caller, Action.READ_USER)
        return self._require_user(user_id)

    def create_user(self, caller: Optional[Caller], payload: Mapping[str, Any]) -> User:
        self._gate.authorize(caller, Action.CREATE_USER)

        if not all(payload.get(k) for k in ("name", "email", "password", "role")):
            raise ValidationError("Name, email, password, and role are required")

        name = _clean_name(payload.get("name"))
        email = _clean_email(payload.get("email"))
        password = require_min_length(payload.get("password"), "Password", MIN_PASSWORD_LENGTH)
        role = require_enum(Role, payload.get("role"), "Role")
        status = require_enum(UserStatus, payload.get("status") or UserStatus.ACTIVE, "Status")

        if self._users.get_by_email(email):
            raise ConflictError("User with this email already exists")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            status=status,
            department=(payload.get("department") or DEFAULT_USER_DEPARTMENT),
            phone=str(payload.get("phone") or ""),
            address=str(payload.get("address") or ""),
        )
        logger.info("User %s created by %s (role=%s)", user_id, caller.user_id, role.value)
        return self._require_user(user_id)

    def update_user(self, caller: Optional[Caller], user_id: int, payload: Mapping[str, Any]) -> User:
        self._gate.authorize(caller, Action.UPDATE_USER)
        user = self._require_user(user_id)

        fields: dict[str, Any] = {}
        if "name" in payload:
            fields["name"] = _clean_name(payload["name"])
        if "email" in payload:
            email = _clean_email(payload["email"])
            existing = self._users.get_by_email(email)
            if existing and existing.user_id != user.user_id:
                raise ConflictError("User with this email already exists")
            fields["email"] = email
        if "role" in payload:
            fields["role"] = require_enum(Role, payload["role"], "Role")
        if "status" in payload:
            fields["status"] = require_enum(UserStatus, payload["status"], "Status")
        for key in ("department", "phone", "address"):
            if key in payload:
                fields[key] = "" if payload[key] is None else str(payload[key])
        if payload.get("password"):
            password = require_min_length(payload["password"], "Password", MIN_PASSWORD_LENGTH)
            fields["password_hash"] = generate_password_hash(password)

        self._users.update_user(user.user_id, fields)
        logger.info("User %s updated by %s (%s)", user.user_id, caller.user_id, ", ".join(sorted(fields)) or "no changes")
        return self._require_user(user.user_id)

    def delete_user(self, caller: Optional[Caller], user_id: int) -> None:
        self._gate.authorize(caller, Action.DELETE_USER)
        user = self._require_user(user_id)

        if self._tasks.count_by_assignee(user.user_id) > 0:
            raise ConflictError("Cannot delete user with assigned tasks. Please reassign tasks first.")

        if not self._users.delete_by_id(user.user_id):
            raise NotFoundError("User not found")
        logger.info("User %s deleted by %s", user.user_id, caller.user_id)

    def reset_password(self, caller: Optional[Caller], user_id: int) -> str:
        """Replace the user's password with a random one and return it."""
        self._gate.authorize(caller, Action.RESET_USER_PASSWORD)
        user = self._require_user(user_id)

        new_password = secrets.token_hex(RESET_PASSWORD_BYTES)
        self._users.set_password(user.user_id, generate_password_hash(new_password))
        logger.info("Password of user %s reset by %s", user.user_id, caller.user_id)
        return new_password

    def user_stats(self, caller: Optional[Caller]) -> dict:
        self._gate.authorize(caller, Action.VIEW_USER_STATS)
        users = self._users.list_users()
        tasks = self._tasks.list_all()

        role_stats = {r.value: 0 for r in Role}
        status_stats = {s.value: 0 for s in UserStatus}
        department_stats: dict[str, int] = {}
        for u in users:
            role_stats[u.role.value] += 1
            status_stats[u.status.value] += 1
            dept = u.department or UNASSIGNED_KEY
            department_stats[dept] = department_stats.get(dept, 0) + 1

        tasks_per_user: dict[str, int] = {}
        for t in tasks:
            key = str(t.assigned_to) if t.assigned_to else UNASSIGNED_KEY
            tasks_per_user[key] = tasks_per_user.get(key, 0) + 1

        return {
            "totalUsers": len(users),
            "roleStats": role_stats,
            "statusStats": status_stats,
            "departmentStats": department_stats,
            "tasksPerUser": tasks_per_user,
        }

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

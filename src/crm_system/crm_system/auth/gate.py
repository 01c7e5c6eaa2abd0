"""Authorization gate.

Every service operation asks the gate before touching a repository. Admin and
Sub Admin are full-access roles. Employee is the only role with ownership
restrictions: an Employee may only read or mutate tasks whose ``assigned_to``
is the caller. Being listed in a task's ``employees`` grants nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..tasks.model import Task


@dataclass(frozen=True)
class Caller:
    """The authenticated identity making a request."""

    user_id: int
    role: Role
    name: str = ""


class Action(str, Enum):
    LIST_USERS = "users:list"
    READ_USER = "users:read"
    LIST_EMPLOYEES = "users:list-employees"
    VIEW_USER_STATS = "users:stats"
    CREATE_USER = "users:create"
    UPDATE_USER = "users:update"
    DELETE_USER = "users:delete"
    RESET_USER_PASSWORD = "users:reset-password"

    LIST_MACHINES = "machines:list"
    READ_MACHINE = "machines:read"
    CREATE_MACHINE = "machines:create"
    UPDATE_MACHINE = "machines:update"
    DELETE_MACHINE = "machines:delete"
    UPDATE_MACHINE_STATUS = "machines:update-status"
    ADD_MAINTENANCE_RECORD = "machines:add-maintenance"

    LIST_TASKS = "tasks:list"
    LIST_EMPLOYEE_TASKS = "tasks:list-employee"
    READ_TASK = "tasks:read"
    CREATE_TASK = "tasks:create"
    UPDATE_TASK = "tasks:update"
    UPDATE_TASK_PROGRESS = "tasks:update-progress"
    COMMENT_TASK = "tasks:comment"
    DELETE_TASK = "tasks:delete"

    VIEW_ANALYTICS = "analytics:view"


FULL_ACCESS = frozenset({Role.ADMIN, Role.SUB_ADMIN})
SUPERVISORS = FULL_ACCESS | {Role.MANAGER}
EVERYONE = frozenset(Role)

PERMISSIONS: Mapping[Action, frozenset] = {
    Action.LIST_USERS: FULL_ACCESS,
    Action.READ_USER: FULL_ACCESS,
    Action.LIST_EMPLOYEES: SUPERVISORS,
    Action.VIEW_USER_STATS: FULL_ACCESS,
    Action.CREATE_USER: FULL_ACCESS,
    Action.UPDATE_USER: FULL_ACCESS,
    Action.DELETE_USER: FULL_ACCESS,
    Action.RESET_USER_PASSWORD: FULL_ACCESS,
    Action.LIST_MACHINES: EVERYONE,
    Action.READ_MACHINE: EVERYONE,
    Action.CREATE_MACHINE: FULL_ACCESS,
    Action.UPDATE_MACHINE: FULL_ACCESS,
    Action.DELETE_MACHINE: FULL_ACCESS,
    Action.UPDATE_MACHINE_STATUS: SUPERVISORS,
    Action.ADD_MAINTENANCE_RECORD: SUPERVISORS,
    Action.LIST_TASKS: EVERYONE,
    Action.LIST_EMPLOYEE_TASKS: SUPERVISORS,
    Action.READ_TASK: EVERYONE,
    Action.CREATE_TASK: SUPERVISORS,
    Action.UPDATE_TASK: EVERYONE,
    Action.UPDATE_TASK_PROGRESS: EVERYONE,
    Action.COMMENT_TASK: EVERYONE,
    Action.DELETE_TASK: FULL_ACCESS,
    Action.VIEW_ANALYTICS: EVERYONE,
}

# Actions where an Employee must be the task's assignee.
OWNERSHIP_SCOPED = frozenset(
    {
        Action.READ_TASK,
        Action.UPDATE_TASK,
        Action.UPDATE_TASK_PROGRESS,
        Action.COMMENT_TASK,
    }
)

EMPLOYEE_TASK_FIELDS = frozenset({"deadline", "priority", "machine", "progress", "status"})

_DENIED_MESSAGES = {
    Action.READ_TASK: "Not authorized to access this task",
    Action.UPDATE_TASK: "Not authorized to update this task",
    Action.UPDATE_TASK_PROGRESS: "Not authorized to update this task",
    Action.COMMENT_TASK: "Not authorized to comment on this task",
}


class AuthorizationGate:
    """Decides whether a (caller, action, resource) triple may proceed."""

    def __init__(self, permissions: Optional[Mapping[Action, frozenset]] = None):
        self._permissions = dict(PERMISSIONS if permissions is None else permissions)

    def is_allowed(self, caller: Optional[Caller], action: Action, *, task: Optional[Task] = None) -> bool:
        if caller is None:
            return False
        if caller.role not in self._permissions.get(action, frozenset()):
            return False
        if action in OWNERSHIP_SCOPED and caller.role == Role.EMPLOYEE:
            if task is None or task.assigned_to != caller.user_id:
                return False
        return True

    def authenticate(self, caller: Optional[Caller]) -> Caller:
        if caller is None:
            raise AuthenticationError("Not authorized to access this route")
        return caller

    def authorize(self, caller: Optional[Caller], action: Action, *, task: Optional[Task] = None) -> Caller:
        """Return the caller when allowed, raise the matching deny error otherwise."""
        caller = self.authenticate(caller)
        if not self.is_allowed(caller, action, task=task):
            message = _DENIED_MESSAGES.get(
                action, f"User role {caller.role.value} is not authorized to access this route"
            )
            raise AuthorizationError(message)
        return caller

    @staticmethod
    def restrict_task_update(caller: Caller, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Drop task fields the caller may not write.

        Employees keep only :data:`EMPLOYEE_TASK_FIELDS`; other keys are
        silently discarded, never rejected.
        """
        if caller.role == Role.EMPLOYEE:
            return {k: v for k, v in payload.items() if k in EMPLOYEE_TASK_FIELDS}
        return dict(payload)

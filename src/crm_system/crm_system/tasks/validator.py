"""Validation for task creation.

Checks run in a fixed order and every failure raises before anything is
persisted: required fields, the Manager assignee, the Employee list, the
optional machine, then field-level checks and defaults.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from ..common.datetime_utils import now_local, parse_optional_datetime
from ..common.resolvers import resolve_machine, resolve_user, to_identifier
from ..common.validators import (
    require_bool,
    require_enum,
    require_max_length,
    require_non_empty,
    require_number,
    require_string_list,
)
from ..core.constants import DEFAULT_TASK_DEADLINE_DAYS, TASK_DESCRIPTION_MAX_LENGTH, TASK_TITLE_MAX_LENGTH
from ..core.enums import RecurringPattern, Role, TaskCategory, TaskPriority, TaskStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..machines.repository import MachineRepository
from ..users.repository import UserRepository

REQUIRED_MESSAGE = "Title, description, assignedTo (Manager), and employees are required"
ASSIGNEE_MESSAGE = "Assigned user must be a Manager"
EMPLOYEES_MESSAGE = "One or more assigned employees not found or not employees"


def _employee_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


class TaskCreationValidator:
    def __init__(self, users: UserRepository, machines: MachineRepository):
        self._users = users
        self._machines = machines

    def validate(self, payload: Mapping[str, Any], *, created_by: int, now: Optional[datetime] = None) -> dict[str, Any]:
        """Return the snake_case fields of a new task, or raise a DomainError."""
        title = payload.get("title")
        description = payload.get("description")
        assignee = payload.get("assignedTo")
        employees = payload.get("employees")
        if not title or not description or assignee in (None, "") or not employees:
            raise ValidationError(REQUIRED_MESSAGE)

        title = require_max_length(require_non_empty(title, "Title"), "Title", TASK_TITLE_MAX_LENGTH)
        description = require_max_length(
            require_non_empty(description, "Description"), "Description", TASK_DESCRIPTION_MAX_LENGTH
        )

        manager_id = self.resolve_manager(assignee)
        employee_ids = self.resolve_employees(employees)
        machine_id = self.resolve_machine_id(payload.get("machine"))

        now = now or now_local()
        deadline = parse_optional_datetime(payload.get("deadline"), "Deadline")
        if deadline is None:
            deadline = now + timedelta(days=DEFAULT_TASK_DEADLINE_DAYS)

        return {
            "title": title,
            "description": description,
            "assigned_to": manager_id,
            "employees": employee_ids,
            "deadline": deadline,
            "priority": require_enum(TaskPriority, payload.get("priority") or TaskPriority.MEDIUM, "Priority"),
            "status": TaskStatus.PENDING,
            "progress": 0,
            "machine": machine_id,
            "category": require_enum(TaskCategory, payload.get("category") or TaskCategory.PRODUCTION, "Category"),
            "comments": (),
            "estimated_hours": require_number(payload.get("estimatedHours") or 0, "Estimated hours", minimum=0),
            "tags": tuple(require_string_list(payload.get("tags"), "Tags")),
            "location": str(payload.get("location") or ""),
            "is_recurring": require_bool(payload.get("isRecurring") or False, "isRecurring"),
            "recurring_pattern": require_enum(
                RecurringPattern, payload.get("recurringPattern") or RecurringPattern.WEEKLY, "Recurring pattern"
            ),
            "created_by": created_by,
        }

    def resolve_manager(self, identifier: Any) -> int:
        manager = resolve_user(
            self._users,
            to_identifier(identifier, "assignedTo"),
            role=Role.MANAGER,
            not_found_message=ASSIGNEE_MESSAGE,
        )
        return manager.user_id

    def resolve_employees(self, employees: Any) -> tuple[int, ...]:
        if not isinstance(employees, list) or not employees:
            raise ValidationError("Employees must be a non-empty list of user ids")
        # Duplicates count against the input size, so they fail like unknown ids.
        ids = [_employee_id(e) for e in employees]
        wanted = sorted({i for i in ids if i is not None})
        resolved = [u for u in self._users.list_by_ids(wanted) if u.role == Role.EMPLOYEE]
        if len(resolved) != len(employees):
            raise NotFoundError(EMPLOYEES_MESSAGE)
        return tuple(ids)

    def resolve_machine_id(self, identifier: Any) -> Optional[int]:
        if identifier in (None, ""):
            return None
        return resolve_machine(self._machines, to_identifier(identifier, "Machine")).machine_id

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..auth.gate import Action, AuthorizationGate, Caller
from ..common.datetime_utils import now_local, parse_optional_datetime
from ..common.pagination import Page, PageRequest
from ..common.validators import (
    require_bool,
    require_enum,
    require_int_in_range,
    require_max_length,
    require_non_empty,
    require_number,
    require_string_list,
)
from ..core.constants import TASK_DESCRIPTION_MAX_LENGTH, TASK_TITLE_MAX_LENGTH
from ..core.enums import RecurringPattern, Role, TaskCategory, TaskPriority, TaskStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..machines.repository import MachineRepository
from ..users.repository import UserRepository
from .model import MachineSummary, Task, TaskComment, TaskDetails, UserSummary
from .repository import TaskRepository
from .validator import TaskCreationValidator

logger = logging.getLogger(__name__)

_ENUM_FIELDS = {
    "priority": (TaskPriority, "priority", "Priority"),
    "status": (TaskStatus, "status", "Status"),
    "category": (TaskCategory, "category", "Category"),
    "recurringPattern": (RecurringPattern, "recurring_pattern", "Recurring pattern"),
}


def apply_progress_rule(fields: dict[str, Any]) -> dict[str, Any]:
    """Derive ``status`` from a written ``progress``.

    100 completes the task and anything in between marks it in progress.
    Zero leaves the status alone and setting a status never touches progress.
    """
    progress = fields.get("progress")
    if progress is None:
        return fields
    if progress == 100:
        fields["status"] = TaskStatus.COMPLETED
    elif progress > 0:
        fields["status"] = TaskStatus.IN_PROGRESS
    return fields


def _progress(value: Any) -> int:
    if value is None or value == "":
        raise ValidationError("Progress is required")
    return require_int_in_range(value, "Progress", 0, 100)


def _user_id(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")


class TaskService:
    """Use case: create, read and mutate tasks under the ownership rules."""

    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        machines: MachineRepository,
        gate: Optional[AuthorizationGate] = None,
    ):
        self._tasks = tasks
        self._users = users
        self._machines = machines
        self._gate = gate or AuthorizationGate()
        self._validator = TaskCreationValidator(users, machines)

    def list_tasks(
        self,
        caller: Optional[Caller],
        page: PageRequest,
        *,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_to: Optional[str] = None,
    ) -> Page[TaskDetails]:
        self._gate.authorize(caller, Action.LIST_TASKS)
        items, total = self._tasks.list_tasks(
            status=require_enum(TaskStatus, status, "Status") if status else None,
            priority=require_enum(TaskPriority, priority, "Priority") if priority else None,
            assigned_to=_user_id(assigned_to, "assignedTo") if assigned_to else None,
            limit=page.limit,
            offset=page.offset,
        )
        return Page(items=self.details(items), total=total, request=page)

    def list_employee_tasks(self, caller: Optional[Caller], user_id: int, page: PageRequest) -> Page[TaskDetails]:
        self._gate.authorize(caller, Action.LIST_EMPLOYEE_TASKS)
        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("Employee not found")
        items, total = self._tasks.list_tasks(assigned_to=int(user_id), limit=page.limit, offset=page.offset)
        return Page(items=self.details(items), total=total, request=page)

    def tasks_for_user(self, caller: Optional[Caller], user_id: int) -> Sequence[TaskDetails]:
        """All tasks visible to ``user_id``: only their own when they are an Employee."""
        self._gate.authorize(caller, Action.LIST_TASKS)
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if user.role == Role.EMPLOYEE:
            return self.details(self._tasks.list_all(assigned_to=user.user_id))
        return self.details(self._tasks.list_all())

    def get_task(self, caller: Optional[Caller], task_id: int) -> TaskDetails:
        task = self._load(caller, task_id)
        self._gate.authorize(caller, Action.READ_TASK, task=task)
        return self.details([task])[0]

    def create_task(
        self,
        caller: Optional[Caller],
        payload: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> TaskDetails:
        caller = self._gate.authorize(caller, Action.CREATE_TASK)
        fields = self._validator.validate(payload, created_by=caller.user_id, now=now)
        task_id = self._tasks.create_task(fields)
        logger.info(
            "Task %s created by %s (assignee=%s, employees=%s)",
            task_id,
            caller.user_id,
            fields["assigned_to"],
            list(fields["employees"]),
        )
        return self.details([self._require_task(task_id)])[0]

    def update_task(self, caller: Optional[Caller], task_id: int, payload: Mapping[str, Any]) -> TaskDetails:
        task = self._load(caller, task_id)
        caller = self._gate.authorize(caller, Action.UPDATE_TASK, task=task)

        allowed = self._gate.restrict_task_update(caller, payload)
        fields = apply_progress_rule(self._parse_fields(allowed))
        self._tasks.update_task(task.task_id, fields)
        logger.info("Task %s updated by %s (%s)", task.task_id, caller.user_id, ", ".join(sorted(fields)) or "no changes")
        return self.details([self._require_task(task.task_id)])[0]

    def update_progress(self, caller: Optional[Caller], task_id: int, progress: Any) -> TaskDetails:
        self._gate.authenticate(caller)
        value = _progress(progress)
        task = self._require_task(task_id)
        caller = self._gate.authorize(caller, Action.UPDATE_TASK_PROGRESS, task=task)

        fields = apply_progress_rule({"progress": value})
        self._tasks.update_task(task.task_id, fields)
        logger.info("Task %s progress %s -> %s by %s", task.task_id, task.progress, value, caller.user_id)
        return self.details([self._require_task(task.task_id)])[0]

    def add_comment(
        self,
        caller: Optional[Caller],
        task_id: int,
        comment: Any,
        *,
        now: Optional[datetime] = None,
    ) -> TaskDetails:
        self._gate.authenticate(caller)
        if not isinstance(comment, str) or not comment.strip():
            raise ValidationError("Comment is required")
        task = self._require_task(task_id)
        caller = self._gate.authorize(caller, Action.COMMENT_TASK, task=task)

        entry = TaskComment(
            comment_id=str(uuid.uuid4()),
            user_id=caller.user_id,
            user_name=caller.name,
            comment=comment,
            created_at=now or now_local(),
        )
        self._tasks.update_task(task.task_id, {"comments": (*task.comments, entry)})
        logger.info("Comment %s added to task %s by %s", entry.comment_id, task.task_id, caller.user_id)
        return self.details([self._require_task(task.task_id)])[0]

    def delete_task(self, caller: Optional[Caller], task_id: int) -> None:
        self._gate.authorize(caller, Action.DELETE_TASK)
        task = self._require_task(task_id)
        if not self._tasks.delete_by_id(task.task_id):
            raise NotFoundError("Task not found")
        logger.info("Task %s deleted by %s", task.task_id, caller.user_id)

    def details(self, tasks: Sequence[Task]) -> list[TaskDetails]:
        """Join tasks with their assignee, creator and machine summaries."""
        users: dict[int, Optional[UserSummary]] = {}
        machines: dict[int, Optional[MachineSummary]] = {}

        def user_summary(user_id: Optional[int]) -> Optional[UserSummary]:
            if user_id is None:
                return None
            if user_id not in users:
                u = self._users.get_by_id(user_id)
                users[user_id] = UserSummary(u.user_id, u.name, u.email, u.role) if u else None
            return users[user_id]

        def machine_summary(machine_id: Optional[int]) -> Optional[MachineSummary]:
            if machine_id is None:
                return None
            if machine_id not in machines:
                m = self._machines.get_by_id(machine_id)
                machines[machine_id] = MachineSummary(m.machine_id, m.name, m.model, m.status) if m else None
            return machines[machine_id]

        return [
            TaskDetails(
                task=t,
                assigned_user=user_summary(t.assigned_to),
                created_by_user=user_summary(t.created_by),
                machine_details=machine_summary(t.machine),
            )
            for t in tasks
        ]

    def _parse_fields(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        fields: dict[str, Any] = {}

        if "title" in payload:
            fields["title"] = require_max_length(
                require_non_empty(payload["title"], "Title"), "Title", TASK_TITLE_MAX_LENGTH
            )
        if "description" in payload:
            fields["description"] = require_max_length(
                require_non_empty(payload["description"], "Description"), "Description", TASK_DESCRIPTION_MAX_LENGTH
            )
        if "assignedTo" in payload:
            fields["assigned_to"] = self._validator.resolve_manager(payload["assignedTo"])
        if "employees" in payload:
            fields["employees"] = self._validator.resolve_employees(payload["employees"])
        if "deadline" in payload:
            deadline = parse_optional_datetime(payload["deadline"], "Deadline")
            if deadline is None:
                raise ValidationError("Deadline is required")
            fields["deadline"] = deadline
        for key, (enum_cls, attr, label) in _ENUM_FIELDS.items():
            if key in payload:
                fields[attr] = require_enum(enum_cls, payload[key], label)
        if "progress" in payload:
            fields["progress"] = _progress(payload["progress"])
        if "machine" in payload:
            fields["machine"] = self._validator.resolve_machine_id(payload["machine"])
        for key, attr, label in (
            ("estimatedHours", "estimated_hours", "Estimated hours"),
            ("actualHours", "actual_hours", "Actual hours"),
        ):
            if key in payload:
                fields[attr] = require_number(payload[key], label, minimum=0)
        if "tags" in payload:
            fields["tags"] = tuple(require_string_list(payload["tags"], "Tags"))
        if "location" in payload:
            fields["location"] = "" if payload["location"] is None else str(payload["location"])
        if "isRecurring" in payload:
            fields["is_recurring"] = require_bool(payload["isRecurring"], "isRecurring")

        return fields

    def _load(self, caller: Optional[Caller], task_id: int) -> Task:
        self._gate.authenticate(caller)
        return self._require_task(task_id)

    def _require_task(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

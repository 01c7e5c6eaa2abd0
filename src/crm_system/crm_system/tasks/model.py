from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import MachineStatus, RecurringPattern, Role, TaskCategory, TaskPriority, TaskStatus


@dataclass(frozen=True)
class TaskComment:
    comment_id: str
    user_id: int
    user_name: str
    comment: str
    created_at: datetime


@dataclass(frozen=True)
class Task:
    task_id: int
    title: str
    description: str
    assigned_to: int
    deadline: datetime
    employees: tuple[int, ...] = ()
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    progress: int = 0
    machine: Optional[int] = None
    category: TaskCategory = TaskCategory.OTHER
    comments: tuple[TaskComment, ...] = ()
    estimated_hours: float = 0.0
    actual_hours: float = 0.0
    tags: tuple[str, ...] = ()
    location: str = ""
    is_recurring: bool = False
    recurring_pattern: RecurringPattern = RecurringPattern.WEEKLY
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserSummary:
    user_id: int
    name: str
    email: str
    role: Role


@dataclass(frozen=True)
class MachineSummary:
    machine_id: int
    name: str
    model: str
    status: MachineStatus


@dataclass(frozen=True)
class TaskDetails:
    """A task joined with its assignee, creator and machine summaries."""

    task: Task
    assigned_user: Optional[UserSummary]
    created_by_user: Optional[UserSummary]
    machine_details: Optional[MachineSummary]

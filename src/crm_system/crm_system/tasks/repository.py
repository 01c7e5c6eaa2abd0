from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import TaskPriority, TaskStatus
from .model import Task


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_tasks(
        self,
        *,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        assigned_to: Optional[int] = None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Task], int]:
        """Return one page of tasks and the total number of matches."""
        raise NotImplementedError

    def list_all(self, *, assigned_to: Optional[int] = None) -> Sequence[Task]:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[Task]:
        raise NotImplementedError

    def count_by_assignee(self, user_id: int) -> int:
        raise NotImplementedError

    def create_task(self, fields: Mapping[str, Any]) -> int:
        """Insert a task from snake_case Task attribute names."""
        raise NotImplementedError

    def update_task(self, task_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, task_id: int) -> bool:
        raise NotImplementedError

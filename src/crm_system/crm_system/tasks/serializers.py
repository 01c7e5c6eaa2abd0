from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import isoformat_or_none, parse_iso_datetime
from .model import MachineSummary, Task, TaskComment, TaskDetails, UserSummary


def comment_to_dict(comment: TaskComment) -> dict:
    return {
        "id": comment.comment_id,
        "user": comment.user_id,
        "userName": comment.user_name,
        "comment": comment.comment,
        "createdAt": comment.created_at.isoformat(),
    }


def comment_from_dict(data: dict[str, Any]) -> TaskComment:
    created_at = data.get("createdAt")
    return TaskComment(
        comment_id=str(data.get("id") or ""),
        user_id=int(data.get("user") or 0),
        user_name=str(data.get("userName") or ""),
        comment=str(data.get("comment") or ""),
        created_at=parse_iso_datetime(created_at, "createdAt") if created_at else datetime.min,
    )


def _user_summary(user: Optional[UserSummary]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.user_id, "name": user.name, "email": user.email, "role": user.role.value}


def _machine_summary(machine: Optional[MachineSummary]) -> Optional[dict]:
    if machine is None:
        return None
    return {"id": machine.machine_id, "name": machine.name, "model": machine.model, "status": machine.status.value}


def task_to_dict(task: Task) -> dict:
    return {
        "id": task.task_id,
        "title": task.title,
        "description": task.description,
        "assignedTo": task.assigned_to,
        "employees": list(task.employees),
        "deadline": isoformat_or_none(task.deadline),
        "priority": task.priority.value,
        "status": task.status.value,
        "progress": task.progress,
        "machine": task.machine,
        "category": task.category.value,
        "comments": [comment_to_dict(c) for c in task.comments],
        "estimatedHours": task.estimated_hours,
        "actualHours": task.actual_hours,
        "tags": list(task.tags),
        "location": task.location,
        "isRecurring": task.is_recurring,
        "recurringPattern": task.recurring_pattern.value,
        "createdBy": task.created_by,
        "createdAt": isoformat_or_none(task.created_at),
        "updatedAt": isoformat_or_none(task.updated_at),
    }


def task_details_to_dict(details: TaskDetails) -> dict:
    data = task_to_dict(details.task)
    data["assignedUser"] = _user_summary(details.assigned_user)
    data["createdByUser"] = _user_summary(details.created_by_user)
    data["machineDetails"] = _machine_summary(details.machine_details)
    return data

from __future__ import annotations

from typing import Optional

from ..auth.gate import Action, AuthorizationGate, Caller
from ..core.constants import RECENT_ITEMS_LIMIT, UNASSIGNED_KEY, UNCATEGORIZED_KEY
from ..core.enums import MachineStatus, TaskStatus, UserStatus
from ..tasks.repository import TaskRepository
from ..tasks.serializers import task_to_dict
from ..users.repository import UserRepository
from ..users.serializers import user_to_dict
from .distribution import format_distribution, js_round, percentage
from .repository import AnalyticsRepository


class AnalyticsService:
    """Dashboard reports. Read-only, open to every authenticated caller."""

    def __init__(
        self,
        analytics: AnalyticsRepository,
        tasks: TaskRepository,
        users: UserRepository,
        gate: Optional[AuthorizationGate] = None,
    ):
        self._analytics = analytics
        self._tasks = tasks
        self._users = users
        self._gate = gate or AuthorizationGate()

    def dashboard(self, caller: Optional[Caller]) -> dict:
        self._gate.authorize(caller, Action.VIEW_ANALYTICS)
        a = self._analytics
        return {
            "overview": {
                "totalUsers": a.count("users"),
                "totalTasks": a.count("tasks"),
                "totalMachines": a.count("machines"),
                "machineEfficiency": js_round(a.average("machines", "efficiency")),
            },
            "taskStatusDistribution": format_distribution(a.grouped_counts("tasks", "status")),
            "taskPriorityDistribution": format_distribution(a.grouped_counts("tasks", "priority")),
            "machineStatusDistribution": format_distribution(a.grouped_counts("machines", "status")),
            "userRoleDistribution": format_distribution(a.grouped_counts("users", "role")),
            "recentTasks": self._recent_tasks(),
        }

    def task_report(self, caller: Optional[Caller]) -> dict:
        self._gate.authorize(caller, Action.VIEW_ANALYTICS)
        a = self._analytics
        total = a.count("tasks")
        completed = a.count("tasks", column="status", value=TaskStatus.COMPLETED)
        return {
            "completionRate": percentage(completed, total),
            "averageProgress": js_round(a.average("tasks", "progress")),
            "tasksByCategory": format_distribution(a.grouped_counts("tasks", "category"), UNCATEGORIZED_KEY),
            "tasksByUser": format_distribution(a.task_counts_by_assignee()),
            "totalTasks": total,
            "completedTasks": completed,
        }

    def machine_report(self, caller: Optional[Caller]) -> dict:
        self._gate.authorize(caller, Action.VIEW_ANALYTICS)
        a = self._analytics
        total = a.count("machines")
        operational = a.count("machines", column="status", value=MachineStatus.OPERATIONAL)
        return {
            "averageEfficiency": js_round(a.average("machines", "efficiency")),
            "machinesByDepartment": format_distribution(a.grouped_counts("machines", "department"), UNASSIGNED_KEY),
            "maintenanceFrequency": {name: count for name, count in a.maintenance_counts()},
            "operationalPercentage": percentage(operational, total),
            "totalMachines": total,
            "operationalMachines": operational,
        }

    def user_report(self, caller: Optional[Caller]) -> dict:
        self._gate.authorize(caller, Action.VIEW_ANALYTICS)
        a = self._analytics
        return {
            "userStatusDistribution": format_distribution(a.grouped_counts("users", "status")),
            "usersByDepartment": format_distribution(a.grouped_counts("users", "department"), UNASSIGNED_KEY),
            "tasksPerUser": format_distribution(a.task_counts_by_assignee()),
            "recentUsers": [user_to_dict(u) for u in self._users.list_recent(RECENT_ITEMS_LIMIT)],
            "totalUsers": a.count("users"),
            "activeUsers": a.count("users", column="status", value=UserStatus.ACTIVE),
        }

    def _recent_tasks(self) -> list[dict]:
        names: dict[int, Optional[dict]] = {}

        def brief(user_id: Optional[int]) -> Optional[dict]:
            if user_id is None:
                return None
            if user_id not in names:
                user = self._users.get_by_id(user_id)
                names[user_id] = {"id": user.user_id, "name": user.name} if user else None
            return names[user_id]

        recent = []
        for task in self._tasks.list_recent(RECENT_ITEMS_LIMIT):
            data = task_to_dict(task)
            data["assignedUser"] = brief(task.assigned_to)
            data["createdByUser"] = brief(task.created_by)
            recent.append(data)
        return recent

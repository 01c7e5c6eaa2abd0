from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .analytics.mysql_analytics_repository import MySQLAnalyticsRepository
from .analytics.repository import AnalyticsRepository
from .analytics.service import AnalyticsService
from .auth.gate import AuthorizationGate
from .database.connection import DBConfig, DatabaseConnection
from .machines.mysql_machine_repository import MySQLMachineRepository
from .machines.repository import MachineRepository
from .machines.service import MachineService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    machines_repo: MachineRepository
    tasks_repo: TaskRepository
    analytics_repo: AnalyticsRepository

    gate: AuthorizationGate
    auth_service: AuthService
    user_service: UserService
    machine_service: MachineService
    task_service: TaskService
    analytics_service: AnalyticsService


def wire_container(
    *,
    users_repo: UserRepository,
    machines_repo: MachineRepository,
    tasks_repo: TaskRepository,
    analytics_repo: AnalyticsRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service on top of the given repositories."""
    gate = AuthorizationGate()
    return Container(
        conn=conn,
        users_repo=users_repo,
        machines_repo=machines_repo,
        tasks_repo=tasks_repo,
        analytics_repo=analytics_repo,
        gate=gate,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, tasks_repo, gate),
        machine_service=MachineService(machines_repo, users_repo, gate),
        task_service=TaskService(tasks_repo, users_repo, machines_repo, gate),
        analytics_service=AnalyticsService(analytics_repo, tasks_repo, users_repo, gate),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire_container(
        users_repo=MySQLUserRepository(conn),
        machines_repo=MySQLMachineRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        analytics_repo=MySQLAnalyticsRepository(conn),
        conn=conn,
    )

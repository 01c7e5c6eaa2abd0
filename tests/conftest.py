from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any, Mapping, Optional

import pytest
from werkzeug.security import generate_password_hash

from crm_system.auth.gate import Caller
from crm_system.container import wire_container
from crm_system.core.enums import MachineStatus, Role
from crm_system.machines.model import Machine
from crm_system.tasks.model import Task
from crm_system.users.model import User

FIXED_NOW = datetime(2026, 3, 2, 9, 0, 0)


def _matches(item: Any, **filters: Any) -> bool:
    return all(getattr(item, k) == v for k, v in filters.items() if v is not None)


class FakeUsers:
    def __init__(self, users=()):
        self.rows: dict[int, User] = {u.user_id: u for u in users}
        self._next_id = max(self.rows, default=0) + 1

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.rows.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.rows.values() if u.email == email), None)

    def get_by_name(self, name: str, *, role: Optional[Role] = None) -> Optional[User]:
        return next(
            (u for _, u in sorted(self.rows.items()) if u.name == name and (role is None or u.role == role)),
            None,
        )

    def list_by_ids(self, user_ids):
        return [self.rows[i] for i in user_ids if i in self.rows]

    def list_users(self, *, role=None, department=None, status=None):
        return [u for u in self.rows.values() if _matches(u, role=role, department=department, status=status)]

    def list_recent(self, limit: int):
        return sorted(self.rows.values(), key=lambda u: u.user_id, reverse=True)[:limit]

    def create_user(self, *, name, email, password_hash, role, status, department, phone, address) -> int:
        user_id = self._next_id
        self._next_id += 1
        self.rows[user_id] = User(
            user_id=user_id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            status=status,
            department=department,
            phone=phone,
            address=address,
            created_at=FIXED_NOW,
        )
        return user_id

    def update_user(self, user_id: int, fields: Mapping[str, Any]) -> bool:
        if user_id not in self.rows:
            return False
        self.rows[user_id] = dataclasses.replace(self.rows[user_id], **fields)
        return True

    def set_password(self, user_id: int, password_hash: str) -> bool:
        return self.update_user(user_id, {"password_hash": password_hash})

    def touch_last_login(self, user_id: int, when: datetime) -> bool:
        return self.update_user(user_id, {"last_login": when})

    def delete_by_id(self, user_id: int) -> bool:
        return self.rows.pop(int(user_id), None) is not None


class FakeMachines:
    def __init__(self, machines=()):
        self.rows: dict[int, Machine] = {m.machine_id: m for m in machines}
        self._next_id = max(self.rows, default=0) + 1

    def get_by_id(self, machine_id: int) -> Optional[Machine]:
        return self.rows.get(int(machine_id))

    def get_by_name(self, name: str) -> Optional[Machine]:
        return next((m for m in self.rows.values() if m.name == name), None)

    def get_by_serial_number(self, serial_number: str) -> Optional[Machine]:
        return next((m for m in self.rows.values() if m.serial_number == serial_number), None)

    def list_machines(self, *, status=None, department=None, location=None, limit, offset):
        items = [m for m in self.rows.values() if _matches(m, status=status, department=department, location=location)]
        return items[offset:offset + limit], len(items)

    def list_all(self):
        return list(self.rows.values())

    def create_machine(self, fields: Mapping[str, Any]) -> int:
        machine_id = self._next_id
        self._next_id += 1
        self.rows[machine_id] = Machine(machine_id=machine_id, created_at=FIXED_NOW, **fields)
        return machine_id

    def update_machine(self, machine_id: int, fields: Mapping[str, Any]) -> bool:
        if machine_id not in self.rows:
            return False
        self.rows[machine_id] = dataclasses.replace(self.rows[machine_id], **fields)
        return True

    def delete_by_id(self, machine_id: int) -> bool:
        return self.rows.pop(int(machine_id), None) is not None


class FakeTasks:
    def __init__(self, tasks=()):
        self.rows: dict[int, Task] = {t.task_id: t for t in tasks}
        self._next_id = max(self.rows, default=0) + 1

    def get_by_id(self, task_id: int) -> Optional[Task]:
        return self.rows.get(int(task_id))

    def list_tasks(self, *, status=None, priority=None, assigned_to=None, limit, offset):
        items = [t for t in self.rows.values() if _matches(t, status=status, priority=priority, assigned_to=assigned_to)]
        return items[offset:offset + limit], len(items)

    def list_all(self, *, assigned_to=None):
        return [t for t in self.rows.values() if _matches(t, assigned_to=assigned_to)]

    def list_recent(self, limit: int):
        return sorted(self.rows.values(), key=lambda t: t.task_id, reverse=True)[:limit]

    def count_by_assignee(self, user_id: int) -> int:
        return len(self.list_all(assigned_to=user_id))

    def create_task(self, fields: Mapping[str, Any]) -> int:
        task_id = self._next_id
        self._next_id += 1
        self.rows[task_id] = Task(task_id=task_id, created_at=FIXED_NOW, **fields)
        return task_id

    def update_task(self, task_id: int, fields: Mapping[str, Any]) -> bool:
        if task_id not in self.rows:
            return False
        self.rows[task_id] = dataclasses.replace(self.rows[task_id], **fields)
        return True

    def delete_by_id(self, task_id: int) -> bool:
        return self.rows.pop(int(task_id), None) is not None


class FakeAnalytics:
    """Aggregates computed over the other fakes, mirroring the SQL queries."""

    def __init__(self, users: FakeUsers, machines: FakeMachines, tasks: FakeTasks):
        self._tables = {"users": users, "machines": machines, "tasks": tasks}

    def _rows(self, table: str):
        return list(self._tables[table].rows.values())

    def count(self, table, *, column=None, value=None):
        rows = self._rows(table)
        if column is None:
            return len(rows)
        return sum(1 for r in rows if getattr(r, column) == value)

    def grouped_counts(self, table, column):
        counts: dict[Any, int] = {}
        for r in self._rows(table):
            key = getattr(r, column)
            counts[key] = counts.get(key, 0) + 1
        return list(counts.items())

    def average(self, table, column):
        values = [getattr(r, column) for r in self._rows(table)]
        return sum(values) / len(values) if values else None

    def task_counts_by_assignee(self):
        users = self._tables["users"]
        counts: dict[str, int] = {}
        for t in self._rows("tasks"):
            user = users.get_by_id(t.assigned_to)
            if user:
                counts[user.name] = counts.get(user.name, 0) + 1
        return list(counts.items())

    def maintenance_counts(self):
        return [(m.name, len(m.maintenance_history)) for m in self._rows("machines")]


def make_user(user_id: int, name: str, role: Role, **kwargs) -> User:
    kwargs.setdefault("email", f"{name.lower()}@crm.local")
    kwargs.setdefault("password_hash", "not-a-hash")
    return User(user_id=user_id, name=name, role=role, **kwargs)


def make_task(task_id: int, **kwargs) -> Task:
    kwargs.setdefault("title", f"Task {task_id}")
    kwargs.setdefault("description", "Routine work")
    kwargs.setdefault("assigned_to", 5)
    kwargs.setdefault("deadline", datetime(2026, 3, 9, 9, 0, 0))
    kwargs.setdefault("employees", (10, 11))
    kwargs.setdefault("created_by", 1)
    return Task(task_id=task_id, **kwargs)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def users_repo() -> FakeUsers:
    return FakeUsers(
        [
            make_user(1, "Root", Role.ADMIN, password_hash=generate_password_hash("admin123")),
            make_user(2, "Deputy", Role.SUB_ADMIN),
            make_user(5, "Ana", Role.MANAGER),
            make_user(6, "Marco", Role.MANAGER, department="Assembly"),
            make_user(10, "Ben", Role.EMPLOYEE, password_hash=generate_password_hash("ben-pass")),
            make_user(11, "Cara", Role.EMPLOYEE, department=None),
        ]
    )


@pytest.fixture
def machines_repo() -> FakeMachines:
    return FakeMachines(
        [
            Machine(machine_id=1, name="Press A", model="HX-200", location="Hall 1", efficiency=90.0),
            Machine(
                machine_id=2,
                name="Lathe B",
                model="LT-5",
                location="Hall 2",
                status=MachineStatus.MAINTENANCE,
                department=None,
                efficiency=75.0,
            ),
        ]
    )


@pytest.fixture
def tasks_repo() -> FakeTasks:
    return FakeTasks([make_task(7, title="Calibrate press", machine=1)])


@pytest.fixture
def container(users_repo, machines_repo, tasks_repo):
    return wire_container(
        users_repo=users_repo,
        machines_repo=machines_repo,
        tasks_repo=tasks_repo,
        analytics_repo=FakeAnalytics(users_repo, machines_repo, tasks_repo),
    )


@pytest.fixture
def admin() -> Caller:
    return Caller(user_id=1, role=Role.ADMIN, name="Root")


@pytest.fixture
def sub_admin() -> Caller:
    return Caller(user_id=2, role=Role.SUB_ADMIN, name="Deputy")


@pytest.fixture
def manager() -> Caller:
    return Caller(user_id=5, role=Role.MANAGER, name="Ana")


@pytest.fixture
def employee() -> Caller:
    return Caller(user_id=10, role=Role.EMPLOYEE, name="Ben")


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from crm_system.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client):
    """Log ``client`` in by writing the session the login route would write."""

    def _login(caller: Caller):
        with client.session_transaction() as sess:
            sess["user_id"] = caller.user_id
        return client

    return _login


from __future__ import annotations

import pytest

from conftest import make_task
from crm_system.auth.gate import EMPLOYEE_TASK_FIELDS, Action, AuthorizationGate, Caller
from crm_system.core.enums import Role
from crm_system.core.exceptions import AuthenticationError, AuthorizationError

gate = AuthorizationGate()

ADMIN = Caller(1, Role.ADMIN)
SUB_ADMIN = Caller(2, Role.SUB_ADMIN)
MANAGER = Caller(5, Role.MANAGER)
EMPLOYEE = Caller(10, Role.EMPLOYEE)


def test_missing_caller_is_unauthenticated():
    with pytest.raises(AuthenticationError):
        gate.authorize(None, Action.LIST_MACHINES)


@pytest.mark.parametrize("action", list(Action))
def test_admin_and_sub_admin_are_equivalent(action):
    task = make_task(7)
    assert gate.is_allowed(ADMIN, action, task=task)
    assert gate.is_allowed(SUB_ADMIN, action, task=task)


@pytest.mark.parametrize(
    "action",
    [
        Action.LIST_USERS,
        Action.CREATE_USER,
        Action.DELETE_USER,
        Action.RESET_USER_PASSWORD,
        Action.VIEW_USER_STATS,
        Action.CREATE_MACHINE,
        Action.DELETE_MACHINE,
        Action.DELETE_TASK,
    ],
)
def test_manager_denied_full_access_actions(action):
    with pytest.raises(AuthorizationError, match="User role Manager is not authorized"):
        gate.authorize(MANAGER, action)


@pytest.mark.parametrize(
    "action",
    [
        Action.LIST_EMPLOYEES,
        Action.CREATE_TASK,
        Action.UPDATE_MACHINE_STATUS,
        Action.ADD_MAINTENANCE_RECORD,
        Action.LIST_EMPLOYEE_TASKS,
    ],
)
def test_manager_allowed_supervisor_actions(action):
    assert gate.authorize(MANAGER, action) is MANAGER


@pytest.mark.parametrize("action", [Action.LIST_EMPLOYEES, Action.CREATE_TASK, Action.UPDATE_MACHINE_STATUS])
def test_employee_denied_supervisor_actions(action):
    assert not gate.is_allowed(EMPLOYEE, action)


@pytest.mark.parametrize(
    "action, message",
    [
        (Action.READ_TASK, "Not authorized to access this task"),
        (Action.UPDATE_TASK, "Not authorized to update this task"),
        (Action.UPDATE_TASK_PROGRESS, "Not authorized to update this task"),
        (Action.COMMENT_TASK, "Not authorized to comment on this task"),
    ],
)
def test_employee_denied_on_tasks_of_other_assignees(action, message):
    task = make_task(7, assigned_to=5, employees=(10, 11))

    with pytest.raises(AuthorizationError, match=message):
        gate.authorize(EMPLOYEE, action, task=task)


def test_employee_allowed_on_own_task():
    task = make_task(8, assigned_to=EMPLOYEE.user_id)

    for action in (Action.READ_TASK, Action.UPDATE_TASK, Action.UPDATE_TASK_PROGRESS, Action.COMMENT_TASK):
        assert gate.is_allowed(EMPLOYEE, action, task=task)


def test_manager_has_no_ownership_restriction():
    task = make_task(7, assigned_to=6)
    assert gate.is_allowed(MANAGER, Action.UPDATE_TASK, task=task)


def test_employee_update_keeps_only_allowed_fields():
    payload = {"title": "x", "description": "y", "assignedTo": 6, "progress": 40, "status": "Pending", "machine": 1}

    restricted = AuthorizationGate.restrict_task_update(EMPLOYEE, payload)

    assert set(restricted) == {"progress", "status", "machine"}
    assert set(restricted) <= EMPLOYEE_TASK_FIELDS


def test_non_employee_update_is_not_restricted():
    payload = {"title": "x", "progress": 40}
    assert AuthorizationGate.restrict_task_update(MANAGER, payload) == payload


def test_custom_permission_table():
    strict = AuthorizationGate({Action.LIST_MACHINES: frozenset({Role.ADMIN})})
    assert strict.is_allowed(ADMIN, Action.LIST_MACHINES)
    assert not strict.is_allowed(MANAGER, Action.LIST_MACHINES)
    assert not strict.is_allowed(ADMIN, Action.LIST_TASKS)

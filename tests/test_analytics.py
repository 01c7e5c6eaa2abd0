from __future__ import annotations

import pytest

from conftest import make_task
from crm_system.analytics.distribution import format_distribution, js_round, percentage
from crm_system.core.enums import MachineStatus, TaskCategory, TaskStatus
from crm_system.core.exceptions import AuthenticationError


@pytest.fixture
def service(container):
    return container.analytics_service


@pytest.mark.parametrize("value, expected", [(2.5, 3), (2.4999, 2), (-2.5, -2), (82.5, 83), (None, 0), (0, 0)])
def test_js_round(value, expected):
    assert js_round(value) == expected


def test_percentage_of_empty_total():
    assert percentage(0, 0) == 0
    assert percentage(1, 3) == 33


def test_format_distribution_with_sentinel():
    rows = [(None, 2), ("", 1), ("Assembly", 3)]

    assert format_distribution(rows, "Unassigned") == {"Unassigned": 3, "Assembly": 3}
    assert format_distribution(rows) == {"Assembly": 3}


def test_format_distribution_uses_enum_values():
    rows = [(MachineStatus.OPERATIONAL, 4), (MachineStatus.REPAIR, 1)]
    assert format_distribution(rows) == {"Operational": 4, "Repair": 1}


def test_reports_require_a_caller(service):
    with pytest.raises(AuthenticationError):
        service.dashboard(None)


def test_dashboard(service, employee):
    data = service.dashboard(employee)

    assert data["overview"] == {"totalUsers": 6, "totalTasks": 1, "totalMachines": 2, "machineEfficiency": 83}
    assert data["taskStatusDistribution"] == {"Pending": 1}
    assert data["taskPriorityDistribution"] == {"Medium": 1}
    assert data["machineStatusDistribution"] == {"Operational": 1, "Maintenance": 1}
    assert data["userRoleDistribution"] == {"Admin": 1, "Sub Admin": 1, "Manager": 2, "Employee": 2}
    recent = data["recentTasks"][0]
    assert recent["id"] == 7
    assert recent["assignedUser"] == {"id": 5, "name": "Ana"}
    assert recent["createdByUser"] == {"id": 1, "name": "Root"}


def test_task_report(service, tasks_repo, manager):
    tasks_repo.rows[8] = make_task(
        8, assigned_to=6, status=TaskStatus.COMPLETED, progress=100, category=TaskCategory.MAINTENANCE
    )
    tasks_repo.rows[9] = make_task(9, assigned_to=404)

    data = service.task_report(manager)

    assert data["totalTasks"] == 3
    assert data["completedTasks"] == 1
    assert data["completionRate"] == 33
    assert data["averageProgress"] == 33
    assert data["tasksByCategory"] == {"Other": 2, "Maintenance": 1}
    assert data["tasksByUser"] == {"Ana": 1, "Marco": 1}


def test_machine_report(service, manager):
    data = service.machine_report(manager)

    assert data["averageEfficiency"] == 83
    assert data["machinesByDepartment"] == {"Production": 1, "Unassigned": 1}
    assert data["maintenanceFrequency"] == {"Press A": 0, "Lathe B": 0}
    assert data["operationalPercentage"] == 50
    assert data["totalMachines"] == 2
    assert data["operationalMachines"] == 1


def test_machine_report_counts_history(container, manager, fixed_now):
    container.machine_service.update_status(manager, 1, "Repair", now=fixed_now)
    container.machine_service.add_maintenance_record(manager, 1, {"description": "Fix"}, now=fixed_now)

    data = container.analytics_service.machine_report(manager)

    assert data["maintenanceFrequency"]["Press A"] == 2
    assert data["operationalPercentage"] == 0


def test_user_report(service, employee):
    data = service.user_report(employee)

    assert data["userStatusDistribution"] == {"Active": 6}
    assert data["usersByDepartment"] == {"General": 4, "Assembly": 1, "Unassigned": 1}
    assert data["tasksPerUser"] == {"Ana": 1}
    assert data["totalUsers"] == 6
    assert data["activeUsers"] == 6
    assert len(data["recentUsers"]) == 6
    assert all("password" not in u and "passwordHash" not in u for u in data["recentUsers"])


def test_empty_store_reports_zero(service, tasks_repo, machines_repo, admin):
    tasks_repo.rows.clear()
    machines_repo.rows.clear()

    assert service.dashboard(admin)["overview"]["machineEfficiency"] == 0
    assert service.task_report(admin)["completionRate"] == 0
    assert service.machine_report(admin)["operationalPercentage"] == 0

from __future__ import annotations

import dataclasses

import pytest

from conftest import make_task
from crm_system.core.enums import Role, UserStatus


def test_health_is_public(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "OK"


def test_unknown_route(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "Route not found"}


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/users"),
        ("get", "/api/machines"),
        ("post", "/api/tasks"),
        ("get", "/api/tasks/7"),
        ("get", "/api/tasks/filter/5"),
        ("get", "/api/analytics/dashboard"),
        ("get", "/api/auth/me"),
    ],
)
def test_anonymous_requests_are_rejected(client, method, path):
    resp = getattr(client, method)(path)

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_login_and_me(client):
    resp = client.post("/api/auth/login", json={"email": "root@crm.local", "password": "admin123"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["role"] == "Admin"

    me = client.get("/api/auth/me").get_json()["data"]
    assert me["id"] == 1
    assert "passwordHash" not in me

    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401


def test_login_failure(client):
    resp = client.post("/api/auth/login", json={"email": "root@crm.local", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid credentials"


def test_list_machines_envelope(login_as, employee):
    client = login_as(employee)

    body = client.get("/api/machines?page=abc&limit=-3").get_json()

    assert body["success"] is True
    assert body["count"] == 2
    assert body["pagination"] == {"total": 2, "pages": 1, "currentPage": 1, "limit": 10}
    assert {m["name"] for m in body["data"]} == {"Press A", "Lathe B"}


def test_create_task_scenario(login_as, manager):
    client = login_as(manager)

    resp = client.post(
        "/api/tasks",
        json={"title": "Inspect line", "description": "Weekly inspection", "assignedTo": 5, "employees": [10, 11]},
    )

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["priority"] == "Medium"
    assert data["status"] == "Pending"
    assert data["category"] == "Production"
    assert data["assignedUser"] == {"id": 5, "name": "Ana", "email": "ana@crm.local", "role": "Manager"}
    assert data["machineDetails"] is None


def test_create_task_with_bad_employee(login_as, tasks_repo, manager):
    client = login_as(manager)

    resp = client.post(
        "/api/tasks",
        json={"title": "t", "description": "d", "assignedTo": 5, "employees": [10, 1]},
    )

    assert resp.status_code == 404
    assert list(tasks_repo.rows) == [7]


def test_employee_cannot_update_foreign_task(login_as, tasks_repo, employee):
    client = login_as(employee)
    before = tasks_repo.rows[7]

    resp = client.put("/api/tasks/7", json={"progress": 50})

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Not authorized to update this task"
    assert tasks_repo.rows[7] == before


def test_missing_task_is_404_for_employee(login_as, employee):
    assert login_as(employee).get("/api/tasks/999").status_code == 404


def test_progress_completes_task(login_as, manager):
    resp = login_as(manager).put("/api/tasks/7/progress", json={"progress": 100})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "Completed"


def test_progress_out_of_range(login_as, manager):
    resp = login_as(manager).put("/api/tasks/7/progress", json={"progress": 150})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Progress must be between 0 and 100"


def test_comment_roundtrip(login_as, manager):
    resp = login_as(manager).post("/api/tasks/7/comments", json={"comment": "Parts ordered"})

    comment = resp.get_json()["data"]["comments"][-1]
    assert comment["user"] == 5
    assert comment["userName"] == "Ana"
    assert comment["comment"] == "Parts ordered"


def test_filter_by_user(login_as, tasks_repo, employee):
    tasks_repo.rows[8] = make_task(8, assigned_to=10)
    client = login_as(employee)

    body = client.get("/api/tasks/filter/10").get_json()
    assert body["count"] == 1
    assert body["data"][0]["id"] == 8

    assert client.get("/api/tasks/filter/5").get_json()["count"] == 2
    assert client.get("/api/tasks/filter/999").status_code == 404


def test_delete_user_guard(login_as, admin):
    client = login_as(admin)

    resp = client.delete("/api/users/5")
    assert resp.status_code == 400
    assert "reassign tasks" in resp.get_json()["message"]

    assert client.delete("/api/tasks/7").status_code == 200
    assert client.delete("/api/users/5").status_code == 200
    assert client.get("/api/users/5").status_code == 404


def test_reset_password_returns_new_password(login_as, sub_admin):
    resp = login_as(sub_admin).put("/api/users/10/reset-password")

    assert resp.status_code == 200
    assert len(resp.get_json()["data"]["newPassword"]) == 16


def test_user_stats_forbidden_for_manager(login_as, manager):
    resp = login_as(manager).get("/api/users/stats")

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "User role Manager is not authorized to access this route"


def test_machine_status_by_manager(login_as, manager):
    resp = login_as(manager).put("/api/machines/1/status", json={"status": "Maintenance", "notes": "Noise"})

    data = resp.get_json()["data"]
    assert data["status"] == "Maintenance"
    history = data["maintenanceHistory"][-1]
    assert history["type"] == "Status Change"
    assert (history["statusFrom"], history["statusTo"]) == ("Operational", "Maintenance")


def test_analytics_machines(login_as, employee):
    data = login_as(employee).get("/api/analytics/machines").get_json()["data"]

    assert data["machinesByDepartment"] == {"Production": 1, "Unassigned": 1}


def test_non_object_body_is_rejected(login_as, admin):
    resp = login_as(admin).post("/api/machines", json=["not", "an", "object"])

    assert resp.status_code == 400


def test_deleted_user_session_is_rejected(login_as, users_repo, admin):
    client = login_as(admin)
    del users_repo.rows[1]

    assert client.get("/api/users").status_code == 401
    assert client.get("/api/auth/me").status_code == 401


def test_suspended_user_session_is_rejected(login_as, users_repo, manager):
    client = login_as(manager)
    users_repo.rows[5] = dataclasses.replace(users_repo.rows[5], status=UserStatus.SUSPENDED)

    resp = client.put("/api/tasks/7/progress", json={"progress": 20})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_demoted_user_gets_stored_role(login_as, users_repo, tasks_repo, admin):
    client = login_as(admin)
    users_repo.rows[1] = dataclasses.replace(users_repo.rows[1], role=Role.EMPLOYEE)

    assert client.get("/api/users").status_code == 403
    assert client.delete("/api/tasks/7").status_code == 403
    assert 7 in tasks_repo.rows
    assert client.get("/api/auth/me").get_json()["data"]["role"] == "Employee"


def test_infinite_progress_is_rejected(login_as, manager):
    resp = login_as(manager).put(
        "/api/tasks/7/progress", data='{"progress": Infinity}', content_type="application/json"
    )

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Progress must be an integer"

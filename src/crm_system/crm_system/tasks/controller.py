from __future__ import annotations

from flask import Flask, request

from ..auth.session import current_caller, login_required
from ..common.pagination import PageRequest
from ..common.responses import json_body, ok
from ..container import Container
from .serializers import task_details_to_dict


def register(app: Flask, container: Container) -> None:
    service = container.task_service

    def _page() -> PageRequest:
        return PageRequest.from_query(request.args.get("page"), request.args.get("limit"))

    @app.route("/api/tasks", methods=["GET"], endpoint="tasks_list")
    @login_required
    def list_tasks():
        page = service.list_tasks(
            current_caller(),
            _page(),
            status=request.args.get("status"),
            priority=request.args.get("priority"),
            assigned_to=request.args.get("assignedTo"),
        )
        return ok([task_details_to_dict(t) for t in page.items], count=len(page.items), page=page)

    @app.route("/api/tasks", methods=["POST"], endpoint="tasks_create")
    @login_required
    def create_task():
        details = service.create_task(current_caller(), json_body())
        return ok(task_details_to_dict(details), status=201)

    @app.route("/api/tasks/employee/<int:user_id>", methods=["GET"], endpoint="tasks_employee")
    @login_required
    def employee_tasks(user_id: int):
        page = service.list_employee_tasks(current_caller(), user_id, _page())
        return ok([task_details_to_dict(t) for t in page.items], count=len(page.items), page=page)

    @app.route("/api/tasks/filter/<int:user_id>", methods=["GET"], endpoint="tasks_filter")
    @login_required
    def tasks_for_user(user_id: int):
        tasks = service.tasks_for_user(current_caller(), user_id)
        return ok([task_details_to_dict(t) for t in tasks], count=len(tasks))

    @app.route("/api/tasks/<int:task_id>", methods=["GET"], endpoint="tasks_get")
    @login_required
    def get_task(task_id: int):
        return ok(task_details_to_dict(service.get_task(current_caller(), task_id)))

    @app.route("/api/tasks/<int:task_id>", methods=["PUT"], endpoint="tasks_update")
    @login_required
    def update_task(task_id: int):
        details = service.update_task(current_caller(), task_id, json_body())
        return ok(task_details_to_dict(details))

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="tasks_delete")
    @login_required
    def delete_task(task_id: int):
        service.delete_task(current_caller(), task_id)
        return ok({}, message="Task deleted successfully")

    @app.route("/api/tasks/<int:task_id>/progress", methods=["PUT"], endpoint="tasks_progress")
    @login_required
    def update_progress(task_id: int):
        details = service.update_progress(current_caller(), task_id, json_body().get("progress"))
        return ok(task_details_to_dict(details))

    @app.route("/api/tasks/<int:task_id>/comments", methods=["POST"], endpoint="tasks_comment")
    @login_required
    def add_comment(task_id: int):
        details = service.add_comment(current_caller(), task_id, json_body().get("comment"))
        return ok(task_details_to_dict(details))

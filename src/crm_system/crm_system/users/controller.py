from __future__ import annotations

from flask import Flask, request

from ..auth.session import current_caller, login_required
from ..common.responses import json_body, ok
from ..container import Container
from .serializers import user_to_dict


def register(app: Flask, container: Container) -> None:
    service = container.user_service

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @login_required
    def list_users():
        users = service.list_users(
            current_caller(),
            role=request.args.get("role"),
            department=request.args.get("department"),
            status=request.args.get("status"),
        )
        return ok([user_to_dict(u) for u in users], count=len(users))

    @app.route("/api/users", methods=["POST"], endpoint="users_create")
    @login_required
    def create_user():
        user = service.create_user(current_caller(), json_body())
        return ok(user_to_dict(user), status=201)

    @app.route("/api/users/employees", methods=["GET"], endpoint="users_employees")
    @login_required
    def list_employees():
        employees = service.list_employees(current_caller())
        return ok([user_to_dict(u) for u in employees], count=len(employees))

    @app.route("/api/users/stats", methods=["GET"], endpoint="users_stats")
    @login_required
    def user_stats():
        return ok(service.user_stats(current_caller()))

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="users_get")
    @login_required
    def get_user(user_id: int):
        return ok(user_to_dict(service.get_user(current_caller(), user_id)))

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="users_update")
    @login_required
    def update_user(user_id: int):
        user = service.update_user(current_caller(), user_id, json_body())
        return ok(user_to_dict(user))

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="users_delete")
    @login_required
    def delete_user(user_id: int):
        service.delete_user(current_caller(), user_id)
        return ok({}, message="User deleted successfully")

    @app.route("/api/users/<int:user_id>/reset-password", methods=["PUT"], endpoint="users_reset_password")
    @login_required
    def reset_password(user_id: int):
        new_password = service.reset_password(current_caller(), user_id)
        return ok({"newPassword": new_password}, message="Password reset successfully")

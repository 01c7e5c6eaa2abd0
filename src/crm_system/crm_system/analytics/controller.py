from __future__ import annotations

from flask import Flask

from ..auth.session import current_caller, login_required
from ..common.responses import ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.analytics_service

    @app.route("/api/analytics/dashboard", methods=["GET"], endpoint="analytics_dashboard")
    @login_required
    def dashboard():
        return ok(service.dashboard(current_caller()))

    @app.route("/api/analytics/tasks", methods=["GET"], endpoint="analytics_tasks")
    @login_required
    def task_report():
        return ok(service.task_report(current_caller()))

    @app.route("/api/analytics/machines", methods=["GET"], endpoint="analytics_machines")
    @login_required
    def machine_report():
        return ok(service.machine_report(current_caller()))

    @app.route("/api/analytics/users", methods=["GET"], endpoint="analytics_users")
    @login_required
    def user_report():
        return ok(service.user_report(current_caller()))

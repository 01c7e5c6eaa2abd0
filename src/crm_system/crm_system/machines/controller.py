from __future__ import annotations

from flask import Flask, request

from ..auth.session import current_caller, login_required
from ..common.pagination import PageRequest
from ..common.responses import json_body, ok
from ..container import Container
from .serializers import machine_to_dict


def register(app: Flask, container: Container) -> None:
    service = container.machine_service

    @app.route("/api/machines", methods=["GET"], endpoint="machines_list")
    @login_required
    def list_machines():
        page = service.list_machines(
            current_caller(),
            PageRequest.from_query(request.args.get("page"), request.args.get("limit")),
            status=request.args.get("status"),
            department=request.args.get("department"),
            location=request.args.get("location"),
        )
        return ok([machine_to_dict(m) for m in page.items], count=len(page.items), page=page)

    @app.route("/api/machines", methods=["POST"], endpoint="machines_create")
    @login_required
    def create_machine():
        machine = service.create_machine(current_caller(), json_body())
        return ok(machine_to_dict(machine), status=201)

    @app.route("/api/machines/<int:machine_id>", methods=["GET"], endpoint="machines_get")
    @login_required
    def get_machine(machine_id: int):
        return ok(machine_to_dict(service.get_machine(current_caller(), machine_id)))

    @app.route("/api/machines/<int:machine_id>", methods=["PUT"], endpoint="machines_update")
    @login_required
    def update_machine(machine_id: int):
        machine = service.update_machine(current_caller(), machine_id, json_body())
        return ok(machine_to_dict(machine))

    @app.route("/api/machines/<int:machine_id>", methods=["DELETE"], endpoint="machines_delete")
    @login_required
    def delete_machine(machine_id: int):
        service.delete_machine(current_caller(), machine_id)
        return ok({}, message="Machine deleted successfully")

    @app.route("/api/machines/<int:machine_id>/status", methods=["PUT"], endpoint="machines_status")
    @login_required
    def update_status(machine_id: int):
        body = json_body()
        machine = service.update_status(current_caller(), machine_id, body.get("status"), notes=body.get("notes"))
        return ok(machine_to_dict(machine))

    @app.route("/api/machines/<int:machine_id>/maintenance", methods=["POST"], endpoint="machines_maintenance")
    @login_required
    def add_maintenance(machine_id: int):
        machine = service.add_maintenance_record(current_caller(), machine_id, json_body())
        return ok(machine_to_dict(machine))

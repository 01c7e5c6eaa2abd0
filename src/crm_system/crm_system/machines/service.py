from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from ..auth.gate import Action, AuthorizationGate, Caller
from ..common.datetime_utils import now_local, parse_optional_datetime
from ..common.pagination import Page, PageRequest
from ..common.validators import (
    require_enum,
    require_int_in_range,
    require_max_length,
    require_non_empty,
    require_number,
)
from ..core.constants import DEFAULT_MACHINE_DEPARTMENT, DEFAULT_MAINTENANCE_INTERVAL_DAYS, MACHINE_NOTES_MAX_LENGTH
from ..core.enums import MachineStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Machine, MaintenanceRecord
from .repository import MachineRepository

logger = logging.getLogger(__name__)

STATUS_CHANGE_TYPE = "Status Change"
DEFAULT_MAINTENANCE_TYPE = "Preventive"


class MachineService:
    def __init__(self, machines: MachineRepository, users: UserRepository, gate: Optional[AuthorizationGate] = None):
        self._machines = machines
        self._users = users
        self._gate = gate or AuthorizationGate()

    def list_machines(
        self,
        caller: Optional[Caller],
        page: PageRequest,
        *,
        status: Optional[str] = None,
        department: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Page[Machine]:
        self._gate.authorize(caller, Action.LIST_MACHINES)
        items, total = self._machines.list_machines(
            status=require_enum(MachineStatus, status, "Status") if status else None,
            department=department or None,
            location=location or None,
            limit=page.limit,
            offset=page.offset,
        )
        return Page(items=items, total=total, request=page)

    def get_machine(self, caller: Optional[Caller], machine_id: int) -> Machine:
        self._gate.authorize(caller, Action.READ_MACHINE)
        return self._require_machine(machine_id)

    def create_machine(self, caller: Optional[Caller], payload: Mapping[str, Any]) -> Machine:
        self._gate.authorize(caller, Action.CREATE_MACHINE)

        for key, label in (("name", "Name"), ("model", "Model"), ("location", "Location")):
            require_non_empty(payload.get(key), label)

        fields = self._parse_fields(payload)
        fields.setdefault("status", MachineStatus.OPERATIONAL)
        fields.setdefault("department", DEFAULT_MACHINE_DEPARTMENT)
        fields.setdefault("installation_date", now_local())
        fields.setdefault("maintenance_interval", DEFAULT_MAINTENANCE_INTERVAL_DAYS)
        fields.setdefault("specifications", {})
        fields["maintenance_history"] = ()

        self._ensure_unique(fields)
        machine_id = self._machines.create_machine(fields)
        logger.info("Machine %s (%s) created by %s", machine_id, fields["name"], caller.user_id)
        return self._require_machine(machine_id)

    def update_machine(self, caller: Optional[Caller], machine_id: int, payload: Mapping[str, Any]) -> Machine:
        self._gate.authorize(caller, Action.UPDATE_MACHINE)
        machine = self._require_machine(machine_id)

        fields = self._parse_fields(payload)
        self._ensure_unique(fields, current=machine)
        self._machines.update_machine(machine.machine_id, fields)
        logger.info("Machine %s updated by %s", machine.machine_id, caller.user_id)
        return self._require_machine(machine.machine_id)

    def delete_machine(self, caller: Optional[Caller], machine_id: int) -> None:
        self._gate.authorize(caller, Action.DELETE_MACHINE)
        machine = self._require_machine(machine_id)
        if not self._machines.delete_by_id(machine.machine_id):
            raise NotFoundError("Machine not found")
        logger.info("Machine %s deleted by %s", machine.machine_id, caller.user_id)

    def update_status(
        self,
        caller: Optional[Caller],
        machine_id: int,
        status: Any,
        *,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Machine:
        """Move a machine to ``status`` and record the transition in its history."""
        self._gate.authorize(caller, Action.UPDATE_MACHINE_STATUS)
        if not status:
            raise ValidationError("Status is required")
        new_status = require_enum(MachineStatus, status, "Status")
        machine = self._require_machine(machine_id)

        description = (notes or "").strip() or f"Status changed from {machine.status.value} to {new_status.value}"
        record = MaintenanceRecord(
            record_id=str(uuid.uuid4()),
            maintenance_type=STATUS_CHANGE_TYPE,
            description=description,
            performed_by=caller.user_id,
            performed_at=now or now_local(),
            status_from=machine.status,
            status_to=new_status,
        )
        self._machines.update_machine(
            machine.machine_id,
            {
                "status": new_status,
                "maintenance_history": (*machine.maintenance_history, record),
            },
        )
        logger.info(
            "Machine %s status %s -> %s by %s",
            machine.machine_id,
            machine.status.value,
            new_status.value,
            caller.user_id,
        )
        return self._require_machine(machine.machine_id)

    def add_maintenance_record(
        self,
        caller: Optional[Caller],
        machine_id: int,
        payload: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> Machine:
        self._gate.authorize(caller, Action.ADD_MAINTENANCE_RECORD)
        machine = self._require_machine(machine_id)

        description = require_non_empty(payload.get("description"), "Description")
        maintenance_type = str(payload.get("type") or DEFAULT_MAINTENANCE_TYPE).strip()
        cost = require_number(payload.get("cost") or 0, "Cost", minimum=0)
        performed_at = parse_optional_datetime(payload.get("performedAt"), "performedAt") or now or now_local()
        next_maintenance = parse_optional_datetime(payload.get("nextMaintenance"), "nextMaintenance")
        if next_maintenance is None:
            next_maintenance = performed_at + timedelta(days=machine.maintenance_interval)

        record = MaintenanceRecord(
            record_id=str(uuid.uuid4()),
            maintenance_type=maintenance_type,
            description=description,
            performed_by=caller.user_id,
            performed_at=performed_at,
            cost=cost,
        )
        self._machines.update_machine(
            machine.machine_id,
            {
                "maintenance_history": (*machine.maintenance_history, record),
                "last_maintenance": performed_at,
                "next_maintenance": next_maintenance,
            },
        )
        logger.info("Maintenance record added to machine %s by %s", machine.machine_id, caller.user_id)
        return self._require_machine(machine.machine_id)

    def _parse_fields(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        fields: dict[str, Any] = {}

        for key in ("name", "model", "location"):
            if key in payload:
                fields[key] = require_non_empty(payload[key], key.capitalize())
        for key in ("department", "manufacturer"):
            if key in payload:
                fields[key] = None if payload[key] is None else str(payload[key]).strip()
        if "manufacturer" in fields and fields["manufacturer"] is None:
            fields["manufacturer"] = ""
        if "serialNumber" in payload:
            serial = payload["serialNumber"]
            fields["serial_number"] = str(serial).strip() if serial not in (None, "") else None
        if "status" in payload:
            fields["status"] = require_enum(MachineStatus, payload["status"], "Status")
        for key, attr in (
            ("installationDate", "installation_date"),
            ("lastMaintenance", "last_maintenance"),
            ("nextMaintenance", "next_maintenance"),
        ):
            if key in payload:
                fields[attr] = parse_optional_datetime(payload[key], key)
        if "maintenanceInterval" in payload:
            fields["maintenance_interval"] = require_int_in_range(
                payload["maintenanceInterval"], "Maintenance interval", 1, 3650
            )
        if "specifications" in payload:
            specs = payload["specifications"] or {}
            if not isinstance(specs, dict):
                raise ValidationError("Specifications must be an object")
            fields["specifications"] = {str(k): str(v) for k, v in specs.items()}
        if "assignedTechnician" in payload:
            fields["assigned_technician"] = self._technician_id(payload["assignedTechnician"])
        if "operatingHours" in payload:
            fields["operating_hours"] = require_number(payload["operatingHours"], "Operating hours", minimum=0)
        if "efficiency" in payload:
            fields["efficiency"] = require_number(payload["efficiency"], "Efficiency", minimum=0, maximum=100)
        if "notes" in payload:
            notes = payload["notes"]
            fields["notes"] = require_max_length(None if notes is None else str(notes), "Notes", MACHINE_NOTES_MAX_LENGTH)

        return fields

    def _technician_id(self, value: Any) -> Optional[int]:
        if value in (None, ""):
            return None
        try:
            technician_id = int(value)
        except (TypeError, ValueError):
            raise ValidationError("Assigned technician is invalid")
        if not self._users.get_by_id(technician_id):
            raise NotFoundError("Assigned technician not found")
        return technician_id

    def _ensure_unique(self, fields: Mapping[str, Any], *, current: Optional[Machine] = None) -> None:
        name = fields.get("name")
        if name:
            existing = self._machines.get_by_name(name)
            if existing and (current is None or existing.machine_id != current.machine_id):
                raise ConflictError("Machine with this name already exists")
        serial = fields.get("serial_number")
        if serial:
            existing = self._machines.get_by_serial_number(serial)
            if existing and (current is None or existing.machine_id != current.machine_id):
                raise ConflictError("Machine with this serial number already exists")

    def _require_machine(self, machine_id: int) -> Machine:
        machine = self._machines.get_by_id(int(machine_id))
        if not machine:
            raise NotFoundError("Machine not found")
        return machine

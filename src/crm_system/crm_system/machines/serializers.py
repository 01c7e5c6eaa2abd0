from __future__ import annotations

from datetime import datetime
from typing import Any

from ..common.datetime_utils import isoformat_or_none, parse_iso_datetime
from ..core.enums import MachineStatus
from .model import Machine, MaintenanceRecord


def maintenance_record_to_dict(record: MaintenanceRecord) -> dict:
    return {
        "id": record.record_id,
        "type": record.maintenance_type,
        "description": record.description,
        "performedBy": record.performed_by,
        "performedAt": record.performed_at.isoformat(),
        "cost": record.cost,
        "statusFrom": record.status_from.value if record.status_from else None,
        "statusTo": record.status_to.value if record.status_to else None,
    }


def maintenance_record_from_dict(data: dict[str, Any]) -> MaintenanceRecord:
    performed_at = data.get("performedAt")
    return MaintenanceRecord(
        record_id=str(data.get("id") or ""),
        maintenance_type=str(data.get("type") or ""),
        description=str(data.get("description") or ""),
        performed_by=data.get("performedBy"),
        performed_at=parse_iso_datetime(performed_at, "performedAt") if performed_at else datetime.min,
        cost=float(data.get("cost") or 0),
        status_from=MachineStatus(data["statusFrom"]) if data.get("statusFrom") else None,
        status_to=MachineStatus(data["statusTo"]) if data.get("statusTo") else None,
    )


def machine_to_dict(machine: Machine) -> dict:
    return {
        "id": machine.machine_id,
        "name": machine.name,
        "model": machine.model,
        "serialNumber": machine.serial_number,
        "status": machine.status.value,
        "location": machine.location,
        "department": machine.department,
        "manufacturer": machine.manufacturer,
        "installationDate": isoformat_or_none(machine.installation_date),
        "lastMaintenance": isoformat_or_none(machine.last_maintenance),
        "nextMaintenance": isoformat_or_none(machine.next_maintenance),
        "maintenanceInterval": machine.maintenance_interval,
        "specifications": dict(machine.specifications),
        "assignedTechnician": machine.assigned_technician,
        "operatingHours": machine.operating_hours,
        "efficiency": machine.efficiency,
        "notes": machine.notes,
        "maintenanceHistory": [maintenance_record_to_dict(r) for r in machine.maintenance_history],
        "createdAt": isoformat_or_none(machine.created_at),
        "updatedAt": isoformat_or_none(machine.updated_at),
    }

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..core.enums import MachineStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_set, build_where, db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Machine
from .repository import MachineRepository
from .serializers import maintenance_record_from_dict, maintenance_record_to_dict

_COLUMNS = """
    machine_id, name, model, serial_number, status, location, department, manufacturer,
    installation_date, last_maintenance, next_maintenance, maintenance_interval,
    specifications, assigned_technician, operating_hours, efficiency, notes,
    maintenance_history, created_at, updated_at
"""

_WRITABLE = {
    "name": "name",
    "model": "model",
    "serial_number": "serial_number",
    "status": "status",
    "location": "location",
    "department": "department",
    "manufacturer": "manufacturer",
    "installation_date": "installation_date",
    "last_maintenance": "last_maintenance",
    "next_maintenance": "next_maintenance",
    "maintenance_interval": "maintenance_interval",
    "specifications": "specifications",
    "assigned_technician": "assigned_technician",
    "operating_hours": "operating_hours",
    "efficiency": "efficiency",
    "notes": "notes",
    "maintenance_history": "maintenance_history",
}


def _to_machine(row: dict) -> Machine:
    history = load_json(row.get("maintenance_history"), [])
    return Machine(
        machine_id=int(row["machine_id"]),
        name=row["name"],
        model=row["model"],
        serial_number=row.get("serial_number"),
        status=MachineStatus(row["status"]),
        location=row["location"],
        department=row.get("department"),
        manufacturer=row.get("manufacturer") or "",
        installation_date=row.get("installation_date"),
        last_maintenance=row.get("last_maintenance"),
        next_maintenance=row.get("next_maintenance"),
        maintenance_interval=int(row.get("maintenance_interval") or 0),
        specifications=dict(load_json(row.get("specifications"), {})),
        assigned_technician=row.get("assigned_technician"),
        operating_hours=float(row.get("operating_hours") or 0),
        efficiency=float(row.get("efficiency") if row.get("efficiency") is not None else 100),
        notes=row.get("notes"),
        maintenance_history=tuple(maintenance_record_from_dict(r) for r in history),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _to_db(fields: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for attr, value in fields.items():
        if attr == "status" and value is not None:
            value = MachineStatus(value).value
        elif attr == "specifications":
            value = dump_json(dict(value or {}))
        elif attr == "maintenance_history":
            value = dump_json([maintenance_record_to_dict(r) for r in value or ()])
        out[attr] = value
    return out


class MySQLMachineRepository(MachineRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, column: str, param: Any) -> Optional[Machine]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM machines WHERE {column}=%s LIMIT 1", (param,))
            row = fetchone(cur)
            return _to_machine(row) if row else None

    def get_by_id(self, machine_id: int) -> Optional[Machine]:
        return self._get_one("machine_id", int(machine_id))

    def get_by_name(self, name: str) -> Optional[Machine]:
        return self._get_one("name", name)

    def get_by_serial_number(self, serial_number: str) -> Optional[Machine]:
        return self._get_one("serial_number", serial_number)

    def list_machines(
        self,
        *,
        status: Optional[MachineStatus] = None,
        department: Optional[str] = None,
        location: Optional[str] = None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Machine], int]:
        where, params = build_where(
            [
                ("status", status.value if status else None),
                ("department", department),
                ("location", location),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM machines {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"SELECT {_COLUMNS} FROM machines {where} ORDER BY machine_id LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_to_machine(r) for r in fetchall(cur)], total

    def list_all(self) -> Sequence[Machine]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM machines ORDER BY machine_id")
            return [_to_machine(r) for r in fetchall(cur)]

    def create_machine(self, fields: Mapping[str, Any]) -> int:
        values = _to_db(fields)
        columns = [_WRITABLE[k] for k in values]
        placeholders = ",".join(["%s"] * len(columns))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO machines({', '.join(columns)}) VALUES({placeholders})",
                tuple(values.values()),
            )
            return int(cur.lastrowid)

    def update_machine(self, machine_id: int, fields: Mapping[str, Any]) -> bool:
        if not fields:
            return True
        assignments, params = build_set(_to_db(fields), _WRITABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE machines SET {assignments} WHERE machine_id=%s", (*params, int(machine_id)))
            return cur.rowcount > 0

    def delete_by_id(self, machine_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM machines WHERE machine_id=%s", (int(machine_id),))
            return cur.rowcount > 0

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import MachineStatus


@dataclass(frozen=True)
class MaintenanceRecord:
    """One entry of a machine's maintenance history.

    Status transitions are recorded here as well, with ``status_from`` and
    ``status_to`` set.
    """

    record_id: str
    maintenance_type: str
    description: str
    performed_by: Optional[int]
    performed_at: datetime
    cost: float = 0.0
    status_from: Optional[MachineStatus] = None
    status_to: Optional[MachineStatus] = None


@dataclass(frozen=True)
class Machine:
    machine_id: int
    name: str
    model: str
    location: str
    status: MachineStatus = MachineStatus.OPERATIONAL
    serial_number: Optional[str] = None
    department: Optional[str] = "Production"
    manufacturer: str = ""
    installation_date: Optional[datetime] = None
    last_maintenance: Optional[datetime] = None
    next_maintenance: Optional[datetime] = None
    maintenance_interval: int = 30
    specifications: dict[str, str] = field(default_factory=dict)
    assigned_technician: Optional[int] = None
    operating_hours: float = 0.0
    efficiency: float = 100.0
    notes: Optional[str] = None
    maintenance_history: tuple[MaintenanceRecord, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import MachineStatus
from .model import Machine


class MachineRepository(Protocol):
    def get_by_id(self, machine_id: int) -> Optional[Machine]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Machine]:
        raise NotImplementedError

    def get_by_serial_number(self, serial_number: str) -> Optional[Machine]:
        raise NotImplementedError

    def list_machines(
        self,
        *,
        status: Optional[MachineStatus] = None,
        department: Optional[str] = None,
        location: Optional[str] = None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Machine], int]:
        """Return one page of machines and the total number of matches."""
        raise NotImplementedError

    def list_all(self) -> Sequence[Machine]:
        raise NotImplementedError

    def create_machine(self, fields: Mapping[str, Any]) -> int:
        """Insert a machine from snake_case Machine attribute names."""
        raise NotImplementedError

    def update_machine(self, machine_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, machine_id: int) -> bool:
        raise NotImplementedError

"""Id-or-name lookups for users and machines.

Callers may reference an assignee or a machine either by numeric id or by its
name. A numeric string is tried as an id first and then as a name. When a role is
given, both lookups are restricted to it, so a name shared across roles still
resolves to the user holding that role.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..machines.model import Machine
from ..machines.repository import MachineRepository
from ..users.model import User
from ..users.repository import UserRepository

Identifier = Union[int, str]


def to_identifier(value: Any, field_name: str) -> Identifier:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} is invalid")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise ValidationError(f"{field_name} is invalid")


def resolve_user(
    users: UserRepository,
    identifier: Identifier,
    *,
    role: Optional[Role] = None,
    not_found_message: str = "User not found",
) -> User:
    def matches(user: Optional[User]) -> bool:
        return user is not None and (role is None or user.role == role)

    if isinstance(identifier, int):
        user = users.get_by_id(identifier)
        if matches(user):
            return user
        raise NotFoundError(not_found_message)

    if identifier.isdigit():
        user = users.get_by_id(int(identifier))
        if matches(user):
            return user
    user = users.get_by_name(identifier, role=role)
    if user is None:
        raise NotFoundError(not_found_message)
    return user


def resolve_machine(
    machines: MachineRepository,
    identifier: Identifier,
    *,
    not_found_message: str = "Machine not found",
) -> Machine:
    machine: Optional[Machine] = None
    if isinstance(identifier, int):
        machine = machines.get_by_id(identifier)
    else:
        if identifier.isdigit():
            machine = machines.get_by_id(int(identifier))
        if machine is None:
            machine = machines.get_by_name(identifier)

    if machine is None:
        raise NotFoundError(not_found_message)
    return machine

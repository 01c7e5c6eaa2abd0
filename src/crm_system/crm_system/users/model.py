from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role, UserStatus


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: Plain data object (no DB access code). ``password_hash`` never leaves
    the service layer; serializers drop it.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    status: UserStatus = UserStatus.ACTIVE
    department: Optional[str] = "General"
    phone: str = ""
    address: str = ""
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

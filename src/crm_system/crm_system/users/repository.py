from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import Role, UserStatus
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_name(self, name: str, *, role: Optional[Role] = None) -> Optional[User]:
        """First user with this name, optionally restricted to one role. Names are not unique."""
        raise NotImplementedError

    def list_by_ids(self, user_ids: Sequence[int]) -> Sequence[User]:
        raise NotImplementedError

    def list_users(
        self,
        *,
        role: Optional[Role] = None,
        department: Optional[str] = None,
        status: Optional[UserStatus] = None,
    ) -> Sequence[User]:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        status: UserStatus,
        department: str,
        phone: str,
        address: str,
    ) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, fields: Mapping[str, Any]) -> bool:
        """Update the given columns (snake_case User attribute names)."""
        raise NotImplementedError

    def set_password(self, user_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def touch_last_login(self, user_id: int, when: datetime) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

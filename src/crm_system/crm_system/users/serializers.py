from __future__ import annotations

from ..common.datetime_utils import isoformat_or_none
from .model import User


def user_to_dict(user: User) -> dict:
    """Public representation of a user (no password hash)."""
    return {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "status": user.status.value,
        "department": user.department,
        "phone": user.phone,
        "address": user.address,
        "lastLogin": isoformat_or_none(user.last_login),
        "createdAt": isoformat_or_none(user.created_at),
        "updatedAt": isoformat_or_none(user.updated_at),
    }

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..core.exceptions import ValidationError


def parse_iso_datetime(value: Any, field_name: str) -> datetime:
    """Parse ``YYYY-MM-DD`` or an ISO-8601 timestamp into a naive local datetime."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be an ISO date")

    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO date")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return parse_iso_datetime(value, field_name)


def isoformat_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now().replace(microsecond=0)

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: Any, field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(str(value)) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def require_number(value: Any, field_name: str, *, minimum: Optional[float] = None, maximum: Optional[float] = None) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a number")

    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be at least {minimum:g}")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field_name} must be at most {maximum:g}")
    return number


def require_int_in_range(value: Any, field_name: str, minimum: int, maximum: int) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        number = int(value)
        whole = number == float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be an integer")
    if not whole:
        raise ValidationError(f"{field_name} must be an integer")
    if number < minimum or number > maximum:
        raise ValidationError(f"{field_name} must be between {minimum} and {maximum}")
    return number


def require_string_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{field_name} must be a list of strings")
    return [v.strip() for v in value if v.strip()]


def require_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{field_name} must be true or false")

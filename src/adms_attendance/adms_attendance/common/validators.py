from __future__ import annotations

from enum import Enum
from typing import Any, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or isinstance(value, (dict, list, bool)):
        raise ValidationError(f"{field_name} is required")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field_name} is required")
    return text


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if len(value) > max_len:
        raise ValidationError(f"{field_name} exceeds {max_len} characters")
    return value


def require_enum(value: Any, enum_cls: Type[E], field_name: str) -> E:
    """Parse a closed enum value; case and surrounding spaces are normalized."""

    text = require_non_empty(value, field_name).upper()
    try:
        return enum_cls(text)
    except ValueError:
        raise ValidationError(f"Invalid {field_name} value")


def optional_enum(value: Any, enum_cls: Type[E], field_name: str) -> E | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_enum(value, enum_cls, field_name)


def parse_positive_int(value: Any, field_name: str, *, default: int | None = None) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError(f"{field_name} is required")
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be an integer")
    if number < 1:
        raise ValidationError(f"{field_name} must be positive")
    return number

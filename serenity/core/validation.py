"""
Field-level validation rules shared by both entity hierarchies.

Each rule returns the normalised value or raises ``ValidationError`` naming
the field and the violated rule. Setters call a rule first and assign only
after it returns, so a rejected value never partially mutates an entity.
"""

import math
import re
from enum import Enum
from numbers import Real
from typing import Any, Optional, Type

from .exceptions import ValidationError


EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def _fail(field: str, message: str, code: str, value: Any = None) -> ValidationError:
    return ValidationError(message, error_code=code, details={'field': field, 'value': value})


def _is_number(value: Any) -> bool:
    """Real, finite and not a bool."""
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def require_non_empty(field: str, value: Any) -> str:
    """Require a string that is not blank; returns it stripped."""
    if not isinstance(value, str) or not value.strip():
        raise _fail(field, f"{field} cannot be empty", "empty_value", value)
    return value.strip()


def optional_text(field: str, value: Any) -> Optional[str]:
    """Allow ``None`` or any string; returns the stripped string."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise _fail(field, f"{field} must be text", "invalid_type", value)
    return value.strip()


def require_positive_number(field: str, value: Any) -> Real:
    if not _is_number(value) or value <= 0:
        raise _fail(field, f"{field} must be a positive number", "not_positive", value)
    return value


def require_non_negative_number(field: str, value: Any) -> Real:
    if not _is_number(value) or value < 0:
        raise _fail(field, f"{field} must be a non-negative number", "negative", value)
    return value


def require_positive_int(field: str, value: Any) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise _fail(field, f"{field} must be a positive integer", "not_positive", value)
    return value


def require_non_negative_int(field: str, value: Any) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise _fail(field, f"{field} must be an integer", "invalid_type", value)
    if value < 0:
        raise _fail(field, f"{field} must be a non-negative integer", "negative", value)
    return value


def require_number_in_range(field: str, value: Any, low: Real, high: Real,
                            allow_none: bool = False) -> Optional[Real]:
    """Require ``low <= value <= high``."""
    if value is None and allow_none:
        return None
    if not _is_number(value) or not low <= value <= high:
        raise _fail(field, f"{field} must be between {low} and {high}", "out_of_range", value)
    return value


def require_email(field: str, value: Any) -> str:
    if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
        raise _fail(field, f"{field} has an invalid email format", "invalid_email", value)
    return value


def require_choice(field: str, value: Any, enum_cls: Type[Enum]) -> str:
    """Require a member (or member value) of ``enum_cls``; returns the value."""
    if isinstance(value, enum_cls):
        return value.value
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        raise _fail(field, f"Invalid {field}. Must be one of: {', '.join(allowed)}",
                    "invalid_choice", value)
    return value


def require_instance(field: str, value: Any, expected: Type) -> Any:
    """Require that a cross-entity argument satisfies a capability set."""
    if not isinstance(value, expected):
        raise _fail(field, f"{field} must be a {expected.__name__}", "invalid_type", type(value).__name__)
    return value


def coerce_text_value(value: Any) -> Any:
    """Unwrap enum members to their value, leave everything else untouched."""
    return value.value if isinstance(value, Enum) else value

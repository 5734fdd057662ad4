from __future__ import annotations

import re
from typing import Any, Optional

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long")
    return value


def require_email(value: Optional[str]) -> str:
    """Normalize (trim + lower-case) and check the address format."""
    email = require_non_empty(value, "Email").lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please provide a valid email address")
    return email


def parse_int(value: Any, field_name: str, *, default: Optional[int] = None) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError(f"{field_name} is required")
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None


def require_positive_int(value: Any, field_name: str) -> int:
    number = parse_int(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} is not valid")
    return number


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))

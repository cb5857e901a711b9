from __future__ import annotations

import re
from typing import Optional

from ..core.constants import MIN_RESET_PASSWORD_LENGTH
from ..core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long")
    return value


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def check_reset_password_strength(password: str) -> Optional[str]:
    """Return the first rule a new password breaks, or None when it is acceptable."""
    if len(password) < MIN_RESET_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_RESET_PASSWORD_LENGTH} characters long"
    if not re.search(r"[A-Z]", password):
        return "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", password):
        return "Password must contain at least one lowercase letter"
    if not re.search(r"[0-9]", password):
        return "Password must contain at least one number"
    return None

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class AuthUser:
    """Credential record, separate from the student profile."""

    id: str
    email: str
    password_hash: str
    email_confirmed: bool = True
    last_sign_in_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AuthSession:
    """What we keep in the Flask session for a signed-in user."""

    auth_user_id: str
    email: str
    student_id: Optional[int] = None
    role: Optional[Role] = None
    name: Optional[str] = None
    first_login: bool = False
    recovery: bool = False

    @property
    def has_profile(self) -> bool:
        return self.student_id is not None and self.role is not None

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AccountStatus, Role


@dataclass(frozen=True)
class Student:
    """Domain entity: the profile row behind every account (students, admins, HR).

    Note: pure data object, no DB access here.
    """

    id: int
    auth_user_id: Optional[str]
    email: str
    name: str
    role: Role
    first_login: bool = True
    status: AccountStatus = AccountStatus.ACTIVE
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status != AccountStatus.INACTIVE

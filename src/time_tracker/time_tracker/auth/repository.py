from __future__ import annotations

from typing import Optional, Protocol

from .model import AuthUser


class AuthUserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[AuthUser]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[AuthUser]:
        raise NotImplementedError

    def create(self, *, user_id: str, email: str, password_hash: str, email_confirmed: bool) -> None:
        raise NotImplementedError

    def update_password_hash(self, user_id: str, password_hash: str) -> bool:
        raise NotImplementedError

    def touch_last_sign_in(self, user_id: str) -> None:
        raise NotImplementedError

    def delete(self, user_id: str) -> bool:
        raise NotImplementedError

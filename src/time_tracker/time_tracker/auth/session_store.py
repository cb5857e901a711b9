from __future__ import annotations

from typing import MutableMapping, Optional

from ..core.enums import Role
from .model import AuthSession

AUTH_SESSION_KEYS = ("auth_user_id", "email", "student_id", "role", "name", "first_login", "recovery")


def load_session(store: MutableMapping) -> Optional[AuthSession]:
    """Rebuild the signed-in session from a Flask session (or any mapping)."""
    auth_user_id = store.get("auth_user_id")
    if not auth_user_id:
        return None
    role = store.get("role")
    return AuthSession(
        auth_user_id=str(auth_user_id),
        email=store.get("email") or "",
        student_id=store.get("student_id"),
        role=Role(role) if role else None,
        name=store.get("name"),
        first_login=bool(store.get("first_login")),
        recovery=bool(store.get("recovery")),
    )


def save_session(store: MutableMapping, auth: AuthSession) -> None:
    store["auth_user_id"] = auth.auth_user_id
    store["email"] = auth.email
    store["student_id"] = auth.student_id
    store["role"] = auth.role.value if auth.role else None
    store["name"] = auth.name
    store["first_login"] = auth.first_login
    store["recovery"] = auth.recovery


def clear_session(store: MutableMapping) -> None:
    for key in AUTH_SESSION_KEYS:
        store.pop(key, None)

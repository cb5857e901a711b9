from __future__ import annotations

from functools import wraps

from flask import flash, redirect, render_template, session, url_for

from ..core.enums import Role
from .session_store import load_session


def signed_in():
    """The stored session, unless it only exists to finish a password reset."""
    auth = load_session(session)
    if auth is None or auth.recovery:
        return None
    return auth


def current_role():
    auth = signed_in()
    return auth.role if auth else None


def render_forbidden():
    current_user = {"name": session.get("name"), "role": session.get("role")}
    return render_template("403.html", current_user=current_user), 403


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if signed_in() is None:
            flash("Please sign in to continue.", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = frozenset(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            auth = signed_in()
            if auth is None:
                return redirect(url_for("login"))
            if auth.role not in allowed:
                return render_forbidden()
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = roles_required(Role.ADMIN)

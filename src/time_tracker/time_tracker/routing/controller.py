from __future__ import annotations

from typing import Optional

from flask import Flask, has_request_context, redirect, request, session, url_for

from ..auth.model import AuthSession
from ..auth.session_store import load_session
from ..container import Container
from ..core.constants import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from ..core.enums import AuthEvent
from .view_router import AuthSnapshot, UrlSignals, View, ViewRouter, ViewState

LANGUAGE_KEY = "language"

VIEW_ENDPOINTS = {
    View.LOGIN: "login",
    View.FORGOT_PASSWORD: "forgot_password",
    View.RESET_PASSWORD: "reset_password",
    View.CHANGE_PASSWORD: "change_password",
    View.STUDENT: "student_home",
    View.ADMIN: "admin_home",
    View.HR: "hr_home",
}


def session_router() -> ViewRouter:
    return ViewRouter(session)


def snapshot(auth: Optional[AuthSession]) -> AuthSnapshot:
    if auth is None:
        return AuthSnapshot()
    return AuthSnapshot(user_id=auth.auth_user_id, role=auth.role)


def redirect_to(state: ViewState, **params):
    if state.reset_error:
        params.setdefault("error_description", state.reset_error)
    return redirect(url_for(VIEW_ENDPOINTS[state.view], **params))


def current_language() -> str:
    lang = session.get(LANGUAGE_KEY)
    return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def on_auth_event(event: AuthEvent, auth: Optional[AuthSession]) -> None:
    """Keep the persisted view in line with auth changes made during a request."""
    if not has_request_context():
        return
    router = session_router()
    if event == AuthEvent.PASSWORD_RECOVERY:
        router.persist(ViewState(View.RESET_PASSWORD))
    elif event == AuthEvent.SIGNED_OUT:
        router.clear()


def register(app: Flask, container: Container) -> None:
    @app.context_processor
    def inject_view_state():
        return {
            "language": current_language(),
            "active_view": session.get("active_view"),
            "current_user": {"name": session.get("name"), "role": session.get("role")},
        }

    @app.route("/", methods=["GET"], endpoint="index")
    def index():
        signals = UrlSignals.from_params(request.args.to_dict(), path=request.path)
        auth = container.auth_service.get_session(load_session(session))
        state = session_router().resolve(signals, snapshot(auth))

        if state.view == View.RESET_PASSWORD:
            # Hand every recovery parameter over to the reset screen.
            return redirect(url_for("reset_password", **request.args.to_dict()))
        return redirect_to(state)

    @app.route("/language", methods=["POST"], endpoint="set_language")
    def set_language():
        lang = (request.form.get("language") or "").strip().lower()
        if lang in SUPPORTED_LANGUAGES:
            session[LANGUAGE_KEY] = lang
        return redirect(request.referrer or url_for("index"))

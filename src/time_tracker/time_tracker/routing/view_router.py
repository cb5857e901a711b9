"""Screen selection for the single-page style app.

Exactly one view is active at a time. It is derived from three inputs:

- signals carried in the URL (recovery tokens, provider error parameters),
- the view persisted in the browser session,
- the live auth state (signed-in user and whether the profile has loaded).

URL signals win on first load. Auth state then moves the user to their role
view, except while a reset or forgot-password flow is in progress. User driven
moves (logout, "forgot password?" link, ...) go through ``TRANSITIONS``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Mapping, MutableMapping, NamedTuple, Optional
from urllib.parse import parse_qs, urlsplit

from ..auth.messages import reset_link_error_message
from ..core.enums import Role

logger = logging.getLogger(__name__)

ACTIVE_VIEW_KEY = "active_view"
RESET_PASSWORD_PATH = "/reset-password"


class View(str, Enum):
    LOGIN = "login"
    FORGOT_PASSWORD = "forgot-password"
    RESET_PASSWORD = "reset-password"
    CHANGE_PASSWORD = "change-password"
    STUDENT = "student"
    ADMIN = "admin"
    HR = "hr"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["View"]:
        try:
            return cls(value) if value else None
        except ValueError:
            return None


ROLE_VIEWS = frozenset({View.STUDENT, View.ADMIN, View.HR})
# Views that auth state never overrides while the user is signed out.
PRESERVED_WHEN_SIGNED_OUT = frozenset({View.RESET_PASSWORD, View.FORGOT_PASSWORD})
# Views that auth state never overrides while the user is signed in.
PRESERVED_WHEN_SIGNED_IN = frozenset({View.RESET_PASSWORD, View.FORGOT_PASSWORD, View.CHANGE_PASSWORD})


@dataclass(frozen=True)
class ViewState:
    view: View
    reset_error: Optional[str] = None

    @property
    def has_error(self) -> bool:
        return self.reset_error is not None


@dataclass(frozen=True)
class UrlSignals:
    """Recovery-related parameters found in the query string or the fragment."""

    path: str = "/"
    token: Optional[str] = None
    access_token: Optional[str] = None
    query_type: Optional[str] = None
    fragment_type: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    error_description: Optional[str] = None

    @classmethod
    def from_params(cls, query: Mapping[str, str], fragment: str = "", *, path: str = "/") -> "UrlSignals":
        hash_params = {k: v[0] for k, v in parse_qs(fragment.lstrip("#")).items() if v}
        return cls(
            path=path or "/",
            token=query.get("token") or None,
            access_token=hash_params.get("access_token") or query.get("access_token") or None,
            query_type=query.get("type") or None,
            fragment_type=hash_params.get("type"),
            error=query.get("error") or hash_params.get("error"),
            error_code=query.get("error_code") or hash_params.get("error_code"),
            error_description=query.get("error_description") or hash_params.get("error_description"),
        )

    @classmethod
    def from_url(cls, url: str) -> "UrlSignals":
        parts = urlsplit(url)
        query = {k: v[0] for k, v in parse_qs(parts.query).items() if v}
        return cls.from_params(query, parts.fragment, path=parts.path)

    @property
    def has_error(self) -> bool:
        return bool(self.error or self.error_code)

    @property
    def is_recovery(self) -> bool:
        return "recovery" in (self.query_type, self.fragment_type)

    @property
    def recovery_token(self) -> Optional[str]:
        return self.token or self.access_token

    def reset_error_message(self) -> Optional[str]:
        if not self.has_error:
            return None
        return reset_link_error_message(self.error, self.error_code, self.error_description)


@dataclass(frozen=True)
class AuthSnapshot:
    loading: bool = False
    user_id: Optional[str] = None
    role: Optional[Role] = None

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def profile_loaded(self) -> bool:
        return self.role is not None


def role_view(role: Role) -> View:
    if role == Role.ADMIN:
        return View.ADMIN
    if role == Role.HR:
        return View.HR
    return View.STUDENT


class RouteEvent(str, Enum):
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGOUT = "logout"
    PASSWORD_CHANGED = "password_changed"
    FORGOT_PASSWORD_REQUESTED = "forgot_password_requested"
    BACK_TO_LOGIN = "back_to_login"
    RESET_SUCCEEDED = "reset_succeeded"
    CHANGE_PASSWORD_REQUESTED = "change_password_requested"


class Transition(NamedTuple):
    sources: FrozenSet[View]
    # None means "recompute from auth state"
    target: Optional[View]
    clear_persisted: bool = False


ALL_VIEWS = frozenset(View)

TRANSITIONS: Dict[RouteEvent, Transition] = {
    RouteEvent.LOGIN_SUCCEEDED: Transition(frozenset({View.LOGIN}), None, clear_persisted=True),
    RouteEvent.LOGOUT: Transition(ALL_VIEWS, View.LOGIN, clear_persisted=True),
    RouteEvent.PASSWORD_CHANGED: Transition(frozenset({View.CHANGE_PASSWORD}), None, clear_persisted=True),
    RouteEvent.FORGOT_PASSWORD_REQUESTED: Transition(frozenset({View.LOGIN}), View.FORGOT_PASSWORD),
    RouteEvent.BACK_TO_LOGIN: Transition(
        frozenset({View.FORGOT_PASSWORD, View.RESET_PASSWORD, View.LOGIN}), View.LOGIN
    ),
    RouteEvent.RESET_SUCCEEDED: Transition(frozenset({View.RESET_PASSWORD}), View.LOGIN, clear_persisted=True),
    RouteEvent.CHANGE_PASSWORD_REQUESTED: Transition(ROLE_VIEWS, View.CHANGE_PASSWORD),
}


class ViewRouter:
    """Derives and persists the active view for one browser session.

    ``store`` is the Flask session in the app and a plain dict in tests.
    """

    def __init__(self, store: MutableMapping, *, key: str = ACTIVE_VIEW_KEY):
        self._store = store
        self._key = key

    def persisted(self) -> Optional[View]:
        return View.parse(self._store.get(self._key))

    def persist(self, state: ViewState) -> ViewState:
        self._store[self._key] = state.view.value
        return state

    def clear(self) -> None:
        self._store.pop(self._key, None)

    def initial_view(self, signals: UrlSignals) -> ViewState:
        if signals.has_error:
            logger.info("Reset link error: %s", signals.error_code or signals.error)
            return self.persist(ViewState(View.RESET_PASSWORD, signals.reset_error_message()))
        if signals.is_recovery or signals.path == RESET_PASSWORD_PATH:
            return self.persist(ViewState(View.RESET_PASSWORD))
        return ViewState(self.persisted() or View.LOGIN)

    def on_auth_state(self, current: ViewState, auth: AuthSnapshot) -> ViewState:
        if auth.loading:
            return current

        if not auth.authenticated:
            if current.view in PRESERVED_WHEN_SIGNED_OUT:
                return current
            return self.persist(ViewState(View.LOGIN))

        if current.view in PRESERVED_WHEN_SIGNED_IN:
            return current
        if not auth.profile_loaded:
            return current
        return self.persist(ViewState(role_view(auth.role)))

    def resolve(self, signals: UrlSignals, auth: AuthSnapshot) -> ViewState:
        return self.on_auth_state(self.initial_view(signals), auth)

    def dispatch(self, current: ViewState, event: RouteEvent, auth: Optional[AuthSnapshot] = None) -> ViewState:
        transition = TRANSITIONS[event]
        if current.view not in transition.sources:
            logger.debug("Ignoring %s from %s", event.value, current.view.value)
            return current

        if transition.clear_persisted:
            self.clear()

        if transition.target is None:
            # Recompute from a neutral starting point.
            return self.on_auth_state(ViewState(View.LOGIN), auth or AuthSnapshot())
        return self.persist(ViewState(transition.target))

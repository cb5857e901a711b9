from __future__ import annotations

import logging
import uuid
from typing import Optional
from urllib.parse import urlencode

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import (
    check_reset_password_strength,
    is_valid_email,
    normalize_email,
    require_min_length,
    require_non_empty,
)
from ..core.constants import MIN_ACCOUNT_PASSWORD_LENGTH
from ..core.enums import AuthEvent, Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..mail.sender import EmailMessage, EmailSender
from ..users.model import Student
from ..users.repository import StudentRepository
from .events import AuthEventBus
from .model import AuthSession, AuthUser
from .repository import AuthUserRepository
from .tokens import ACCESS_DENIED, RecoveryTokenError, RecoveryTokenSigner

logger = logging.getLogger(__name__)

RESET_EMAIL_SUBJECT = "Reset your password"
RESET_EMAIL_BODY = (
    "Hello,\n\n"
    "we received a request to reset the password for your account.\n"
    "Open the following link to choose a new password:\n\n"
    "{link}\n\n"
    "If you did not request this, you can ignore this email."
)


def _verify_password(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (TypeError, ValueError):
        # placeholder or corrupted hashes
        return False


class AuthService:
    """Use cases around identity: sign in/up/out, recovery and password changes.

    Every state change is announced on the ``AuthEventBus`` so subscribers
    (view routing, audit logging) can react without the service knowing them.
    """

    def __init__(
        self,
        auth_users: AuthUserRepository,
        students: StudentRepository,
        *,
        tokens: RecoveryTokenSigner,
        mailer: EmailSender,
        events: AuthEventBus,
        base_url: str,
    ):
        self._auth_users = auth_users
        self._students = students
        self._tokens = tokens
        self._mailer = mailer
        self._events = events
        self._base_url = base_url.rstrip("/")

    @property
    def events(self) -> AuthEventBus:
        return self._events

    def _session_for(self, user: AuthUser, *, recovery: bool = False) -> AuthSession:
        profile = self._students.get_by_auth_user_id(user.id)
        return AuthSession(
            auth_user_id=user.id,
            email=user.email,
            student_id=profile.id if profile else None,
            role=profile.role if profile else None,
            name=profile.name if profile else None,
            first_login=profile.first_login if profile else False,
            recovery=recovery,
        )

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self._auth_users.get_by_email(email)
        if not user or not _verify_password(user.password_hash, password):
            raise AuthenticationError("Invalid login credentials", code=AuthenticationError.INVALID_CREDENTIALS)
        if not user.email_confirmed:
            raise AuthenticationError("Email not confirmed", code=AuthenticationError.EMAIL_NOT_CONFIRMED)

        profile = self._students.get_by_auth_user_id(user.id)
        if profile and not profile.is_active:
            raise AuthenticationError("Account is inactive", code=AuthenticationError.ACCOUNT_INACTIVE)

        self._auth_users.touch_last_sign_in(user.id)
        auth = self._session_for(user)
        logger.info("User %s signed in", user.id)
        self._events.emit(AuthEvent.SIGNED_IN, auth)
        return auth

    def sign_up(
        self,
        email: str,
        password: str,
        *,
        name: str,
        role: Role = Role.STUDENT,
        email_confirmed: bool = True,
    ) -> Student:
        """Create the auth user, then the profile row.

        The two writes are not transactional; a failed profile insert leaves
        the auth user behind.
        """
        email = normalize_email(email)
        name = require_non_empty(name, "Name")
        if not is_valid_email(email):
            raise ValidationError("Please enter a valid email address")
        require_min_length(password, "Password", MIN_ACCOUNT_PASSWORD_LENGTH)

        if self._auth_users.get_by_email(email) or self._students.get_by_email(email):
            raise AuthenticationError("User already registered", code=AuthenticationError.ALREADY_REGISTERED)

        user_id = str(uuid.uuid4())
        self._auth_users.create(
            user_id=user_id,
            email=email,
            password_hash=generate_password_hash(password),
            email_confirmed=email_confirmed,
        )
        student_id = self._students.create(auth_user_id=user_id, email=email, name=name, role=role, first_login=True)
        logger.info("Registered %s account %s", role.value, user_id)

        student = self._students.get_by_id(student_id)
        if student is None:
            raise ValidationError("Profile could not be created")
        return student

    def sign_out(self, auth: Optional[AuthSession]) -> None:
        if auth:
            logger.info("User %s signed out", auth.auth_user_id)
        self._events.emit(AuthEvent.SIGNED_OUT, None)

    def get_session(self, auth: Optional[AuthSession]) -> Optional[AuthSession]:
        """Refresh a stored session against the stores.

        None when the auth user is gone or its profile was deactivated.
        """
        if auth is None:
            return None
        user = self._auth_users.get_by_id(auth.auth_user_id)
        if user is None:
            return None
        profile = self._students.get_by_auth_user_id(user.id)
        if profile is not None and not profile.is_active:
            return None
        return self._session_for(user, recovery=auth.recovery)

    def recovery_link(self, token: str) -> str:
        return f"{self._base_url}/reset-password?" + urlencode({"token": token, "type": "recovery"})

    def reset_password_for_email(self, email: str) -> None:
        """Mail a recovery link when the address is known; silent otherwise."""
        email = normalize_email(email)
        if not is_valid_email(email):
            raise ValidationError("Please enter a valid email address")

        user = self._auth_users.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown address")
            return

        link = self.recovery_link(self._tokens.issue(user))
        result = self._mailer.send(
            EmailMessage(to=user.email, subject=RESET_EMAIL_SUBJECT, body=RESET_EMAIL_BODY.format(link=link))
        )
        if not result.ok:
            logger.warning("Recovery email for %s could not be sent: %s", user.id, result.error)
            raise ValidationError("Failed to send reset email. Please try again later.")

    def exchange_recovery_token(self, token: str) -> AuthSession:
        if not token:
            raise AuthenticationError(ACCESS_DENIED, code=AuthenticationError.RECOVERY_LINK_INVALID)
        try:
            user_id, fingerprint = self._tokens.read_user_id(token)
        except RecoveryTokenError as e:
            raise AuthenticationError(e.code, code=AuthenticationError.RECOVERY_LINK_INVALID)

        user = self._auth_users.get_by_id(user_id)
        if user is None or not self._tokens.matches(user, fingerprint):
            raise AuthenticationError(ACCESS_DENIED, code=AuthenticationError.RECOVERY_LINK_INVALID)

        auth = self._session_for(user, recovery=True)
        self._events.emit(AuthEvent.PASSWORD_RECOVERY, auth)
        return auth

    def update_user_password(self, auth: Optional[AuthSession], new_password: str, confirm_password: str) -> None:
        """Set a new password from a recovery session."""
        if auth is None or not auth.recovery:
            raise AuthenticationError(
                "Your reset session has expired. Please request a new link.",
                code=AuthenticationError.NO_SESSION,
            )

        problem = check_reset_password_strength(new_password or "")
        if problem:
            raise ValidationError(problem)
        if new_password != confirm_password:
            raise ValidationError("Passwords do not match")

        if not self._auth_users.update_password_hash(auth.auth_user_id, generate_password_hash(new_password)):
            raise AuthenticationError("Account no longer exists", code=AuthenticationError.NO_SESSION)
        logger.info("Password reset completed for %s", auth.auth_user_id)
        self._events.emit(AuthEvent.USER_UPDATED, auth)

    def change_password(
        self,
        auth: Optional[AuthSession],
        *,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> None:
        if auth is None:
            raise AuthenticationError("Please sign in again", code=AuthenticationError.NO_SESSION)
        if not current_password or not new_password or not confirm_password:
            raise ValidationError("All fields are required")
        if new_password != confirm_password:
            raise ValidationError("New passwords do not match")
        require_min_length(new_password, "Password", MIN_ACCOUNT_PASSWORD_LENGTH)

        user = self._auth_users.get_by_id(auth.auth_user_id)
        if user is None or not _verify_password(user.password_hash, current_password):
            raise ValidationError("Current password is incorrect")

        self._auth_users.update_password_hash(user.id, generate_password_hash(new_password))
        if auth.student_id is not None:
            self._students.set_first_login(auth.student_id, False)
        logger.info("Password changed for %s", user.id)
        self._events.emit(AuthEvent.USER_UPDATED, auth)

from __future__ import annotations

from typing import Optional

from ..core.exceptions import AuthenticationError
from .tokens import ACCESS_DENIED, OTP_EXPIRED

EXPIRED_LINK_MESSAGE = "This password reset link has expired. Please request a new one."
INVALID_LINK_MESSAGE = "This password reset link is invalid or has expired. Please request a new one."
GENERIC_LINK_MESSAGE = "Invalid reset link. Please request a new one."

_AUTH_MESSAGES = {
    AuthenticationError.INVALID_CREDENTIALS: "Invalid email or password",
    AuthenticationError.EMAIL_NOT_CONFIRMED: "Please confirm your email address before signing in",
    AuthenticationError.ACCOUNT_INACTIVE: "Your account has been deactivated. Please contact an administrator.",
    AuthenticationError.ALREADY_REGISTERED: "A user with this email address already exists",
}


def reset_link_error_message(
    error: Optional[str] = None,
    error_code: Optional[str] = None,
    description: Optional[str] = None,
) -> str:
    if error_code == OTP_EXPIRED:
        return EXPIRED_LINK_MESSAGE
    if error == ACCESS_DENIED:
        return INVALID_LINK_MESSAGE
    return description or GENERIC_LINK_MESSAGE


def describe_auth_error(exc: AuthenticationError) -> str:
    if exc.code == AuthenticationError.RECOVERY_LINK_INVALID:
        code = str(exc)
        if code == OTP_EXPIRED:
            return reset_link_error_message(error_code=OTP_EXPIRED)
        return reset_link_error_message(error=ACCESS_DENIED)
    return _AUTH_MESSAGES.get(exc.code, str(exc))

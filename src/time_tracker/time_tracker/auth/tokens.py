from __future__ import annotations

from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_RESET_TOKEN_MAX_AGE
from .model import AuthUser

RECOVERY_SALT = "password-recovery"

# Error codes mirror what a hosted auth provider puts into the redirect URL.
OTP_EXPIRED = "otp_expired"
ACCESS_DENIED = "access_denied"


class RecoveryTokenError(Exception):
    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


class RecoveryTokenSigner:
    """Signed, time-limited password recovery tokens.

    The token carries a fingerprint of the current password hash, so it stops
    working once the password has been changed.
    """

    def __init__(self, secret_key: str, *, max_age: int = DEFAULT_RESET_TOKEN_MAX_AGE):
        self._serializer = URLSafeTimedSerializer(secret_key, salt=RECOVERY_SALT)
        self._max_age = int(max_age)

    @staticmethod
    def _fingerprint(user: AuthUser) -> str:
        return (user.password_hash or "")[-12:]

    def issue(self, user: AuthUser) -> str:
        return self._serializer.dumps({"uid": user.id, "fp": self._fingerprint(user)})

    def read_user_id(self, token: str, *, max_age: Optional[int] = None) -> tuple[str, str]:
        """Return ``(user_id, fingerprint)`` or raise RecoveryTokenError."""
        try:
            data = self._serializer.loads(token, max_age=self._max_age if max_age is None else max_age)
        except SignatureExpired:
            raise RecoveryTokenError(OTP_EXPIRED)
        except BadSignature:
            raise RecoveryTokenError(ACCESS_DENIED)

        if not isinstance(data, dict) or "uid" not in data:
            raise RecoveryTokenError(ACCESS_DENIED)
        return str(data["uid"]), str(data.get("fp", ""))

    def matches(self, user: AuthUser, fingerprint: str) -> bool:
        return self._fingerprint(user) == fingerprint

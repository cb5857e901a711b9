class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConfirmationRequired(DomainError):
    """Raised when an action needs an explicit confirmation from the user."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class AuthenticationError(DomainError):
    """Raised when credentials, accounts or recovery links are rejected.

    ``code`` is a stable identifier the UI maps to a message.
    """

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    ACCOUNT_INACTIVE = "account_inactive"
    ALREADY_REGISTERED = "already_registered"
    RECOVERY_LINK_INVALID = "recovery_link_invalid"
    NO_SESSION = "no_session"

    def __init__(self, message: str, *, code: str = INVALID_CREDENTIALS):
        super().__init__(message)
        self.code = code

"""Centralized, structured exception hierarchy for turnstile.

Every rejection path in the authentication flows is one of the classes below.
Each carries a machine-readable ``code``, a human-readable ``message`` and the
HTTP ``status_code`` it maps to, so the HTTP layer renders all of them through
one handler and never has to guess.

The hierarchy is closed: services raise only these types, and unexpected
errors are either wrapped into one of them (refresh, logout) or surface as a
generic 500 at the boundary.
"""

from typing import Final

__all__: Final = [
    "TurnstileError",
    "ConfigurationError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "TwoFactorSessionExpiredError",
    "NoPendingSessionError",
    "InvalidSessionError",
    "InvalidTwoFactorCodeError",
    "InvalidPasswordError",
    "TokenInvalidError",
    "TokenRevokedError",
    "TokenAlreadyRevokedError",
    "InvalidRefreshTokenError",
    "AuthenticationRequiredError",
    "ProviderVerificationError",
    "ValidationError",
    "TwoFactorSetupNotInitiatedError",
    "InvalidVerificationCodeError",
    "TwoFactorAlreadyEnabledError",
    "UserNotFoundError",
    "AccountConflictError",
    "DuplicateUserError",
    "InternalFailureError",
    "RevocationStoreError",
    "SessionStoreError",
]


class TurnstileError(Exception):
    """Base exception class for all custom errors in the application.

    Attributes:
        message (str): A human-readable error message, safe to return to clients.
        code (str): A unique, machine-readable error code.
        status_code (int): The HTTP status the error is rendered with.
    """

    status_code: int = 500
    message: str
    code: str = "generic_error"

    def __init__(self, message: str = "Internal server error", code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    # A concise, structured representation used by loggers & FastAPI handlers.
    def __str__(self) -> str:
        return self.message


class ConfigurationError(TurnstileError):
    """Raised when the service is misconfigured (e.g. missing signing secrets).

    This is fatal at startup and never raised per request.
    """

    def __init__(self, message: str, code: str = "configuration_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Auth-related errors (401 Unauthorized)
# ---------------------------------------------------------------------------


class AuthenticationError(TurnstileError):
    """Raised for general authentication failures.

    This exception is the base for the more specific authentication errors
    and maps to a `401 Unauthorized` HTTP status code.
    """

    status_code = 401

    def __init__(self, message: str = "Authentication failed", code: str = "authentication_error"):
        super().__init__(message, code)


class InvalidCredentialsError(AuthenticationError):
    """Raised for any password-login failure.

    The message is identical whether the identifier or the password was wrong,
    to prevent account enumeration.
    """

    def __init__(self, message: str = "Invalid credentials", code: str = "invalid_credentials"):
        super().__init__(message, code)


class TwoFactorSessionExpiredError(AuthenticationError):
    """Raised when a 2FA code is submitted without a live pending-2FA session."""

    def __init__(
        self,
        message: str = "Two-factor authentication session expired",
        code: str = "two_factor_session_expired",
    ):
        super().__init__(message, code)


class NoPendingSessionError(TwoFactorSessionExpiredError):
    """Raised by the session state manager when no pending-2FA record exists."""

    def __init__(
        self,
        message: str = "Two-factor authentication session expired",
        code: str = "no_pending_session",
    ):
        super().__init__(message, code)


class InvalidSessionError(AuthenticationError):
    """Raised when a pending-2FA session points at an account that can no longer complete it."""

    def __init__(self, message: str = "Invalid session", code: str = "invalid_session"):
        super().__init__(message, code)


class InvalidTwoFactorCodeError(AuthenticationError):
    """Raised when neither the TOTP code nor any backup code matches."""

    def __init__(
        self,
        message: str = "Invalid two-factor authentication code",
        code: str = "invalid_two_factor_code",
    ):
        super().__init__(message, code)


class InvalidPasswordError(AuthenticationError):
    """Raised when a password re-confirmation (e.g. disabling 2FA) fails."""

    def __init__(self, message: str = "Invalid password", code: str = "invalid_password"):
        super().__init__(message, code)


class TokenInvalidError(AuthenticationError):
    """Raised when a token fails signature, expiry or payload validation."""

    def __init__(self, message: str = "Invalid or expired token", code: str = "token_invalid"):
        super().__init__(message, code)


class TokenRevokedError(AuthenticationError):
    """Raised when a token is present in the revocation registry."""

    def __init__(self, message: str = "Token has been revoked", code: str = "token_revoked"):
        super().__init__(message, code)


class TokenAlreadyRevokedError(AuthenticationError):
    """Raised by the revocation registry when a token string is revoked twice.

    This signals double use of a token (e.g. two concurrent refreshes), which
    is distinct from a lookup that found nothing.
    """

    def __init__(
        self, message: str = "Token has already been revoked", code: str = "token_already_revoked"
    ):
        super().__init__(message, code)


class InvalidRefreshTokenError(AuthenticationError):
    """The single, generic error every failed refresh is normalized to."""

    def __init__(self, message: str = "Invalid refresh token", code: str = "invalid_refresh_token"):
        super().__init__(message, code)


class AuthenticationRequiredError(AuthenticationError):
    """Raised when a protected operation is called without a session or bearer token."""

    def __init__(
        self, message: str = "Authentication required", code: str = "authentication_required"
    ):
        super().__init__(message, code)


class ProviderVerificationError(AuthenticationError):
    """Raised when an OAuth provider token is rejected by the provider verifier."""

    def __init__(
        self,
        message: str = "Provider token could not be verified",
        code: str = "provider_verification_failed",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Validation errors (400 Bad Request)
# ---------------------------------------------------------------------------


class ValidationError(TurnstileError):
    """Raised for request-level rule violations and maps to `400 Bad Request`."""

    status_code = 400

    def __init__(self, message: str = "Invalid request", code: str = "validation_error"):
        super().__init__(message, code)


class TwoFactorSetupNotInitiatedError(ValidationError):
    def __init__(
        self,
        message: str = "Two-factor setup not initiated",
        code: str = "two_factor_setup_not_initiated",
    ):
        super().__init__(message, code)


class InvalidVerificationCodeError(ValidationError):
    def __init__(
        self, message: str = "Invalid verification code", code: str = "invalid_verification_code"
    ):
        super().__init__(message, code)


class TwoFactorAlreadyEnabledError(ValidationError):
    def __init__(
        self,
        message: str = "Two-factor authentication is already enabled",
        code: str = "two_factor_already_enabled",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Lookup and conflict errors
# ---------------------------------------------------------------------------


class UserNotFoundError(TurnstileError):
    """Raised when an authenticated-context lookup finds no account.

    Maps to `404 Not Found`. Never raised during anonymous login, which always
    reports `InvalidCredentialsError` instead.
    """

    status_code = 404

    def __init__(self, message: str = "User not found", code: str = "user_not_found"):
        super().__init__(message, code)


class AccountConflictError(TurnstileError):
    """Raised when an email is already bound to a different provider (`409 Conflict`)."""

    status_code = 409

    def __init__(
        self,
        message: str = "Email already registered with a different provider",
        code: str = "account_conflict",
    ):
        super().__init__(message, code)


class DuplicateUserError(AccountConflictError):
    """Raised when registering an email or phone that already exists."""

    def __init__(self, message: str = "User already exists", code: str = "duplicate_user"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Internal failures (500)
# ---------------------------------------------------------------------------


class InternalFailureError(TurnstileError):
    """Raised when the service cannot complete an operation for internal reasons."""

    status_code = 500

    def __init__(self, message: str = "Internal server error", code: str = "internal_failure"):
        super().__init__(message, code)


class RevocationStoreError(InternalFailureError):
    """Raised when the revocation store cannot be read or written."""

    def __init__(
        self, message: str = "Revocation store unavailable", code: str = "revocation_store_error"
    ):
        super().__init__(message, code)


class SessionStoreError(InternalFailureError):
    """Raised when the session store cannot be read or written."""

    def __init__(self, message: str = "Session store unavailable", code: str = "session_store_error"):
        super().__init__(message, code)

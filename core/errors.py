"""
core/errors.py -- Application error taxonomy.

Every failure the service reports to a client is one of these classes. Each
carries the HTTP status, a stable machine-readable code, and a client-safe
message. api/main.py turns them into the ErrorResponse envelope; nothing
below api/ knows about HTTP responses.

Client-class errors (4xx) describe what the caller did wrong. Server-class
errors (5xx) carry a generic message only -- collaborator detail such as
database driver text is logged where it is caught, never attached here.

Layer rule: no project imports.
"""

from __future__ import annotations


class AppError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, *, detail: str | None = None) -> None:
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Client-class
# ---------------------------------------------------------------------------


class ValidationError(AppError):
    """Missing or malformed input. No side effect has happened."""

    status_code = 400
    code = "validation_error"
    message = "Request validation failed."


class PayloadTooLargeError(ValidationError):
    status_code = 413
    code = "file_too_large"
    message = "Uploaded file is too large."


class ConflictError(AppError):
    status_code = 409
    code = "conflict"
    message = "Resource already exists."


class DuplicateIdentityError(ConflictError):
    code = "duplicate_identity"
    message = "Username or email is already registered."


class AuthenticationError(AppError):
    status_code = 400
    code = "authentication_failed"
    message = "Authentication failed."


class InvalidCredentialsError(AuthenticationError):
    # Same message for unknown email and wrong password.
    code = "invalid_credentials"
    message = "Invalid email or password."


class AuthorizationError(AppError):
    status_code = 401
    code = "unauthorized"
    message = "Authentication required."


class MissingTokenError(AuthorizationError):
    code = "missing_token"
    message = "Access denied. No token provided."


class InvalidTokenError(AuthorizationError):
    """Token rejected. `reason` distinguishes the cause for logs only."""

    status_code = 403
    code = "invalid_token"
    message = "Invalid or expired token."
    reason = "invalid"


class TokenExpiredError(InvalidTokenError):
    reason = "expired"


class TokenMalformedError(InvalidTokenError):
    reason = "malformed"


# ---------------------------------------------------------------------------
# Server-class
# ---------------------------------------------------------------------------


class InternalError(AppError):
    status_code = 500
    code = "internal_error"
    message = "An unexpected error occurred."


class MediaUploadError(InternalError):
    code = "upload_failed"
    message = "Media upload failed."

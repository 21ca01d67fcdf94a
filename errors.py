"""
Error taxonomy

Every error the service raises on purpose derives from AppError and carries
the HTTP status it is rendered with. Request validation errors are pydantic's
own and are rendered by FastAPI as 422.
"""

from typing import Optional


class AppError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ConflictError(AppError):
    status_code = 400
    message = "Conflict"


class NotFoundError(AppError):
    status_code = 404
    message = "Not found"


class StorageError(AppError):
    """Persistence failure. The message is generic; the cause is logged."""

    status_code = 500
    message = "Internal server error"


class InvalidCredentials(AppError):
    status_code = 401
    message = "Invalid credentials"


class AuthError(AppError):
    status_code = 401
    message = "Unauthorized"


class Unauthorized(AuthError):
    message = "Not authenticated"


class TokenMalformed(AuthError):
    message = "Malformed token"


class TokenSignatureInvalid(AuthError):
    message = "Invalid token signature"


class TokenExpired(AuthError):
    message = "Token has expired"

"""
Application error taxonomy.

Every error the HTTP surface is expected to report carries its own status
code and client-facing message; ``api.errors`` turns them into the JSON
envelope.  Anything that is not an ``AppError`` is reported as a generic 500.
"""

from __future__ import annotations

from typing import Dict, List


class AppError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailed(AppError):
    """Input failed shape or bounds checks."""

    status_code = 400
    message = "Validation error"

    def __init__(self, errors: List[Dict[str, str]], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = errors


class DuplicateEmail(AppError):
    status_code = 400
    message = "User with this email already exists"


class InvalidCredentials(AppError):
    # Same message for unknown email and wrong password.
    status_code = 401
    message = "Invalid email or password"


class InvalidRefreshToken(AppError):
    status_code = 401
    message = "Invalid or expired refresh token"


class Unauthenticated(AppError):
    """Missing, malformed, invalid or expired access credential."""

    status_code = 401
    message = "Unauthenticated"

    def __init__(self, message: str | None = None, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason or self.message


class NotFound(AppError):
    status_code = 404
    message = "Not found"

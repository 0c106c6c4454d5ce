"""Error types surfaced by the API.

Each error carries an HTTP status and a message that is safe to show to
clients. Handlers registered in `api.server` render them as `{"message": ...}`.
"""

from __future__ import annotations

from typing import Optional


class ApiError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid request"


class AuthError(ApiError):
    status_code = 401
    message = "Authorization header missing or invalid"


class InvalidTokenError(AuthError):
    status_code = 403
    message = "Invalid or expired token"


class NotFoundError(ApiError):
    status_code = 404
    message = "Not found"


class ConflictError(ApiError):
    # Duplicates are not distinguished from other store failures for clients.
    status_code = 500
    message = "Internal server error"


class DuplicateEmailError(ConflictError):
    pass


class StoreError(ApiError):
    status_code = 500
    message = "Internal server error"


class InternalError(ApiError):
    status_code = 500
    message = "Internal server error"

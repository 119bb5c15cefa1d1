# Application error taxonomy.
# Every error carries a message, an HTTP-style status classifier and optional
# structured detail; the handlers in app/main.py render them as
# {"message", "status", "data"}.

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code: int = 500

    def __init__(self, message: str = "An error occurred.", status_code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "status": self.status_code, "data": self.data}


class ValidationError(AppError):
    """Malformed or missing input. Always carries per-field messages."""

    status_code = 422

    def __init__(self, errors: List[Dict[str, str]], message: str = "Invalid input."):
        super().__init__(message, data=errors)
        self.errors = errors


class AuthError(AppError):
    status_code = 401

    def __init__(self, message: str = "Not authenticated!"):
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message: str = "Not authorized!"):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class StorageError(AppError):
    status_code = 500


class InvalidTokenError(Exception):
    """Raised by the token codec for any token that fails verification"""

"""Exceptions raised by the user management service."""

from __future__ import annotations

from typing import Dict, List
from uuid import UUID


class UserManagementError(Exception):
    """Base class for errors rendered as HTTP problem responses."""

    status_code = 500
    title = "Internal Server Error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_response(self) -> Dict[str, object]:
        return {"title": self.title, "status": self.status_code, "detail": self.detail}


class UserNotFoundError(UserManagementError):
    status_code = 404
    title = "User Not Found"

    def __init__(self, user_id: UUID | str) -> None:
        super().__init__(f"User with id '{user_id}' was not found.")
        self.user_id = user_id


class EmailAlreadyInUseError(UserManagementError):
    """Raised when a commit would give two live users the same email."""

    status_code = 409
    title = "User Conflict"

    def __init__(self, email: str, detail: str | None = None) -> None:
        super().__init__(detail or f"A user with email '{email}' already exists.")
        self.email = email


class ValidationFailedError(UserManagementError):
    status_code = 400
    title = "One or more validation errors occurred."

    def __init__(self, errors: Dict[str, List[str]]) -> None:
        super().__init__(self.title)
        self.errors = errors

    def to_response(self) -> Dict[str, object]:
        return {"title": self.title, "status": self.status_code, "errors": self.errors}


class UnauthorizedError(UserManagementError):
    status_code = 401
    title = "Unauthorized"

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(detail)

    def to_response(self) -> Dict[str, object]:
        return {"error": "Unauthorized"}


class UserAlreadyExistsError(RuntimeError):
    """A record with the same identifier is already stored.

    Identifiers are generated fresh, so this surfaces as an internal error.
    """

    def __init__(self, user_id: UUID) -> None:
        super().__init__(f"A user with id {user_id} already exists.")
        self.user_id = user_id


__all__ = [
    "EmailAlreadyInUseError",
    "UnauthorizedError",
    "UserAlreadyExistsError",
    "UserManagementError",
    "UserNotFoundError",
    "ValidationFailedError",
]

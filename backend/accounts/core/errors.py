"""Typed errors raised by commands, repositories and request guards."""
from __future__ import annotations

from fastapi import status


class AccountsError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MalformedEntityError(AccountsError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Malformed entity"


class NotAuthenticatedError(AccountsError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class InvalidCredentialsError(AccountsError):
    """Authentication failed. The message never says which part was wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"

    def __init__(self) -> None:
        super().__init__()


class NotAuthorizedError(AccountsError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class EntityNotFoundError(AccountsError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Entity not found"


class EntityConflictError(AccountsError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Entity already exists"


class DatabaseError(AccountsError):
    """Storage failure. The original exception is kept as ``cause``."""

    default_message = "Database error"

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__()
        self.cause = cause


__all__ = [
    "AccountsError",
    "DatabaseError",
    "EntityConflictError",
    "EntityNotFoundError",
    "InvalidCredentialsError",
    "MalformedEntityError",
    "NotAuthenticatedError",
    "NotAuthorizedError",
]

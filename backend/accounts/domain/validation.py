"""Field validation rules for user commands."""
from __future__ import annotations

import re
from typing import Collection, Iterable

from accounts.core.errors import MalformedEntityError

EMAIL_PATTERN = re.compile(r"^[\w_\-]+\.?[\w_\-]*@[\w_\-]+\.[\w_\-]+", re.ASCII)


def validate_username(username: str | None) -> None:
    # Blank usernames pass; only a missing value is rejected.
    if username is None:
        raise MalformedEntityError("Invalid username")


def validate_password(password: str | None) -> None:
    if not password:
        raise MalformedEntityError("Password cannot be empty")


def validate_email_address(email: str | None) -> None:
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
        raise MalformedEntityError("Email address is in a wrong format")


def validate_membership(values: Iterable[str] | None, allowed: Collection[str], label: str) -> list[str]:
    """Check every value against ``allowed`` and return the values as a list.

    All offending names are reported together in one error.
    """
    if values is None:
        raise MalformedEntityError(f"{label.capitalize()}s list cannot be undefined.")

    requested = list(values)
    wrong = [value for value in requested if value not in allowed]
    if wrong:
        raise MalformedEntityError(f"Wrong {label} name(s) in list ({', '.join(wrong)})")
    return requested


__all__ = [
    "EMAIL_PATTERN",
    "validate_email_address",
    "validate_membership",
    "validate_password",
    "validate_username",
]

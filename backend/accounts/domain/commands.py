"""Commands that validate and apply a single change to a user.

Every command checks all of its inputs in ``__init__`` before writing any
field, so a command that raises leaves the user untouched. Persistence is
left to the repository, which accepts the finished command.
"""
from __future__ import annotations

from typing import Any, Collection, Mapping

from accounts.core.errors import InvalidCredentialsError, MalformedEntityError, NotAuthorizedError
from accounts.core.security import PasswordHasher
from accounts.domain.claims import token_claims
from accounts.domain.validation import (
    validate_email_address,
    validate_membership,
    validate_password,
    validate_username,
)
from accounts.models.user import User
from accounts.schemas.auth import TokenClaims

PROTECTED_ROLES = ("admin", "built-in")
UPDATABLE_FIELDS = ("email", "applications", "roles")


class UserCommand:
    """Base class for commands targeting one user."""

    def __init__(self, user: User) -> None:
        self.user = user


class CreateUserCommand(UserCommand):
    def __init__(
        self,
        username: str | None,
        password: str | None,
        password_confirm: str | None = None,
        email: str | None = None,
    ) -> None:
        validate_username(username)
        validate_password(password)
        if password_confirm is not None and password != password_confirm:
            raise MalformedEntityError("Password and password confirm don't match")
        if email:
            validate_email_address(email)

        super().__init__(
            User(
                username=username,
                password_hash=PasswordHasher.hash(password),
                email=email or None,
                applications=[],
                roles=[],
            )
        )


class UpdateUserCommand(UserCommand):
    """Overwrite the whitelisted mutable fields present in ``changes``.

    Keys outside :data:`UPDATABLE_FIELDS` (``id``, ``password_hash``,
    ``username`` and anything else) are ignored.
    """

    def __init__(
        self,
        user: User,
        changes: Mapping[str, Any],
        known_applications: Collection[str],
        known_roles: Collection[str],
    ) -> None:
        super().__init__(user)
        updates: dict[str, Any] = {}
        if "email" in changes:
            email = changes["email"]
            if email is not None:
                validate_email_address(email)
            updates["email"] = email
        if "applications" in changes:
            updates["applications"] = validate_membership(changes["applications"], known_applications, "application")
        if "roles" in changes:
            updates["roles"] = validate_membership(changes["roles"], known_roles, "role")

        for field, value in updates.items():
            setattr(user, field, value)
        self.changed_fields = tuple(updates)


class DeleteUserCommand(UserCommand):
    def __init__(self, user: User) -> None:
        super().__init__(user)
        roles = user.roles or []
        if any(role in roles for role in PROTECTED_ROLES):
            raise NotAuthorizedError("Cannot delete this user")


class ChangePasswordCommand(UserCommand):
    def __init__(
        self,
        user: User,
        old_password: str | None,
        password: str | None,
        password_confirm: str | None,
    ) -> None:
        super().__init__(user)
        validate_password(password)
        if password != password_confirm:
            raise MalformedEntityError("Password and password confirm don't match")
        if old_password is None or not PasswordHasher.verify(old_password, user.password_hash):
            raise MalformedEntityError("Old password doesn't match")

        user.password_hash = PasswordHasher.hash(password)


class ResetPasswordCommand(UserCommand):
    """Administrative password reset; the old password is not required."""

    def __init__(self, user: User, password: str | None, password_confirm: str | None) -> None:
        super().__init__(user)
        if password != password_confirm:
            raise MalformedEntityError("Password and password confirm are not the same.")
        validate_password(password)

        user.password_hash = PasswordHasher.hash(password)


class ChangeEmailAddressCommand(UserCommand):
    def __init__(self, user: User, email: str | None) -> None:
        super().__init__(user)
        validate_email_address(email)
        user.email = email


class ChangeApplicationsCommand(UserCommand):
    def __init__(self, user: User, applications: list[str] | None, known_applications: Collection[str]) -> None:
        super().__init__(user)
        user.applications = validate_membership(applications, known_applications, "application")


class ChangeRolesCommand(UserCommand):
    def __init__(self, user: User, roles: list[str] | None, known_roles: Collection[str]) -> None:
        super().__init__(user)
        user.roles = validate_membership(roles, known_roles, "role")


class AuthenticateUserCommand(UserCommand):
    """Check a password against the stored hash. Read-only.

    ``user`` may be ``None`` (unknown username); that case fails exactly like
    a wrong password.
    """

    def __init__(self, user: User | None, password: str | None) -> None:
        if user is None or password is None:
            PasswordHasher.dummy_verify()
            raise InvalidCredentialsError()
        if not PasswordHasher.verify(password, user.password_hash):
            raise InvalidCredentialsError()
        super().__init__(user)

    @property
    def token(self) -> TokenClaims:
        return token_claims(self.user)


__all__ = [
    "AuthenticateUserCommand",
    "ChangeApplicationsCommand",
    "ChangeEmailAddressCommand",
    "ChangePasswordCommand",
    "ChangeRolesCommand",
    "CreateUserCommand",
    "DeleteUserCommand",
    "PROTECTED_ROLES",
    "ResetPasswordCommand",
    "UPDATABLE_FIELDS",
    "UpdateUserCommand",
    "UserCommand",
]

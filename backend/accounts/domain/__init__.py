"""User commands, validation rules and token claim derivation."""
from .claims import token_claims
from .commands import (
    AuthenticateUserCommand,
    ChangeApplicationsCommand,
    ChangeEmailAddressCommand,
    ChangePasswordCommand,
    ChangeRolesCommand,
    CreateUserCommand,
    DeleteUserCommand,
    ResetPasswordCommand,
    UpdateUserCommand,
    UserCommand,
)

__all__ = [
    "AuthenticateUserCommand",
    "ChangeApplicationsCommand",
    "ChangeEmailAddressCommand",
    "ChangePasswordCommand",
    "ChangeRolesCommand",
    "CreateUserCommand",
    "DeleteUserCommand",
    "ResetPasswordCommand",
    "UpdateUserCommand",
    "UserCommand",
    "token_claims",
]

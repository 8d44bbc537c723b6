"""Seed the first administrator account."""
from __future__ import annotations

import logging

from accounts.domain.commands import CreateUserCommand
from accounts.models.user import User
from accounts.schemas.user import UserQuery
from accounts.services.users import UserRepository

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


async def ensure_admin(
    repository: UserRepository,
    username: str,
    password: str,
    email: str | None = None,
) -> User | None:
    """Create ``username`` with the admin role unless an admin already exists."""

    existing = await repository.find(UserQuery(role=ADMIN_ROLE, limit=1))
    if existing.total_found:
        logger.warning("There is already an admin. Nothing to do.")
        return None

    command = CreateUserCommand(username, password, password, email)
    command.user.roles = [ADMIN_ROLE]
    user = await repository.add(command)
    logger.info("Admin user %s created", user.username)
    return user

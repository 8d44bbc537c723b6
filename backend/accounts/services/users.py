"""User repository: persistence for user commands."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import String, cast, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from accounts.core.errors import DatabaseError, EntityConflictError, EntityNotFoundError, MalformedEntityError
from accounts.db.session import Database
from accounts.domain.commands import CreateUserCommand, DeleteUserCommand, UserCommand
from accounts.models.user import User
from accounts.schemas.user import UserQuery

logger = logging.getLogger(__name__)

DEFAULT_SORT = "username"
SORT_FIELDS = {
    "username": User.username,
    "email": User.email,
    "id": User.id,
    "created_at": User.created_at,
}


@dataclass(slots=True)
class UserPageResult:
    """Matching users for one page plus the total count before paging."""

    items: list[User]
    total_found: int


class UserRepository(Protocol):
    async def get(self, user_id: int) -> User | None:
        ...

    async def get_by_username(self, username: str) -> User | None:
        ...

    async def find(self, query: UserQuery) -> UserPageResult:
        ...

    async def add(self, command: CreateUserCommand) -> User:
        ...

    async def save(self, command: UserCommand) -> User:
        ...

    async def delete(self, command: DeleteUserCommand) -> User:
        ...


def _sort_clause(sort: str | None):
    field = (sort or DEFAULT_SORT).strip()
    descending = field.startswith("-")
    field = field.lstrip("-+")
    column = SORT_FIELDS.get(field)
    if column is None:
        raise MalformedEntityError(f"Cannot sort by '{field}'")
    return column.desc() if descending else column.asc()


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _json_list_contains(column, value: str):
    # JSON lists are stored as text like '["admin", "user"]' on every backend we target.
    return cast(column, String).like(f"%{_escape_like(json.dumps(value))}%", escape="\\")


class SqlUserRepository:
    """:class:`UserRepository` backed by an async SQLAlchemy database."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def get(self, user_id: int) -> User | None:
        try:
            async with self._database.session() as session:
                return await session.get(User, user_id)
        except SQLAlchemyError as exc:
            raise self._database_error(exc) from exc

    async def get_by_username(self, username: str) -> User | None:
        try:
            async with self._database.session() as session:
                result = await session.execute(select(User).where(User.username == username))
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._database_error(exc) from exc

    async def find(self, query: UserQuery) -> UserPageResult:
        order = _sort_clause(query.sort)
        statement = select(User)
        if query.username:
            statement = statement.where(func.lower(User.username).contains(query.username.lower(), autoescape=True))
        if query.email:
            statement = statement.where(func.lower(User.email).contains(query.email.lower(), autoescape=True))
        if query.role:
            statement = statement.where(_json_list_contains(User.roles, query.role))
        if query.application:
            statement = statement.where(_json_list_contains(User.applications, query.application))

        try:
            async with self._database.session() as session:
                total = await session.scalar(select(func.count()).select_from(statement.subquery()))
                result = await session.execute(
                    statement.order_by(order, User.id).offset(query.skip).limit(query.limit)
                )
                return UserPageResult(list(result.scalars().all()), total or 0)
        except SQLAlchemyError as exc:
            raise self._database_error(exc) from exc

    async def add(self, command: CreateUserCommand) -> User:
        user = command.user
        try:
            async with self._database.session() as session:
                session.add(user)
                await session.commit()
                await session.refresh(user)
        except IntegrityError as exc:
            raise EntityConflictError(f"Username '{user.username}' is already taken") from exc
        except SQLAlchemyError as exc:
            raise self._database_error(exc) from exc
        logger.info("Created user %s (id=%s)", user.username, user.id)
        return user

    async def save(self, command: UserCommand) -> User:
        try:
            async with self._database.session() as session:
                await self._require_existing(session, command.user)
                user = await session.merge(command.user)
                await session.commit()
                await session.refresh(user)
                return user
        except SQLAlchemyError as exc:
            raise self._database_error(exc) from exc

    async def delete(self, command: DeleteUserCommand) -> User:
        try:
            async with self._database.session() as session:
                await self._require_existing(session, command.user)
                user = await session.merge(command.user)
                await session.delete(user)
                await session.commit()
        except SQLAlchemyError as exc:
            raise self._database_error(exc) from exc
        logger.info("Deleted user %s (id=%s)", user.username, user.id)
        return user

    @staticmethod
    async def _require_existing(session, user: User) -> None:
        # The row must still exist; merge() inserts missing rows.
        if user.id is None or await session.get(User, user.id) is None:
            raise EntityNotFoundError("User not found")

    @staticmethod
    def _database_error(exc: SQLAlchemyError) -> DatabaseError:
        logger.exception("User store operation failed")
        return DatabaseError(exc)

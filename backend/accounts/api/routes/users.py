"""User account endpoints."""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from accounts.core.config import Settings
from accounts.core.dependencies import (
    RequestContext,
    get_repository,
    get_request_context,
    get_settings_dependency,
    get_token_signer,
    require_admin,
)
from accounts.core.errors import EntityNotFoundError, InvalidCredentialsError
from accounts.core.security import TokenSigner
from accounts.domain.claims import claims_to_payload
from accounts.domain.commands import (
    AuthenticateUserCommand,
    ChangeApplicationsCommand,
    ChangeEmailAddressCommand,
    ChangePasswordCommand,
    ChangeRolesCommand,
    CreateUserCommand,
    DeleteUserCommand,
    ResetPasswordCommand,
    UpdateUserCommand,
)
from accounts.models.user import User
from accounts.schemas.auth import LoginRequest, TokenResponse
from accounts.schemas.user import (
    UserApplicationsChange,
    UserCreate,
    UserEmailChange,
    UserPage,
    UserPasswordChange,
    UserPasswordReset,
    UserQuery,
    UserRead,
    UserRolesChange,
    UserUpdate,
)
from accounts.services.users import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


async def _load_user(repository: UserRepository, user_id: int) -> User:
    user = await repository.get(user_id)
    if user is None:
        raise EntityNotFoundError("User not found")
    return user


@router.post("/authenticate", response_model=TokenResponse)
async def authenticate(
    payload: LoginRequest,
    repository: UserRepository = Depends(get_repository),
    signer: TokenSigner = Depends(get_token_signer),
) -> TokenResponse:
    user = await repository.get_by_username(payload.username) if payload.username is not None else None
    try:
        command = AuthenticateUserCommand(user, payload.password)
    except InvalidCredentialsError:
        logger.warning("Failed authentication for username %r", payload.username)
        raise
    return TokenResponse(access_token=signer.dumps(claims_to_payload(command.token)))


@router.get("/", response_model=UserPage)
async def find_users(
    query: Annotated[UserQuery, Query()],
    repository: UserRepository = Depends(get_repository),
    _: RequestContext = Depends(get_request_context),
) -> UserPage:
    result = await repository.find(query)
    return UserPage(
        items=[UserRead.model_validate(user) for user in result.items],
        total_found=result.total_found,
    )


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def add_user(
    payload: UserCreate,
    request: Request,
    response: Response,
    repository: UserRepository = Depends(get_repository),
    _: RequestContext = Depends(get_request_context),
) -> UserRead:
    command = CreateUserCommand(payload.username, payload.password, payload.password_confirm, payload.email)
    user = await repository.add(command)
    response.headers["Location"] = f"{request.url.path.rstrip('/')}/{user.id}"
    return UserRead.model_validate(user)


@router.get("/current", response_model=UserRead)
async def get_current_user(
    repository: UserRepository = Depends(get_repository),
    context: RequestContext = Depends(get_request_context),
) -> UserRead:
    if context.claims is None:
        raise EntityNotFoundError("User not found")
    user = await repository.get_by_username(context.claims.subject)
    if user is None:
        raise EntityNotFoundError("User not found")
    return UserRead.model_validate(user)


@router.get("/getbyusername", response_model=UserRead)
async def get_by_username(
    username: str,
    repository: UserRepository = Depends(get_repository),
    context: RequestContext = Depends(get_request_context),
) -> UserRead:
    if not context.is_authenticated:
        raise EntityNotFoundError("User not found")
    user = await repository.get_by_username(username)
    if user is None:
        raise EntityNotFoundError("User not found")
    return UserRead.model_validate(user)


@router.patch("/resetpassword", status_code=status.HTTP_200_OK)
async def reset_password(
    payload: UserPasswordReset,
    repository: UserRepository = Depends(get_repository),
    context: RequestContext = Depends(require_admin),
) -> None:
    user = await repository.get_by_username(payload.username)
    if user is None:
        raise EntityNotFoundError("User not found")
    await repository.save(ResetPasswordCommand(user, payload.password, payload.password_confirm))
    logger.info("Password of %s reset by %s", user.username, context.claims.subject)


@router.get("/getroles", response_model=list[str])
async def get_roles(
    settings: Settings = Depends(get_settings_dependency),
    _: RequestContext = Depends(get_request_context),
) -> list[str]:
    return list(settings.known_roles)


@router.get("/getapplications", response_model=list[str])
async def get_applications(
    settings: Settings = Depends(get_settings_dependency),
    _: RequestContext = Depends(get_request_context),
) -> list[str]:
    return list(settings.known_applications)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    repository: UserRepository = Depends(get_repository),
    _: RequestContext = Depends(get_request_context),
) -> UserRead:
    return UserRead.model_validate(await _load_user(repository, user_id))


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    repository: UserRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings_dependency),
    _: RequestContext = Depends(require_admin),
) -> UserRead:
    user = await _load_user(repository, user_id)
    command = UpdateUserCommand(
        user,
        payload.model_dump(exclude_unset=True),
        settings.known_applications,
        settings.known_roles,
    )
    return UserRead.model_validate(await repository.save(command))


@router.delete("/{user_id}", response_model=UserRead)
async def delete_user(
    user_id: int,
    repository: UserRepository = Depends(get_repository),
    _: RequestContext = Depends(get_request_context),
) -> UserRead:
    user = await _load_user(repository, user_id)
    deleted = await repository.delete(DeleteUserCommand(user))
    return UserRead.model_validate(deleted)


@router.patch("/{user_id}/changepassword", status_code=status.HTTP_200_OK)
async def change_password(
    user_id: int,
    payload: UserPasswordChange,
    repository: UserRepository = Depends(get_repository),
    _: RequestContext = Depends(get_request_context),
) -> None:
    user = await _load_user(repository, user_id)
    command = ChangePasswordCommand(user, payload.oldpassword, payload.password, payload.password_confirm)
    await repository.save(command)


@router.patch("/{user_id}/changeemailaddress", response_model=UserRead)
async def change_email_address(
    user_id: int,
    payload: UserEmailChange,
    repository: UserRepository = Depends(get_repository),
    _: RequestContext = Depends(get_request_context),
) -> UserRead:
    user = await _load_user(repository, user_id)
    command = ChangeEmailAddressCommand(user, payload.email_address)
    return UserRead.model_validate(await repository.save(command))


@router.get("/{user_id}/roles", response_model=list[str])
async def get_user_roles(
    user_id: int,
    repository: UserRepository = Depends(get_repository),
    _: RequestContext = Depends(get_request_context),
) -> list[str]:
    user = await _load_user(repository, user_id)
    return list(user.roles or [])


@router.post("/{user_id}/roles", response_model=UserRead)
async def change_user_roles(
    user_id: int,
    payload: UserRolesChange,
    repository: UserRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings_dependency),
    context: RequestContext = Depends(require_admin),
) -> UserRead:
    user = await _load_user(repository, user_id)
    saved = await repository.save(ChangeRolesCommand(user, payload.roles, settings.known_roles))
    logger.info("Roles of %s set to %s by %s", saved.username, saved.roles, context.claims.subject)
    return UserRead.model_validate(saved)


@router.get("/{user_id}/apps", response_model=list[str])
async def get_user_applications(
    user_id: int,
    repository: UserRepository = Depends(get_repository),
    _: RequestContext = Depends(get_request_context),
) -> list[str]:
    user = await _load_user(repository, user_id)
    return list(user.applications or [])


@router.post("/{user_id}/apps", response_model=UserRead)
async def change_user_applications(
    user_id: int,
    payload: UserApplicationsChange,
    repository: UserRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings_dependency),
    context: RequestContext = Depends(require_admin),
) -> UserRead:
    user = await _load_user(repository, user_id)
    saved = await repository.save(ChangeApplicationsCommand(user, payload.applications, settings.known_applications))
    logger.info("Applications of %s set to %s by %s", saved.username, saved.applications, context.claims.subject)
    return UserRead.model_validate(saved)

"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accounts.core.config import Settings
from accounts.core.errors import NotAuthenticatedError, NotAuthorizedError
from accounts.core.security import TokenSigner
from accounts.domain.claims import claims_from_payload
from accounts.schemas.auth import TokenClaims
from accounts.services.users import UserRepository

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class RequestContext:
    """Verified caller identity for one request; ``claims`` is None for anonymous calls."""

    claims: TokenClaims | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.claims is not None

    def is_in_role(self, role: str) -> bool:
        return self.claims is not None and self.claims.is_in_role(role)


def get_settings_dependency(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> UserRepository:
    return request.app.state.repository


def get_token_signer(request: Request) -> TokenSigner:
    return request.app.state.token_signer


async def get_request_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_settings_dependency),
    signer: TokenSigner = Depends(get_token_signer),
) -> RequestContext:
    if credentials is None or credentials.scheme.lower() != "bearer":
        if settings.must_authenticate_requests:
            raise NotAuthenticatedError("Missing bearer token")
        return RequestContext()

    try:
        claims = claims_from_payload(signer.loads(credentials.credentials))
    except ValueError as exc:
        raise NotAuthenticatedError("Invalid or expired token") from exc
    return RequestContext(claims=claims)


async def require_admin(context: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not context.is_authenticated:
        raise NotAuthenticatedError()
    if not context.is_in_role("admin"):
        raise NotAuthorizedError()
    return context

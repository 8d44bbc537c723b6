"""Derive token claims from a user record."""
from __future__ import annotations

from accounts.models.user import User
from accounts.schemas.auth import TokenClaims

USER_KIND = "user"


def token_claims(user: User) -> TokenClaims:
    return TokenClaims(
        subject=user.username,
        kind=USER_KIND,
        applications=list(user.applications or []),
        roles=list(user.roles or []),
    )


def claims_to_payload(claims: TokenClaims) -> dict:
    """Compact payload stored inside a signed token."""

    return {
        "sub": claims.subject,
        "kind": claims.kind,
        "applications": claims.applications,
        "roles": claims.roles,
    }


def claims_from_payload(payload: dict) -> TokenClaims:
    subject = payload.get("sub")
    if not subject:
        raise ValueError("Token has no subject")
    return TokenClaims(
        subject=subject,
        kind=payload.get("kind", USER_KIND),
        applications=payload.get("applications") or [],
        roles=payload.get("roles") or [],
    )

"""Authentication-related schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str | None = Field(default=None, max_length=64)
    password: str | None = Field(default=None, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenClaims(BaseModel):
    """Non-secret identity summary handed to the token signer."""

    subject: str
    kind: str = "user"
    applications: list[str] = []
    roles: list[str] = []

    def is_in_role(self, role: str) -> bool:
        return role in self.roles

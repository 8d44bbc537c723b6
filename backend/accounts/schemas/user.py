"""Pydantic schemas for user operations."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Request bodies accept missing fields so the domain validators, not the
# schema layer, decide what is malformed.


class UserCreate(BaseModel):
    username: str | None = Field(default=None, max_length=64)
    password: str | None = Field(default=None, max_length=128)
    password_confirm: str | None = Field(default=None, max_length=128)
    email: str | None = Field(default=None, max_length=255)


class UserRead(BaseModel):
    id: int
    username: str
    email: str | None = None
    applications: list[str] = []
    roles: list[str] = []
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UserUpdate(BaseModel):
    """Fields an administrator may overwrite in one request."""

    email: str | None = None
    applications: list[str] | None = None
    roles: list[str] | None = None

    model_config = ConfigDict(extra="ignore")


class UserPasswordChange(BaseModel):
    oldpassword: str | None = None
    password: str | None = None
    password_confirm: str | None = None


class UserPasswordReset(BaseModel):
    username: str
    password: str | None = None
    password_confirm: str | None = None


class UserEmailChange(BaseModel):
    email_address: str | None = None


class UserRolesChange(BaseModel):
    roles: list[str] | None = None


class UserApplicationsChange(BaseModel):
    applications: list[str] | None = None


class UserQuery(BaseModel):
    """Filter, sort and pagination criteria for user searches."""

    username: str | None = None
    email: str | None = None
    role: str | None = None
    application: str | None = None
    sort: str = "username"
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=1, le=500)


class UserPage(BaseModel):
    items: list[UserRead]
    total_found: int

"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="ACCOUNTS_",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = "User Accounts"
    secret_key: str = "change-me"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./accounts.db"

    # Security
    token_salt: str = "accounts-token"
    access_token_expire_minutes: int = 60 * 24
    must_authenticate_requests: bool = True
    allowed_origins: Annotated[List[str], NoDecode] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Allow-lists
    known_applications: Annotated[List[str], NoDecode] = ["shipping", "tracking", "billing", "reporting"]
    known_roles: Annotated[List[str], NoDecode] = ["admin", "built-in", "user", "operator", "viewer"]

    @field_validator("allowed_origins", "known_applications", "known_roles", mode="before")
    @classmethod
    def _split_list(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()

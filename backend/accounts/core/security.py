"""Security helpers for password hashing and token signing."""
from __future__ import annotations

from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext

from .config import Settings, get_settings


_password_context = CryptContext(schemes=["argon2"], deprecated="auto")


class PasswordHasher:
    """Hash and verify user passwords using Argon2id."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str) -> bool:
        return _password_context.verify(password, hashed)

    @staticmethod
    def dummy_verify() -> bool:
        """Spend the time of a real verify when there is no stored hash."""
        return _password_context.dummy_verify()


class TokenSigner:
    """Sign and verify identity token payloads."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._max_age = settings.access_token_expire_minutes * 60
        self._serializer = URLSafeTimedSerializer(settings.secret_key, salt=settings.token_salt)

    def dumps(self, data: dict[str, Any]) -> str:
        return self._serializer.dumps(data)

    def loads(self, token: str) -> dict[str, Any]:
        try:
            return self._serializer.loads(token, max_age=self._max_age)
        except (BadSignature, SignatureExpired) as exc:
            raise ValueError("Invalid or expired token") from exc

from __future__ import annotations

import pytest

from accounts.core.config import Settings
from accounts.core.security import PasswordHasher, TokenSigner
from accounts.domain.claims import claims_from_payload, claims_to_payload
from accounts.schemas.auth import TokenClaims


@pytest.mark.parametrize("raw", ["secret1", "p@ss w0rd", "ünïcødé-pässwörd"])
def test_hash_verifies_its_own_input(raw: str) -> None:
    hashed = PasswordHasher.hash(raw)

    assert hashed != raw
    assert PasswordHasher.verify(raw, hashed)
    assert not PasswordHasher.verify(raw + "x", hashed)


def test_hashes_are_salted() -> None:
    first = PasswordHasher.hash("secret1")
    second = PasswordHasher.hash("secret1")

    assert first != second
    assert PasswordHasher.verify("secret1", first)
    assert PasswordHasher.verify("secret1", second)


def test_signed_claims_round_trip() -> None:
    signer = TokenSigner(Settings(secret_key="one"))
    claims = TokenClaims(subject="alice", applications=["shipping"], roles=["admin"])

    token = signer.dumps(claims_to_payload(claims))

    assert claims_from_payload(signer.loads(token)) == claims


def test_token_from_another_secret_is_rejected() -> None:
    token = TokenSigner(Settings(secret_key="one")).dumps({"sub": "alice"})

    with pytest.raises(ValueError):
        TokenSigner(Settings(secret_key="two")).loads(token)


def test_expired_token_is_rejected() -> None:
    signer = TokenSigner(Settings(secret_key="one", access_token_expire_minutes=-1))
    token = signer.dumps({"sub": "alice"})

    with pytest.raises(ValueError):
        signer.loads(token)


def test_payload_without_subject_is_rejected() -> None:
    with pytest.raises(ValueError):
        claims_from_payload({"kind": "user"})


def test_dummy_verify_never_succeeds() -> None:
    assert PasswordHasher.dummy_verify() is False

from __future__ import annotations

import pytest

from accounts_api.application.services.password_hashing import WerkzeugPasswordHasher


@pytest.fixture(scope="module")
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


@pytest.mark.parametrize("password", ["secret123", "ab", "pässwörd ✓", " spaced "])
def test_verify_accepts_original_password(hasher: WerkzeugPasswordHasher, password: str) -> None:
    digest = hasher.hash(password)

    assert digest != password
    assert hasher.verify(password, digest) is True


def test_verify_rejects_other_password(hasher: WerkzeugPasswordHasher) -> None:
    digest = hasher.hash("secret123")

    assert hasher.verify("secret124", digest) is False
    assert hasher.verify("", digest) is False


def test_each_hash_uses_fresh_salt(hasher: WerkzeugPasswordHasher) -> None:
    first = hasher.hash("secret123")
    second = hasher.hash("secret123")

    assert first != second
    assert hasher.verify("secret123", first)
    assert hasher.verify("secret123", second)


def test_default_method_is_scrypt() -> None:
    digest = WerkzeugPasswordHasher().hash("secret123")

    assert digest.startswith("scrypt:")

from __future__ import annotations

from authgate.application.services.password_hashing import WerkzeugPasswordHasher


def test_hash_is_salted_and_verifies(password_hasher: WerkzeugPasswordHasher) -> None:
    first = password_hasher.hash("secret123")
    second = password_hasher.hash("secret123")

    assert first != second
    assert "secret123" not in first
    assert password_hasher.verify("secret123", first)
    assert password_hasher.verify("secret123", second)


def test_wrong_password_is_rejected(password_hasher: WerkzeugPasswordHasher) -> None:
    hashed = password_hasher.hash("secret123")

    assert not password_hasher.verify("secret124", hashed)
    assert not password_hasher.verify("", hashed)


def test_malformed_hash_is_treated_as_mismatch(password_hasher: WerkzeugPasswordHasher) -> None:
    assert not password_hasher.verify("secret123", "not-a-hash")
    assert not password_hasher.verify("secret123", "")

"""Unit tests for auth/passwords.py -- bcrypt hash and verify."""

from __future__ import annotations

import pytest

from auth.passwords import DUMMY_HASH, hash_password, verify_password

_SAMPLES = ["secret1", "correct horse battery staple", "pässwörd-ñ", " leading space", "x"]


@pytest.mark.parametrize("plain", _SAMPLES)
def test_verify_accepts_own_hash(plain: str) -> None:
    assert verify_password(plain, hash_password(plain))


def test_same_password_hashes_differently() -> None:
    """Fresh salt per call: two digests of the same input never match."""
    first = hash_password("secret1")
    second = hash_password("secret1")
    assert first != second
    assert verify_password("secret1", first)
    assert verify_password("secret1", second)


def test_digest_embeds_bcrypt_parameters() -> None:
    digest = hash_password("secret1")
    assert digest.startswith("$2")
    assert "secret1" not in digest


def test_verify_rejects_other_password() -> None:
    assert not verify_password("secret1", hash_password("secret2"))


def test_verify_is_case_sensitive() -> None:
    assert not verify_password("Secret1", hash_password("secret1"))


def test_verify_returns_false_for_malformed_digest() -> None:
    assert verify_password("secret1", "not-a-bcrypt-hash") is False


def test_dummy_hash_is_a_real_digest() -> None:
    """login_user() spends a full bcrypt round against it for unknown emails."""
    assert DUMMY_HASH.startswith("$2")
    assert not verify_password("secret1", DUMMY_HASH)

"""
Unit tests for auth/service.py -- register_user() and login_user().

Covers:
- Duplicate username or email -> DuplicateIdentityError, no row written
- Distinct accounts get distinct ids
- Missing fields and over-long passwords -> ValidationError
- UNIQUE-constraint race mapped to DuplicateIdentityError
- Login success returns a token carrying the account's claims
- Unknown email and wrong password raise the same InvalidCredentialsError
- Persistence failures surface as InternalError without driver text
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from auth.passwords import verify_password
from auth.service import login_user, register_user
from auth.store import UserStore
from auth.tokens import decode_access_token
from core.errors import DuplicateIdentityError, InternalError, InvalidCredentialsError, ValidationError


class _RacingStore(UserStore):
    """Pretends the pre-check found nothing, as when two requests race."""

    def find_by_username_or_email(self, username, email):
        return None


class _BrokenStore:
    def find_by_username_or_email(self, username, email):
        raise OperationalError("SELECT ...", {}, Exception("disk I/O error"))

    def get_by_email(self, email):
        raise OperationalError("SELECT ...", {}, Exception("disk I/O error"))


# ---------------------------------------------------------------------------
# register_user
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_returns_id_and_stores_hash(self, user_store: UserStore) -> None:
        uid = register_user(user_store, "ana", "ana@x.com", "secret1")
        stored = user_store.get_by_id(uid)
        assert stored.username == "ana"
        assert stored.hashed_password != "secret1"
        assert verify_password("secret1", stored.hashed_password)

    def test_duplicate_username_rejected(self, user_store: UserStore) -> None:
        register_user(user_store, "u1", "e1@x.com", "p1")
        with pytest.raises(DuplicateIdentityError):
            register_user(user_store, "u1", "e2@x.com", "p2")
        assert user_store.count() == 1

    def test_duplicate_email_rejected(self, user_store: UserStore) -> None:
        register_user(user_store, "u1", "e1@x.com", "p1")
        with pytest.raises(DuplicateIdentityError):
            register_user(user_store, "u2", "e1@x.com", "p2")
        assert user_store.count() == 1

    def test_distinct_accounts_get_distinct_ids(self, user_store: UserStore) -> None:
        first = register_user(user_store, "u1", "e1@x.com", "p1")
        second = register_user(user_store, "u2", "e2@x.com", "p2")
        assert first != second
        assert user_store.count() == 2

    @pytest.mark.parametrize(
        "username,email,password",
        [("", "e@x.com", "p"), ("u", "", "p"), ("u", "e@x.com", ""), ("   ", "e@x.com", "p")],
    )
    def test_missing_fields_rejected(self, user_store: UserStore, username: str, email: str, password: str) -> None:
        with pytest.raises(ValidationError):
            register_user(user_store, username, email, password)
        assert user_store.count() == 0

    def test_password_over_bcrypt_limit_rejected(self, user_store: UserStore) -> None:
        with pytest.raises(ValidationError):
            register_user(user_store, "u1", "e1@x.com", "é" * 40)  # 80 UTF-8 bytes
        assert user_store.count() == 0

    def test_unique_constraint_race_maps_to_duplicate(self, engine) -> None:
        store = _RacingStore(engine)
        register_user(store, "u1", "e1@x.com", "p1")
        with pytest.raises(DuplicateIdentityError):
            register_user(store, "u1", "e2@x.com", "p2")
        assert store.count() == 1

    def test_store_failure_becomes_internal_error(self) -> None:
        with pytest.raises(InternalError) as info:
            register_user(_BrokenStore(), "u1", "e1@x.com", "p1")
        assert "disk I/O" not in info.value.message


# ---------------------------------------------------------------------------
# login_user
# ---------------------------------------------------------------------------


class TestLogin:
    def test_login_returns_token_with_claims(self, user_store: UserStore) -> None:
        uid = register_user(user_store, "ana", "ana@x.com", "secret1")
        result = login_user(user_store, "ana@x.com", "secret1")
        identity = decode_access_token(result.token)
        assert identity.user_id == uid
        assert identity.username == "ana"
        assert identity.email == "ana@x.com"
        assert result.user.id == uid

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, user_store: UserStore) -> None:
        register_user(user_store, "ana", "ana@x.com", "secret1")
        with pytest.raises(InvalidCredentialsError) as wrong_pw:
            login_user(user_store, "ana@x.com", "wrong")
        with pytest.raises(InvalidCredentialsError) as unknown:
            login_user(user_store, "nobody@x.com", "secret1")
        a, b = wrong_pw.value, unknown.value
        assert (type(a), a.status_code, a.code, a.message, a.detail) == (
            type(b),
            b.status_code,
            b.code,
            b.message,
            b.detail,
        )

    @pytest.mark.parametrize("email,password", [("", "secret1"), ("ana@x.com", ""), (None, None)])
    def test_missing_fields_rejected(self, user_store: UserStore, email, password) -> None:
        with pytest.raises(ValidationError):
            login_user(user_store, email, password)

    def test_store_failure_becomes_internal_error(self) -> None:
        with pytest.raises(InternalError):
            login_user(_BrokenStore(), "ana@x.com", "secret1")

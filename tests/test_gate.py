"""
Unit tests for auth/gate.py -- header parsing and the explicit GateResult.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from conftest import make_token

from auth.gate import check_authorization, extract_bearer_token
from core.errors import MissingTokenError, TokenExpiredError, TokenMalformedError


class TestExtractBearerToken:
    @pytest.mark.parametrize("header", [None, "", "   ", "Bearer", "Bearer   ", "Basic dXNlcjpwdw==", "Token abc"])
    def test_absent(self, header) -> None:
        assert extract_bearer_token(header) is None

    @pytest.mark.parametrize("header", ["Bearer abc.def.ghi", "bearer abc.def.ghi", "BEARER  abc.def.ghi "])
    def test_present(self, header: str) -> None:
        assert extract_bearer_token(header) == "abc.def.ghi"


class TestCheckAuthorization:
    def test_no_header_is_missing_token(self) -> None:
        result = check_authorization(None)
        assert not result.allowed
        assert isinstance(result.error, MissingTokenError)
        assert result.error.status_code == 401

    def test_other_scheme_is_missing_token(self) -> None:
        result = check_authorization("Basic dXNlcjpwdw==")
        assert isinstance(result.error, MissingTokenError)

    def test_valid_token_binds_identity(self) -> None:
        result = check_authorization(f"Bearer {make_token(user_id=42, username='ana', email='ana@x.com')}")
        assert result.allowed
        assert result.error is None
        assert result.identity.user_id == 42
        assert result.identity.email == "ana@x.com"

    def test_expired_token_is_rejected(self) -> None:
        token = make_token(now=datetime.now(timezone.utc) - timedelta(hours=3))
        result = check_authorization(f"Bearer {token}")
        assert not result.allowed
        assert isinstance(result.error, TokenExpiredError)
        assert result.error.status_code == 403

    def test_garbage_token_is_rejected(self) -> None:
        result = check_authorization("Bearer not-a-jwt")
        assert isinstance(result.error, TokenMalformedError)
        assert result.error.status_code == 403

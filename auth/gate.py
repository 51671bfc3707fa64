"""
auth/gate.py -- Authorization gate for protected requests.

check_authorization() takes the raw Authorization header and returns a
GateResult: either the verified Identity or the AuthorizationError that
rejects the request. It never raises and never touches the database; the
only state it reads is the signing secret inside auth.tokens.

    no header / no bearer token  -> MissingTokenError  (401)
    bad signature / unparseable  -> TokenMalformedError (403)
    signature fine, expired      -> TokenExpiredError   (403)

The FastAPI adapter lives in auth/dependencies.py.
"""

from __future__ import annotations

from dataclasses import dataclass

from auth.models import Identity
from auth.tokens import decode_access_token
from core.errors import AuthorizationError, InvalidTokenError, MissingTokenError

_SCHEME = "bearer"


@dataclass(frozen=True)
class GateResult:
    identity: Identity | None = None
    error: AuthorizationError | None = None

    @property
    def allowed(self) -> bool:
        return self.identity is not None


def extract_bearer_token(header: str | None) -> str | None:
    """Return the token from 'Bearer <token>', or None if absent or another scheme."""
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != _SCHEME:
        return None
    token = token.strip()
    return token or None


def check_authorization(header: str | None) -> GateResult:
    token = extract_bearer_token(header)
    if token is None:
        return GateResult(error=MissingTokenError())
    try:
        identity = decode_access_token(token)
    except InvalidTokenError as exc:
        return GateResult(error=exc)
    return GateResult(identity=identity)

"""
auth/tokens.py -- Session token issue and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, username (as "sub"), email, issued-at and expiry. Validity is
       fixed at two hours from issuance; there is no refresh and no
       revocation, so expiry is the only way a token stops working.

  Verification raises instead of returning None so the two failure modes
       stay distinguishable: TokenExpiredError (signature fine, window over)
       and TokenMalformedError (anything else). Both are InvalidTokenError
       and look identical to the client; the reason is for logs.

  SECRET_KEY: sourced from core.config.get_settings() once, at import. The
       Settings class refuses to load without one, so importing this module
       in a misconfigured process fails before any request is served.

Layer rule: no imports from api/ or media/.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from auth.models import Identity
from core.config import get_settings
from core.errors import TokenExpiredError, TokenMalformedError

_settings = get_settings()

_ALGORITHM = "HS256"

TOKEN_TTL = timedelta(hours=2)

_REQUIRED_CLAIMS = ("sub", "user_id", "email", "exp")


def create_access_token(user_id: int, username: str, email: str, now: datetime | None = None) -> str:
    """Encode a signed JWT for the given identity.

    Args:
        user_id:  Store-assigned user id.
        username: Stored as the JWT subject claim.
        email:    Login email, echoed back to clients via /auth/me.
        now:      Issue time. Defaults to the current UTC time; tests pass a
                  past value to mint already-expired tokens.
    """
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": username,
        "user_id": user_id,
        "email": email,
        "iat": issued_at,
        "exp": issued_at + TOKEN_TTL,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> Identity:
    """Verify a JWT and return the identity it carries.

    Raises:
        TokenExpiredError:   signature valid, expiry elapsed.
        TokenMalformedError: cannot parse, signature mismatch, or claims missing.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpiredError(detail=str(exc)) from exc
    except JWTError as exc:
        raise TokenMalformedError(detail=str(exc)) from exc

    if any(claim not in payload for claim in _REQUIRED_CLAIMS):
        raise TokenMalformedError(detail="missing required claims")
    if not isinstance(payload["user_id"], int) or isinstance(payload["user_id"], bool):
        raise TokenMalformedError(detail="user_id claim is not an integer")
    return Identity(user_id=payload["user_id"], username=payload["sub"], email=payload["email"])


def token_expires_in() -> int:
    """Seconds a freshly issued token stays valid."""
    return int(TOKEN_TTL.total_seconds())

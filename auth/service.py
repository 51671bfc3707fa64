"""
auth/service.py -- Registration and login.

register_user() and login_user() are the only code paths that create users
or issue tokens. Route handlers call them and let the AppError subclasses
they raise propagate to the exception handlers in api/main.py.

Failure mapping at this boundary:
  bad input                 -> ValidationError
  username or email taken   -> DuplicateIdentityError (pre-check or UNIQUE race)
  unknown email / wrong pw  -> InvalidCredentialsError (one shape for both)
  any SQLAlchemyError       -> InternalError, logged with traceback here

Layer rule: no imports from api/ or media/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import User
from auth.passwords import DUMMY_HASH, MAX_PASSWORD_BYTES, hash_password, verify_password
from auth.store import UserStore
from auth.tokens import create_access_token
from core.errors import DuplicateIdentityError, InternalError, InvalidCredentialsError, ValidationError

logger = logging.getLogger("vibesbook.auth")


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


def _require_fields(**fields: str | None) -> None:
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        raise ValidationError("All fields are required.", detail=f"missing: {', '.join(missing)}")


def _check_password_length(password: str) -> None:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")


def register_user(store: UserStore, username: str, email: str, password: str) -> int:
    """Create an account and return its id.

    Exactly one row is written on success and none on any failure.
    """
    _require_fields(username=username, email=email, password=password)
    _check_password_length(password)

    try:
        if store.find_by_username_or_email(username, email) is not None:
            raise DuplicateIdentityError()
        user = User(username=username, email=email, hashed_password=hash_password(password))
        user_id = store.create_user(user)
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same name or email.
        raise DuplicateIdentityError() from exc
    except SQLAlchemyError as exc:
        logger.exception("Registration failed for username=%r", username)
        raise InternalError("Internal server error during registration.") from exc

    logger.info("User registered (user_id=%s, username=%r)", user_id, username)
    return user_id


def login_user(store: UserStore, email: str, password: str) -> LoginResult:
    """Check credentials and issue a session token.

    Always runs bcrypt whether or not the email exists, so response time
    does not reveal which accounts are registered:
    - Unknown email: bcrypt runs against DUMMY_HASH
    - Wrong password: bcrypt runs against the real hash
    """
    _require_fields(email=email, password=password)

    try:
        user = store.get_by_email(email)
    except SQLAlchemyError as exc:
        logger.exception("Login lookup failed")
        raise InternalError("Internal server error during login.") from exc

    if user is None:
        verify_password(password, DUMMY_HASH)
        logger.info("Login failed: unknown email")
        raise InvalidCredentialsError()
    if not verify_password(password, user.hashed_password):
        logger.info("Login failed: bad password (user_id=%s)", user.id)
        raise InvalidCredentialsError()

    token = create_access_token(user.id, user.username, user.email)
    logger.info("Login succeeded (user_id=%s)", user.id)
    return LoginResult(token=token, user=user)

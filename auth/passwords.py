"""
auth/passwords.py -- bcrypt password hashing.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection feeds bcrypt a password longer than 72 bytes, which current bcrypt
releases reject with an explicit error.

Every digest embeds its own random salt and cost factor, so hashing the same
password twice gives two different strings, and verification needs nothing
but the digest itself.
"""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Callers must keep plain within MAX_PASSWORD_BYTES when UTF-8 encoded;
    the Auth Service rejects longer passwords before they get here.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed digest or an over-long password counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. login_user() verifies against this digest when
# the email is unknown, so both failure paths cost one bcrypt round.
DUMMY_HASH: str = hash_password("vibesbook_timing_dummy")

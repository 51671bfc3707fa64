"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and the
service do the work.

Layer rule: no imports from api/ or media/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    id is None before the record is written to the database. username and
    email are each unique across all users (UNIQUE constraints in the store).
    Records are created by registration only and never updated.
    """

    username: str
    email: str
    hashed_password: str  # bcrypt digest, salt and cost embedded
    id: int | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert


@dataclass(frozen=True)
class Identity:
    """Verified token claims bound to a single in-flight request."""

    user_id: int
    username: str
    email: str

"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

require_identity() is the routing layer's side of the authorization gate:
it runs check_authorization() on the Authorization header, raises the
rejection for the exception handlers in api/main.py, and binds the verified
Identity to request.state.identity for downstream use.

It is a plain def on purpose: FastAPI runs sync dependencies in its thread
pool, so signature verification never blocks the event loop.

Layer rule: no imports from api/ or media/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.gate import check_authorization
from auth.models import Identity
from core.errors import InvalidTokenError

logger = logging.getLogger("vibesbook.auth")


def require_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises MissingTokenError (401) or InvalidTokenError (403).

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(require_identity)): ...
    """
    result = check_authorization(request.headers.get("Authorization"))
    if not result.allowed:
        error = result.error
        if isinstance(error, InvalidTokenError):
            logger.info("Rejected token on %s %s: %s (%s)", request.method, request.url.path, error.reason, error.detail)
        else:
            logger.info("Rejected request without token on %s %s", request.method, request.url.path)
        raise error
    request.state.identity = result.identity
    return result.identity

"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in api/main.py (to mount as middleware) and in the route modules
(to apply per-route limits with @limiter.limit()).

Using a single shared instance ensures all routes share the same counter
store. Per-route limit strings come from Settings so deployments can tune
login and registration throttling without a code change; RATE_LIMIT_ENABLED
switches the whole limiter off (load tests, the test suite).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=_settings.rate_limit_storage_uri,
    enabled=_settings.rate_limit_enabled,
)

UPLOAD_RATE_LIMIT = "20/minute"
LIST_RATE_LIMIT = "60/minute"

"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Vibesbook happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). Type coercion and validation are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment.

Security notes:
  SECRET_KEY has no default and no fallback. A missing, empty or short key is
  a startup failure in every mode, including DEBUG. Tokens signed with a
  known or guessable key can be forged by anyone.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/ or media/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("vibesbook.config")

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Everything except SECRET_KEY has a default so a local run only needs the
    key. Environment variable names are the uppercased field names.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured"; the validator rejects it.
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = 3000
    allowed_hosts: list[str] = ["*"]
    cors_origins: list[str] = ["http://localhost:3000"]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    database_url: str = f"sqlite:///{_PROJECT_ROOT / 'vibesbook.db'}"

    # ------------------------------------------------------------------
    # Media hosting
    # ------------------------------------------------------------------

    media_root: str = str(_PROJECT_ROOT / "media_files")
    media_base_url: str = "/static/media"
    max_upload_bytes: int = 10 * 1024 * 1024

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    register_rate_limit: str = "5/minute"
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Refuse to start without a usable signing secret.

        Rotating the key invalidates every outstanding token immediately.
        There is no revocation list, so that is the only kill switch.
        """
        if not self.secret_key.strip():
            raise ValueError(
                "SECRET_KEY is required. Set SECRET_KEY in your environment or .env file. "
                "Generate one with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )
        if len(self.secret_key) < MIN_SECRET_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters.")
        if self.max_upload_bytes <= 0:
            raise ValueError("MAX_UPLOAD_BYTES must be positive.")
        if self.debug:
            logger.warning("DEBUG is enabled -- do not run this configuration in production.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()

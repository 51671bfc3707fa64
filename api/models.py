"""
API request and response models for Vibesbook REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
media/models.py, which own the internal domain representation. Route handlers
map between the two.

Request fields default to "" rather than being required: a missing field must
produce the service's 400 "All fields are required." instead of a schema
error, and the service is the one place that enforces it.

Response bodies use camelCase keys (userId, imageUrl, ...) for the web and
mobile clients; the Python side stays snake_case via alias_generator.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_RESPONSE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    username: str = Field(default="", max_length=255)
    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=255)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=255)


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class RegisterResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    message: str = "User registered successfully."
    user_id: int


class LoginResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    message: str = "Login successful."
    token: str
    token_type: str = "bearer"
    expires_in: int


class MeResponse(BaseModel):
    """Identity bound to the current request by the authorization gate."""

    model_config = _RESPONSE_CONFIG

    user_id: int
    username: str
    email: str


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------


class MediaUploadResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    message: str = "Image and audio uploaded successfully."
    media_id: int
    image_url: str
    audio_url: str


class MediaItemResponse(BaseModel):
    """One row in GET /api/media/my-media."""

    model_config = _RESPONSE_CONFIG

    id: int
    user_id: int
    image_url: str
    audio_url: str
    image_public_id: str
    audio_public_id: str
    description: str
    created_at: str


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]

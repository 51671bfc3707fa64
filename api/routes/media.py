"""
api/routes/media.py -- Media upload and listing routes.

Routes:
  POST /api/media/upload    -- multipart image + audio (+ description); 201
  GET  /api/media/my-media  -- the caller's media items, newest first

Every route on this router requires a bearer token. FastAPI parses the
multipart body first, then the router-level dependency rejects the request
before any handler code runs, so nothing is stored for an unauthenticated
caller. Handlers that need the identity declare the same dependency again,
which FastAPI resolves from its per-request cache.

File uploads:
  Both files are required. image must be image/*, audio must be audio/*.
  Each file is capped at MAX_UPLOAD_BYTES. If the second upload or the
  database insert fails, files already hosted for the request are deleted.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.exc import SQLAlchemyError

from api.limiter import LIST_RATE_LIMIT, UPLOAD_RATE_LIMIT, limiter
from api.models import MediaItemResponse, MediaUploadResponse
from auth.dependencies import require_identity
from auth.models import Identity
from core.config import get_settings
from core.errors import InternalError, MediaUploadError, PayloadTooLargeError, ValidationError
from media.hosting import AUDIO_FOLDER, IMAGE_FOLDER, HostedMedia, MediaHost
from media.models import MediaItem
from media.store import MediaStore

logger = logging.getLogger("vibesbook.media")

_settings = get_settings()

router = APIRouter(dependencies=[Depends(require_identity)])


def _read_upload(upload: Optional[UploadFile], kind: str, field: str) -> tuple[bytes, str]:
    """Return (bytes, content_type) for one multipart file, enforcing type and size."""
    if upload is None:
        raise ValidationError("Both an image and an audio file are required.", detail=f"missing: {field}")
    content_type = (upload.content_type or "").lower()
    if not content_type.startswith(f"{kind}/"):
        raise ValidationError(f"'{field}' must be an {kind} file.", detail=f"content type: {content_type or 'none'}")
    data = upload.file.read(_settings.max_upload_bytes + 1)
    if len(data) > _settings.max_upload_bytes:
        raise PayloadTooLargeError(f"'{field}' must be {_settings.max_upload_bytes} bytes or smaller.")
    if not data:
        raise ValidationError(f"'{field}' is empty.")
    return data, content_type


def _discard(host: MediaHost, *hosted: HostedMedia) -> None:
    """Delete files hosted for a request that failed. Failures are logged, not raised."""
    for media in hosted:
        try:
            host.delete(media.public_id)
        except (OSError, ValueError):
            logger.warning("Could not remove orphaned media file %s", media.public_id, exc_info=True)


# ---------------------------------------------------------------------------
# POST /media/upload
# ---------------------------------------------------------------------------


@limiter.limit(UPLOAD_RATE_LIMIT)
@router.post("/media/upload", response_model=MediaUploadResponse, status_code=201)
def upload_media(
    request: Request,
    identity: Identity = Depends(require_identity),
    image: Optional[UploadFile] = File(default=None),
    audio: Optional[UploadFile] = File(default=None),
    description: str = Form(default="", max_length=2000),
) -> MediaUploadResponse:
    """Store an image and its audio track and record them for the caller."""
    image_data, image_type = _read_upload(image, "image", "image")
    audio_data, audio_type = _read_upload(audio, "audio", "audio")

    host: MediaHost = request.app.state.media_host
    media_store: MediaStore = request.app.state.media_store

    hosted_image = host.upload(image_data, image_type, IMAGE_FOLDER)
    try:
        hosted_audio = host.upload(audio_data, audio_type, AUDIO_FOLDER)
    except MediaUploadError:
        _discard(host, hosted_image)
        raise

    item = MediaItem(
        user_id=identity.user_id,
        image_url=hosted_image.url,
        audio_url=hosted_audio.url,
        image_public_id=hosted_image.public_id,
        audio_public_id=hosted_audio.public_id,
        description=description,
    )
    try:
        media_id = media_store.create_media(item)
    except SQLAlchemyError as exc:
        logger.exception("Could not record media for user_id=%s", identity.user_id)
        _discard(host, hosted_image, hosted_audio)
        raise InternalError("Internal server error while saving media.") from exc

    logger.info("Media %s uploaded by user_id=%s", media_id, identity.user_id)
    return MediaUploadResponse(media_id=media_id, image_url=item.image_url, audio_url=item.audio_url)


# ---------------------------------------------------------------------------
# GET /media/my-media
# ---------------------------------------------------------------------------


@limiter.limit(LIST_RATE_LIMIT)
@router.get("/media/my-media", response_model=list[MediaItemResponse])
def my_media(request: Request, identity: Identity = Depends(require_identity)) -> list[MediaItemResponse]:
    """Return the caller's media. Scoped by the token's user id, never by a parameter."""
    media_store: MediaStore = request.app.state.media_store
    try:
        items = media_store.list_by_user(identity.user_id)
    except SQLAlchemyError as exc:
        logger.exception("Could not list media for user_id=%s", identity.user_id)
        raise InternalError("Internal server error while fetching media.") from exc
    return [
        MediaItemResponse(
            id=m.id,
            user_id=m.user_id,
            image_url=m.image_url,
            audio_url=m.audio_url,
            image_public_id=m.image_public_id,
            audio_public_id=m.audio_public_id,
            description=m.description,
            created_at=m.created_at,
        )
        for m in items
    ]

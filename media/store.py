"""
media/store.py -- SQLAlchemy Core persistence for media items.

Same Repository + Data Mapper shape as auth/store.py, on the shared engine
and metadata from core/database.py. Every read is scoped by user_id; there is
no query that returns another user's media.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Index, Integer, String, Table, Text
from sqlalchemy.engine import Engine

from core.database import metadata
from media.models import MediaItem

_media = Table(
    "media",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("image_url", Text, nullable=False),
    Column("audio_url", Text, nullable=False),
    Column("image_public_id", String(255), nullable=False),
    Column("audio_public_id", String(255), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("created_at", String(32), nullable=False),
    Index("ix_media_user_id", "user_id"),
)


class MediaStore:
    """Repository for MediaItem entities.

    Usage:
        store = MediaStore(engine)
        media_id = store.create_media(MediaItem(user_id=1, image_url=..., ...))
        items = store.list_by_user(1)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _media.create(self.engine, checkfirst=True)

    def create_media(self, item: MediaItem) -> int:
        """Insert a media record and return its ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _media.insert().values(
                    user_id=item.user_id,
                    image_url=item.image_url,
                    audio_url=item.audio_url,
                    image_public_id=item.image_public_id,
                    audio_public_id=item.audio_public_id,
                    description=item.description,
                    created_at=datetime.now(timezone.utc).isoformat(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get(self, media_id: int) -> MediaItem | None:
        with self.engine.connect() as conn:
            row = conn.execute(_media.select().where(_media.c.id == media_id)).fetchone()
        return _row_to_media(row) if row is not None else None

    def list_by_user(self, user_id: int) -> list[MediaItem]:
        """Return every media item owned by user_id, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _media.select().where(_media.c.user_id == user_id).order_by(_media.c.id.desc())
            ).fetchall()
        return [_row_to_media(r) for r in rows]


def _row_to_media(row) -> MediaItem:
    return MediaItem(
        id=row.id,
        user_id=row.user_id,
        image_url=row.image_url,
        audio_url=row.audio_url,
        image_public_id=row.image_public_id,
        audio_public_id=row.audio_public_id,
        description=row.description,
        created_at=row.created_at,
    )

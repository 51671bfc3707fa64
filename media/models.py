"""
media/models.py -- Domain dataclasses for uploaded media.

Pure data containers with zero logic. Persistence lives in media/store.py,
file hosting in media/hosting.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class MediaItem:
    """One image + audio pair uploaded by a user.

    The *_public_id fields identify the files at the hosting collaborator so
    they can be located (or removed) later without parsing URLs.

    id is None before the record is written to the database.
    """

    user_id: int
    image_url: str
    audio_url: str
    image_public_id: str
    audio_public_id: str
    description: str = ""
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert

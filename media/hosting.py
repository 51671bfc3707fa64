"""
media/hosting.py -- Media hosting collaborator.

The API hands raw bytes to a MediaHost and gets back a stable public URL and
an identifier. LocalMediaHost keeps the files on disk under MEDIA_ROOT and
builds URLs under MEDIA_BASE_URL, which api/main.py serves as static files.
A hosted provider only has to implement the same upload() and delete()
signatures.

Files are written as <root>/<folder>/<uuid><ext>. The caller never chooses
the file name, so user-supplied names cannot traverse out of the root.
"""

from __future__ import annotations

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from core.errors import MediaUploadError

logger = logging.getLogger("vibesbook.media")

IMAGE_FOLDER = "images"
AUDIO_FOLDER = "audios"

# mimetypes has no entry for some common audio types on minimal systems.
_EXTRA_EXTENSIONS = {
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/ogg": ".ogg",
    "audio/webm": ".weba",
    "image/webp": ".webp",
}


@dataclass(frozen=True)
class HostedMedia:
    url: str
    public_id: str


class MediaHost(Protocol):
    def upload(self, data: bytes, content_type: str, folder: str) -> HostedMedia: ...

    def delete(self, public_id: str) -> None: ...


def _extension_for(content_type: str) -> str:
    base = content_type.split(";", 1)[0].strip().lower()
    return _EXTRA_EXTENSIONS.get(base) or mimetypes.guess_extension(base) or ".bin"


def _check_folder(folder: str) -> str:
    folder = folder.strip("/\\")
    if not folder or ".." in folder or "\\" in folder:
        raise ValueError(f"invalid media folder: {folder!r}")
    return folder


class LocalMediaHost:
    def __init__(self, root_dir: str | Path, base_url: str) -> None:
        self.root = Path(root_dir).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    def upload(self, data: bytes, content_type: str, folder: str) -> HostedMedia:
        """Write data under folder and return its public URL and id.

        Raises ValueError for an unsafe folder name and MediaUploadError when
        the file cannot be written.
        """
        folder = _check_folder(folder)
        public_id = f"{folder}/{uuid.uuid4().hex}{_extension_for(content_type)}"
        path = self.root / public_id
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            logger.exception("Could not write media file %s", path)
            raise MediaUploadError() from exc
        logger.info("Stored %d bytes as %s", len(data), public_id)
        return HostedMedia(url=f"{self.base_url}/{public_id}", public_id=public_id)

    def delete(self, public_id: str) -> None:
        """Remove a previously uploaded file. A missing file is not an error."""
        path = (self.root / public_id).resolve()
        if not path.is_relative_to(self.root):
            raise ValueError(f"invalid media id: {public_id!r}")
        path.unlink(missing_ok=True)

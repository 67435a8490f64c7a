"""Avatar image storage on the local filesystem.

Avatars arrive as ``data:image/<ext>;base64,<payload>`` URIs. They are
validated, decoded and written under the uploads directory as
``<uuid4>.<ext>``; contacts keep only that filename and callers see it
as ``/uploads/<filename>``.
"""
from __future__ import annotations

import base64
import binascii
import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import InvalidImageData, InvalidImageFormat, StorageUnavailable

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ("jpeg", "jpg", "png", "gif")
PUBLIC_PREFIX = "/uploads/"

_DATA_URI_PREFIX = re.compile(r"^data:image/(.*?);base64,")


def public_url(filename: Optional[str]) -> Optional[str]:
    """Map a stored avatar filename to its served path."""
    if not filename:
        return None
    return f"{PUBLIC_PREFIX}{filename}"


def is_public_url(value: str) -> bool:
    return value.startswith(PUBLIC_PREFIX)


@dataclass(frozen=True)
class ImageDeleteResult:
    """Outcome of a best-effort avatar delete."""
    filename: Optional[str]
    deleted: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ImageStore:
    """Writes and removes avatar files in a single directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, filename: str) -> Path:
        # Stored values are bare filenames; never follow directory parts.
        return self.directory / Path(filename).name

    def save(self, data_uri: str) -> str:
        """Validate and persist a base64 data URI, returning the new filename.

        Raises:
            InvalidImageData: prefix missing/malformed or payload undecodable.
            InvalidImageFormat: extension outside ``ALLOWED_EXTENSIONS``.
        """
        match = _DATA_URI_PREFIX.match(data_uri or "")
        if not match or not match.group(1):
            raise InvalidImageData()

        extension = match.group(1).lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise InvalidImageFormat()

        payload = data_uri[match.end():]
        try:
            image_bytes = base64.b64decode(payload)
        except (binascii.Error, ValueError) as exc:
            raise InvalidImageData() from exc
        if not image_bytes:
            raise InvalidImageData()

        filename = f"{uuid.uuid4()}.{extension}"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path_for(filename).write_bytes(image_bytes)
        except OSError as exc:
            raise StorageUnavailable(f"Failed to write avatar {filename}") from exc
        logger.info("Saved avatar %s (%d bytes)", filename, len(image_bytes))
        return filename

    def delete(self, filename: Optional[str]) -> ImageDeleteResult:
        """Remove a stored avatar. Never raises; failures are logged."""
        if not filename:
            return ImageDeleteResult(filename=None)

        path = self.path_for(filename)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Avatar %s already missing from %s", filename, self.directory)
            return ImageDeleteResult(filename=filename)
        except OSError as exc:
            logger.error("Error deleting avatar %s: %s", filename, exc)
            return ImageDeleteResult(filename=filename, error=str(exc))

        logger.info("Deleted avatar %s", filename)
        return ImageDeleteResult(filename=filename, deleted=True)

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()

from __future__ import annotations

import io
import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from app.menagerie.storage import Storage

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.menagerie.modules.photos.models import Photo

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")
PHOTO_PREFIX = "photos"

_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded file that passed validation."""

    data: bytes
    extension: str

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self.extension]


def _extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].strip().lower()


def validate_image(filename: str | None, data: bytes | None, *, max_bytes: int) -> tuple[ImageUpload | None, str | None]:
    """
    Returns (upload, error). Checks extension, size and that Pillow can decode it.
    """
    if not filename or data is None:
        return None, "Please choose an image to upload."
    ext = _extension(filename)
    if ext not in ALLOWED_EXTENSIONS:
        return None, f"The image must be one of: {', '.join(ALLOWED_EXTENSIONS)}."
    if not data:
        return None, "The uploaded file is empty."
    if len(data) > max_bytes:
        return None, f"The image may not be larger than {max_bytes // 1024} KB."
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        return None, "The file must be an image."
    return ImageUpload(data=data, extension="jpg" if ext == "jpeg" else ext), None


def validate_photo_payload(payload: dict) -> dict[str, str]:
    errors: dict[str, str] = {}
    title = (payload.get("title") or "").strip()
    if len(title) > 255:
        errors["title"] = "Title may not be longer than 255 characters."
    return errors


def build_photo_storage_key(extension: str) -> str:
    return f"{PHOTO_PREFIX}/{uuid.uuid4().hex}.{extension}"


def _discard(storage: Storage, key: str) -> None:
    try:
        storage.delete(key)
        logger.info("Deleted photo file %s", key)
    except Exception:
        logger.warning("Could not delete photo file %s; leaving it orphaned", key, exc_info=True)


def create_photo(s: "Session", storage: Storage, upload: ImageUpload, payload: dict) -> "Photo":
    """Write the file, then insert the row. The file is removed again if the insert fails."""
    from app.menagerie.modules.photos.models import Photo

    key = build_photo_storage_key(upload.extension)
    storage.put_bytes(key, upload.data, content_type=upload.content_type)
    logger.info("Stored photo file %s (%d bytes)", key, len(upload.data))

    photo = Photo(path=key, title=(payload.get("title") or "").strip() or None)
    s.add(photo)
    try:
        s.flush()
    except Exception:
        s.rollback()
        _discard(storage, key)
        raise
    return photo


def update_photo(
    s: "Session",
    storage: Storage,
    photo: "Photo",
    payload: dict,
    upload: ImageUpload | None = None,
) -> str | None:
    """
    Update the title and, when `upload` is given, point the row at a new file.

    Returns the superseded storage key; call `discard_file` with it after the
    commit succeeds so a failed commit never loses the current image.
    """
    photo.title = (payload.get("title") or "").strip() or None
    if upload is None:
        return None

    old_key = photo.path
    new_key = build_photo_storage_key(upload.extension)
    storage.put_bytes(new_key, upload.data, content_type=upload.content_type)
    logger.info("Stored replacement photo file %s for photo %s", new_key, photo.id)
    photo.path = new_key
    try:
        s.flush()
    except Exception:
        s.rollback()
        _discard(storage, new_key)
        raise
    return old_key


def delete_photo(s: "Session", photo: "Photo") -> str:
    """
    Delete the row; animals referencing it get photo_id cleared.
    Returns the storage key to discard once the commit succeeds.
    """
    key = photo.path
    for animal in list(photo.animals):
        animal.photo = None
    s.delete(photo)
    return key


def discard_file(storage: Storage, key: str | None) -> None:
    if key:
        _discard(storage, key)

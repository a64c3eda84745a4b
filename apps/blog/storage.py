"""
Blog image storage

Images are written to UPLOAD_DIR on local disk and served by the web
server at UPLOAD_BASE_URL.
"""
import os
import logging
import aiofiles
from typing import Optional
from uuid import uuid4
from fastapi import UploadFile

from apps.blog.exceptions import InvalidImageError

logger = logging.getLogger(__name__)

# Upload configuration
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "/home/rocky/uploads/blog")
UPLOAD_BASE_URL = os.getenv("UPLOAD_BASE_URL", "https://api.vuhnger.dev/uploads/blog")
ALLOWED_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10 MB


def has_image(file: Optional[UploadFile]) -> bool:
    """Browsers send an empty file part when no file was picked."""
    return file is not None and bool(file.filename)


async def save_image(file: UploadFile) -> str:
    """
    Validate and store an uploaded image.
    Returns the public URL of the stored file.
    """
    if file.content_type not in ALLOWED_TYPES:
        raise InvalidImageError(
            f"Invalid file type {file.content_type!r}. Allowed: {', '.join(sorted(ALLOWED_TYPES))}"
        )

    contents = await file.read()
    if len(contents) > MAX_IMAGE_SIZE:
        raise InvalidImageError(
            f"File too large. Max size: {MAX_IMAGE_SIZE // (1024*1024)} MB"
        )

    ext = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else "jpg"
    filename = f"{uuid4().hex}.{ext}"
    filepath = os.path.join(UPLOAD_DIR, filename)

    os.makedirs(UPLOAD_DIR, exist_ok=True)

    async with aiofiles.open(filepath, "wb") as f:
        await f.write(contents)

    logger.info(f"Stored blog image: {filename}")
    return f"{UPLOAD_BASE_URL}/{filename}"


def image_path(url: str) -> Optional[str]:
    """Local path for a URL produced by save_image, None for foreign URLs."""
    prefix = f"{UPLOAD_BASE_URL}/"
    if not url or not url.startswith(prefix):
        return None
    filename = os.path.basename(url[len(prefix):])
    return os.path.join(UPLOAD_DIR, filename)


def delete_image(url: Optional[str]) -> None:
    """Remove a stored image. Missing files are only logged."""
    path = image_path(url) if url else None
    if path is None:
        return
    try:
        os.remove(path)
        logger.info(f"Deleted blog image: {os.path.basename(path)}")
    except FileNotFoundError:
        logger.warning(f"Blog image already gone: {path}")

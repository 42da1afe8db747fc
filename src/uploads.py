"""Storage for images attached to blog posts."""

import os
import time
import uuid
import logging
from pathlib import Path
from typing import Optional
from fastapi import UploadFile
from dotenv import load_dotenv

from src.errors import ValidationError

# Load environment variables
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

# Get uploads path from environment
PATH_UPLOADS = os.getenv("PATH_UPLOADS")
if not PATH_UPLOADS:
    raise ValueError("PATH_UPLOADS must be set in .env file")

UPLOADS_URL_PREFIX = "/uploads"
BLOG_IMAGES_DIR = "blog-images"
ALLOWED_IMAGE_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "webp"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5 MB


def blog_images_path() -> Path:
    """Directory holding uploaded blog images, created on demand."""
    path = Path(PATH_UPLOADS) / BLOG_IMAGES_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def allowed_image(filename: str) -> bool:
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS


def has_image(image: Optional[UploadFile]) -> bool:
    """Browsers send an empty file part when no image was picked."""
    return image is not None and bool(image.filename)


def save_image(image: UploadFile) -> str:
    """
    Validate and store an uploaded image.

    The stored name is the upload time in milliseconds plus a random uuid,
    keeping only the original extension, so concurrent uploads never collide.

    Args:
        image: Uploaded image file

    Returns:
        str: Public URL of the stored image, e.g. /uploads/blog-images/<name>

    Raises:
        ValidationError: If the extension is not allowed or the file is too large
    """
    if not allowed_image(image.filename):
        logger.warning(f"Invalid image type uploaded: {image.filename}")
        raise ValidationError("Only image files allowed (jpeg, jpg, png, gif, webp)")

    data = image.file.read(MAX_IMAGE_BYTES + 1)
    if len(data) > MAX_IMAGE_BYTES:
        logger.warning(f"Image too large: {image.filename}")
        raise ValidationError("Image must be 5 MB or smaller")

    extension = image.filename.rsplit('.', 1)[1].lower()
    stored_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex}.{extension}"
    stored_path = blog_images_path() / stored_name
    stored_path.write_bytes(data)

    logger.info(f"Stored image {image.filename} as {stored_name} ({len(data)} bytes)")
    return f"{UPLOADS_URL_PREFIX}/{BLOG_IMAGES_DIR}/{stored_name}"


def discard_image(image_url: Optional[str]) -> None:
    """Remove a stored image, given the URL returned by save_image."""
    if not image_url:
        return

    prefix = f"{UPLOADS_URL_PREFIX}/{BLOG_IMAGES_DIR}/"
    if not image_url.startswith(prefix):
        logger.warning(f"Refusing to discard image outside uploads: {image_url}")
        return

    stored_path = blog_images_path() / image_url[len(prefix):]
    # Ensure the resolved path is within the images directory
    try:
        stored_path.resolve().relative_to(blog_images_path().resolve())
    except ValueError:
        logger.warning(f"Path traversal attempt detected: {image_url}")
        return

    if stored_path.is_file():
        stored_path.unlink()
        logger.info(f"Discarded image: {image_url}")

import logging
import os
import shutil
import uuid
from typing import Optional

from fastapi import HTTPException, UploadFile, status

from app.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}
ALLOWED_CONTENT_TYPES = {'image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp'}
CROP_URL_PREFIX = "/uploads/crops/"


def has_upload(file: Optional[UploadFile]) -> bool:
    return file is not None and bool(file.filename)


def validate_image(file: UploadFile) -> str:
    """Check type and size of an uploaded image and return its extension."""
    file_extension = os.path.splitext(file.filename)[1].lower()
    if file_extension not in ALLOWED_EXTENSIONS or (file.content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed"
        )

    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    if size > settings.MAX_IMAGE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Image exceeds the maximum upload size"
        )
    return file_extension


def save_crop_image(file: UploadFile) -> str:
    """Store an uploaded crop image under a fresh name and return its public URL."""
    file_extension = validate_image(file)
    upload_dir = settings.crop_upload_dir
    upload_dir.mkdir(parents=True, exist_ok=True)

    safe_filename = f"{uuid.uuid4()}{file_extension}"
    with open(upload_dir / safe_filename, "wb") as buffer:
        shutil.copyfileobj(file.file, buffer)
    return f"{CROP_URL_PREFIX}{safe_filename}"


def delete_crop_image(image_url: Optional[str]):
    if not image_url or not image_url.startswith(CROP_URL_PREFIX):
        return
    image_path = settings.crop_upload_dir / os.path.basename(image_url)
    try:
        if image_path.exists():
            image_path.unlink()
    except OSError:
        # Log the error but don't fail the surrounding operation
        logger.exception("Error deleting image file %s", image_path)

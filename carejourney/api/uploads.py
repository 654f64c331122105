"""
carejourney/api/uploads.py

Purpose: Multipart image uploads

- Accepts JPG, PNG and WEBP only
- Enforces MAX_UPLOAD_SIZE
- Streams accepted files to object storage under <userId>/<kind>-<epoch ms>
"""

from typing import Dict, Optional

from fastapi import UploadFile

from carejourney.core.config import settings
from carejourney.core.exceptions import PayloadTooLargeError, ValidationError
from carejourney.core.logging import get_logger
from carejourney.services.storage_service import StorageService, build_object_key
from carejourney.utils.constants import ALLOWED_IMAGE_MIME_TYPES, INVALID_FILE_TYPE_MESSAGE

logger = get_logger(__name__)


def check_image_type(content_type: Optional[str]) -> str:
    content_type = (content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_IMAGE_MIME_TYPES:
        raise ValidationError(INVALID_FILE_TYPE_MESSAGE)
    return content_type


async def read_limited(upload: UploadFile, limit: int) -> bytes:
    """
    Reads at most limit bytes; anything larger is rejected without
    buffering the rest.
    """
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise PayloadTooLargeError(
            f"File too large. Maximum size is {limit / (1024 * 1024):g} MB."
        )
    if not data:
        raise ValidationError("Uploaded file is empty!")
    return data


async def store_image(
    upload: Optional[UploadFile],
    user_id,
    kind: str,
    storage: StorageService
) -> Optional[Dict[str, str]]:
    """
    Validates and stores an uploaded image.

    Returns:
        {"url", "publicId"} of the stored object, or None when no file was sent
    """
    if upload is None or not upload.filename:
        return None

    content_type = check_image_type(upload.content_type)
    try:
        data = await read_limited(upload, settings.MAX_UPLOAD_SIZE)
    finally:
        await upload.close()

    key = build_object_key(str(user_id), kind)
    logger.debug(f"Storing {kind} upload ({len(data)} bytes)", extra={"user_id": str(user_id)})
    return await storage.upload_image(
        key,
        data,
        content_type,
        metadata={"uploadedBy": str(user_id)}
    )

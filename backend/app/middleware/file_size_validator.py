"""
Image Size Validation

Validates uploaded image size without loading the entire file into memory.
"""

import logging
from typing import List

from fastapi import File, HTTPException, UploadFile, status

from app.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


async def check_upload_size(upload: UploadFile) -> int:
    """
    Measure an upload against MAX_IMAGE_SIZE.

    Reads the upload in chunks and resets the file pointer afterwards
    for subsequent processing.

    Args:
        upload: FastAPI UploadFile object

    Returns:
        int: Total file size in bytes

    Raises:
        HTTPException: 400 if the upload is empty, 413 if it exceeds MAX_IMAGE_SIZE
    """
    size = 0

    while chunk := await upload.read(CHUNK_SIZE):
        size += len(chunk)
        if size > settings.MAX_IMAGE_SIZE:
            logger.warning(
                f"Image size exceeded: {size} bytes (max: {settings.MAX_IMAGE_SIZE})"
            )
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Image exceeds {settings.MAX_IMAGE_SIZE} byte limit",
            )

    if size == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Empty image uploaded: {upload.filename}",
        )

    await upload.seek(0)

    logger.debug(f"Image size validation passed: {size} bytes")
    return size


async def validate_image_size(image: UploadFile = File(...)) -> int:
    """FastAPI dependency validating the "image" form field."""
    return await check_upload_size(image)


async def validate_batch_sizes(images: List[UploadFile] = File(...)) -> List[int]:
    """FastAPI dependency validating every file of the "images" form field."""
    return [await check_upload_size(image) for image in images]

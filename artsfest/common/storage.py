"""Profile image storage using Backblaze B2 (S3-compatible API)."""

import uuid
import logging
from pathlib import Path
from functools import lru_cache

import boto3
from botocore.exceptions import ClientError
from fastapi import HTTPException, UploadFile, status

from artsfest.common.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache
def get_s3_client():
    """Get or create S3 client for Backblaze B2."""
    settings = get_settings()
    if not settings.b2_key_id or not settings.b2_application_key:
        raise ValueError("B2 credentials not configured. Set B2_KEY_ID and B2_APPLICATION_KEY in environment.")

    return boto3.client(
        's3',
        endpoint_url=settings.b2_endpoint,
        aws_access_key_id=settings.b2_key_id,
        aws_secret_access_key=settings.b2_application_key,
        region_name=settings.b2_region,
    )


def _validate_image(file: UploadFile) -> None:
    """Only image files within the configured size limit are accepted."""
    settings = get_settings()
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed")

    suffix = Path(file.filename).suffix.lower()
    if settings.allowed_upload_extensions and suffix not in settings.allowed_upload_extensions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type: {suffix or 'unknown'}"
        )

    file.file.seek(0, 2)
    file_size = file.file.tell()
    file.file.seek(0)

    if file_size > settings.max_upload_size_mb * 1024 * 1024:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Maximum size: {settings.max_upload_size_mb}MB"
        )


def save_profile_image(file: UploadFile, subdir: str = "profiles") -> str:
    """
    Upload a profile image to B2 storage.

    Returns:
        The B2 object key, stored on the participant as ``profile_image``

    Raises:
        HTTPException: If validation fails or the upload fails
    """
    settings = get_settings()
    _validate_image(file)

    suffix = Path(file.filename or "").suffix.lower()
    filename = f"{uuid.uuid4().hex}{suffix}"
    object_key = f"{settings.b2_key_prefix or ''}{subdir}/{filename}"

    try:
        file.file.seek(0)
        s3_client = get_s3_client()
        s3_client.put_object(
            Bucket=settings.b2_bucket_name,
            Key=object_key,
            Body=file.file.read(),
            ContentType=file.content_type or 'application/octet-stream',
        )
        logger.info(f"Uploaded profile image to B2: {object_key}")
        return object_key
    except ClientError as e:
        logger.error(f"Failed to upload file to B2: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image upload failed"
        ) from e
    except ValueError as e:
        logger.error(f"Storage not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image upload failed"
        ) from e
    finally:
        file.file.close()


def get_file_url(object_key: str, expires_in: int = 3600) -> str:
    """
    Generate a pre-signed URL for reading a private file in B2.

    Args:
        object_key: B2 object key, as stored on the participant
        expires_in: URL expiration time in seconds (default: 1 hour)

    Returns:
        Pre-signed URL string
    """
    settings = get_settings()
    try:
        s3_client = get_s3_client()
        return s3_client.generate_presigned_url(
            'get_object',
            Params={
                'Bucket': settings.b2_bucket_name,
                'Key': object_key,
            },
            ExpiresIn=expires_in,
        )
    except (ClientError, ValueError) as e:
        logger.error(f"Failed to generate presigned URL: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate file access URL"
        ) from e

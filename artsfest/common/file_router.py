"""File URL endpoint for generating pre-signed URLs to uploaded images."""

from fastapi import APIRouter, HTTPException, Query, status

from artsfest.common.config import get_settings
from artsfest.common.storage import get_file_url

router = APIRouter()


@router.get("/url")
def get_presigned_url(
    key: str = Query(..., description="Object key stored as the participant's profile_image"),
    expires_in: int = Query(3600, ge=60, le=86400, description="URL expiration in seconds (1min-24hrs)"),
):
    """
    Generate a temporary URL for a stored profile image.

    Only keys under the upload prefix can be resolved.
    """
    prefix = get_settings().b2_key_prefix or ""
    if not key.startswith(f"{prefix}profiles/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unknown file key"
        )

    return {
        "url": get_file_url(key, expires_in=expires_in),
        "key": key,
        "expires_in": expires_in,
    }

"""Public URLs for objects kept in the storage bucket (avatars, event images)."""

from typing import Optional

from app.core.config import settings


def public_object_url(path: Optional[str], bucket: Optional[str] = None) -> Optional[str]:
    """
    Resolve a stored object path to a public URL. Absolute http(s) URLs are returned
    unchanged; without a configured storage URL the path is returned as-is.
    """
    if not path:
        return None
    if path.startswith("http://") or path.startswith("https://"):
        return path
    if not settings.storage_public_url:
        return path
    bucket = bucket or settings.avatar_bucket
    return f"{settings.storage_public_url.rstrip('/')}/{bucket}/{path.lstrip('/')}"

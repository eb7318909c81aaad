"""
Media module - Object storage for uploaded videos.

Factory function for building the storage backend from settings.
"""

from .base import MediaStorage

__all__ = ["MediaStorage", "create_media_storage"]


def create_media_storage(settings, **kwargs) -> MediaStorage:
    """Build the MinIO-backed media storage from application settings.

    Args:
        settings: The application ``Settings``.
        **kwargs: Overrides passed to ``MinioMediaStorage``.

    Returns:
        MediaStorage implementation instance.
    """
    from minio import Minio

    from .minio_storage import MinioMediaStorage

    client = Minio(
        endpoint=settings.minio_endpoint,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=settings.minio_secure,
    )
    return MinioMediaStorage(
        client,
        bucket_name=kwargs.pop("bucket_name", settings.minio_bucket),
        public_url=kwargs.pop("public_url", settings.storage_public_url),
        endpoint=settings.minio_endpoint,
        secure=settings.minio_secure,
        **kwargs,
    )

"""MinIO implementation of the MediaStorage interface."""

import asyncio
import io
import logging
import uuid
from pathlib import Path

from minio import Minio

from vidscribe.core.exceptions import StorageError
from vidscribe.core.models import StoredMedia
from vidscribe.services.media.base import MediaStorage

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    "webm": "video/webm",
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "avi": "video/x-msvideo",
}


def media_format(filename: str) -> str:
    """Return the lower-case container extension of *filename* ("" if none)."""
    return Path(filename).suffix.lstrip(".").lower()


class MinioMediaStorage(MediaStorage):
    """Handles video storage operations using MinIO.

    Args:
        client: A configured ``Minio`` client (shared for the process lifetime).
        bucket_name: Bucket that holds all uploads.
        public_url: Base URL objects are served from. Defaults to
            ``<scheme>://<endpoint>/<bucket>``.
        endpoint: MinIO host:port, used for the default public URL.
        secure: Whether the default public URL uses https.
    """

    def __init__(
        self,
        client: Minio,
        bucket_name: str,
        public_url: str = "",
        endpoint: str = "localhost:9000",
        secure: bool = False,
    ) -> None:
        self._client = client
        self._bucket_name = bucket_name
        scheme = "https" if secure else "http"
        self._public_url = (public_url or f"{scheme}://{endpoint}/{bucket_name}").rstrip("/")

    def ensure_bucket_exists(self) -> None:
        if not self._client.bucket_exists(self._bucket_name):
            self._client.make_bucket(self._bucket_name)
            logger.info("Bucket created: %s", self._bucket_name)

    def object_url(self, object_name: str) -> str:
        return f"{self._public_url}/{object_name}"

    async def upload(
        self,
        data: bytes,
        filename: str,
        folder: str,
        allowed_formats: list[str],
    ) -> StoredMedia:
        fmt = media_format(filename)
        allowed = [f.lower() for f in allowed_formats]
        if fmt not in allowed:
            logger.warning("Rejected upload %s: format %r not in %s", filename, fmt, allowed)
            raise StorageError(
                f"Unsupported video format '{fmt or 'unknown'}'. "
                f"Allowed formats: {', '.join(allowed)}"
            )

        object_name = f"{folder.strip('/')}/{uuid.uuid4().hex}.{fmt}"
        content_type = CONTENT_TYPES.get(fmt, "application/octet-stream")
        try:
            await asyncio.to_thread(
                self._client.put_object,
                bucket_name=self._bucket_name,
                object_name=object_name,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except Exception as exc:
            logger.exception("MinIO upload failed: %s", object_name)
            raise StorageError("Failed to upload video to storage") from exc

        logger.info(
            "Video uploaded to MinIO: %s (%d bytes, bucket=%s)",
            object_name,
            len(data),
            self._bucket_name,
        )
        return StoredMedia(
            url=self.object_url(object_name),
            object_name=object_name,
            format=fmt,
            bytes=len(data),
            content_type=content_type,
        )

    def _read_object(self, object_name: str) -> bytes:
        response = self._client.get_object(self._bucket_name, object_name)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    async def download(self, media: StoredMedia) -> bytes:
        try:
            data = await asyncio.to_thread(self._read_object, media.object_name)
        except Exception as exc:
            logger.exception("MinIO download failed: %s", media.object_name)
            raise StorageError("Failed to read video back from storage") from exc
        logger.info("Video downloaded from MinIO: %s", media.object_name)
        return data

"""Abstract interface for video object storage."""

from abc import ABC, abstractmethod

from vidscribe.core.models import StoredMedia


class MediaStorage(ABC):
    """Abstract base class for object storage backends."""

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        filename: str,
        folder: str,
        allowed_formats: list[str],
    ) -> StoredMedia:
        """
        Uploads a video under a logical folder.

        Args:
            data: Raw file bytes.
            filename: Original filename; its extension selects the format.
            folder: Logical folder (object-name prefix).
            allowed_formats: Accepted container extensions, e.g. ["webm", "mp4"].

        Returns:
            The durable URL and metadata of the stored object.

        Raises:
            StorageError: If the format is not allowed or the upload fails.
        """

    @abstractmethod
    async def download(self, media: StoredMedia) -> bytes:
        """
        Reads back a previously stored object.

        Raises:
            StorageError: If the object cannot be read.
        """

"""
Upload orchestrator — submits finished media and tracks the upload task.

States: idle -> uploading -> succeeded | failed

Only one upload runs at a time; a second ``submit`` while uploading is
rejected. A success requires a non-empty ``data.transcription`` in the
response body, whatever the status code.
"""

import logging
from enum import StrEnum

from vidscribe.core.utils import format_file_size
from vidscribe.ui.api_client import APIClient, APIError, MalformedResponseError, TransportError
from vidscribe.ui.capture import FinishedMedia

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024


class UploadStatus(StrEnum):
    idle = "idle"
    uploading = "uploading"
    succeeded = "succeeded"
    failed = "failed"


class FileTooLargeError(APIError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"File size must be less than {format_file_size(limit)} "
            f"(got {format_file_size(size)})",
            category="validation",
        )


class EmptyMediaError(APIError):
    def __init__(self) -> None:
        super().__init__("The recording is empty. Please record again.", category="validation")


class UploadInProgressError(APIError):
    def __init__(self) -> None:
        super().__init__("An upload is already in progress.", category="busy")


class UploadOrchestrator:
    """Owns the single active upload task for one UI session.

    Args:
        client: Backend HTTP client.
        max_upload_bytes: Client-side size ceiling, checked before any request.
    """

    def __init__(
        self,
        client: APIClient,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self._client = client
        self._max_upload_bytes = max_upload_bytes
        self.status = UploadStatus.idle
        self.error: str = ""
        self.progress: str = ""
        self.result: dict | None = None
        self.media: FinishedMedia | None = None

    def invalidate(self) -> None:
        """Forget the previous task (a new recording is starting)."""
        if self.status == UploadStatus.uploading:
            return
        self.status = UploadStatus.idle
        self.error = ""
        self.progress = ""
        self.result = None
        self.media = None

    def validate(self, media: FinishedMedia) -> None:
        if media.size == 0:
            raise EmptyMediaError()
        if media.size > self._max_upload_bytes:
            raise FileTooLargeError(media.size, self._max_upload_bytes)

    def submit(self, media: FinishedMedia) -> dict:
        """Upload *media* and return the ``data`` object of the response.

        Raises:
            UploadInProgressError: If another upload is running.
            FileTooLargeError / EmptyMediaError: Before any network call.
            TransportError: The request failed before a response arrived.
            ServerError: The server reported a failure (its message is kept).
            MalformedResponseError: Success status without a transcription.
        """
        if self.status == UploadStatus.uploading:
            raise UploadInProgressError()

        self.media = media
        self.result = None
        self.error = ""
        try:
            self.validate(media)
        except APIError as exc:
            self._fail(exc)
            raise

        self.status = UploadStatus.uploading
        self.progress = "Uploading video..."
        logger.info("Uploading %s (%s)", media.filename, format_file_size(media.size))
        try:
            body = self._client.upload_video(media.data, media.filename, media.mime_type)
            data = body.get("data") if isinstance(body, dict) else None
            if not isinstance(data, dict) or not data.get("transcription"):
                raise MalformedResponseError("No transcription received in the response")
        except APIError as exc:
            self._fail(exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected error while uploading %s", media.filename)
            error = TransportError(f"Upload failed: {exc}", category="unknown")
            self._fail(error)
            raise error from exc

        self.status = UploadStatus.succeeded
        self.progress = ""
        self.result = data
        return data

    def _fail(self, exc: APIError) -> None:
        logger.warning("Upload failed (%s): %s", exc.category, exc.message)
        self.status = UploadStatus.failed
        self.progress = ""
        self.error = exc.message

"""
VidScribe exception hierarchy.

All server-side exceptions inherit from VidScribeError, enabling
centralized error handling in the API middleware layer. Each ingestion
step has its own subclass so that clients receive a distinct message
per failure kind.
"""

from datetime import UTC, datetime


class VidScribeError(Exception):
    """Base exception for all VidScribe errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "VIDSCRIBE_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class MissingFileError(VidScribeError):
    """Raised when the upload carries no video or an empty one."""

    def __init__(self, detail: str = "No video file provided") -> None:
        super().__init__(detail=detail, code="MISSING_FILE", status_code=400)


class FileTooLargeError(VidScribeError):
    """Raised when an upload exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            detail=f"File size must be less than {limit // (1024 * 1024)}MB",
            code="FILE_TOO_LARGE",
            status_code=413,
        )


class StorageError(VidScribeError):
    """Raised when the object-storage upload fails."""

    def __init__(self, detail: str = "Failed to store video") -> None:
        super().__init__(detail=detail, code="STORAGE_ERROR", status_code=500)


class TranscriptionError(VidScribeError):
    """Raised when STT processing fails or yields no text."""

    def __init__(self, detail: str = "Failed to generate transcription") -> None:
        super().__init__(detail=detail, code="TRANSCRIPTION_ERROR", status_code=500)


class TaggingError(VidScribeError):
    """Raised when tag generation fails or yields no text."""

    def __init__(self, detail: str = "Failed to generate tags") -> None:
        super().__init__(detail=detail, code="TAGGING_ERROR", status_code=500)


class PersistenceError(VidScribeError):
    """Raised when the transcription record cannot be saved."""

    def __init__(self, detail: str = "Failed to save transcription record") -> None:
        super().__init__(detail=detail, code="PERSISTENCE_ERROR", status_code=500)


class RecordNotFoundError(VidScribeError):
    """Raised when a transcription record ID does not exist."""

    def __init__(self, record_id: int | str) -> None:
        super().__init__(
            detail=f"Record not found: {record_id}",
            code="RECORD_NOT_FOUND",
            status_code=404,
        )


class ConfigurationError(VidScribeError):
    """Raised at startup when required settings are missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            detail=f"Missing required configuration: {', '.join(missing)}",
            code="CONFIGURATION_ERROR",
            status_code=500,
        )

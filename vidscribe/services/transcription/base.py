"""
Abstract base class for Speech-to-Text providers.

All STT implementations (OpenAI Whisper API, local faster-whisper) must
implement this interface, enabling provider-agnostic transcription in the
ingestion pipeline.
"""

from abc import ABC, abstractmethod


class BaseSTT(ABC):
    """Interface that every STT provider must implement."""

    @abstractmethod
    async def transcribe(
        self,
        media: bytes,
        filename: str,
        language: str | None = None,
        response_format: str = "text",
    ) -> str:
        """Transcribe a media file (audio or video container) to plain text.

        Args:
            media: Raw file bytes.
            filename: Original filename; its extension tells the provider
                which container to decode.
            language: ISO 639-1 source language, or None to auto-detect.
            response_format: Output format requested from the provider.

        Returns:
            The transcription text (may be empty if nothing was recognised).

        Raises:
            TranscriptionError: If the provider call fails.
        """

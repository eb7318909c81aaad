"""OpenAI Whisper API speech-to-text provider."""

import logging

from openai import AsyncOpenAI

from vidscribe.core.config import get_settings
from vidscribe.core.exceptions import TranscriptionError
from vidscribe.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)


class OpenAIWhisperSTT(BaseSTT):
    """Hosted transcription through ``audio.transcriptions`` (``whisper-1``).

    The API accepts video containers (webm, mp4, mov) directly, so the
    uploaded bytes are sent unchanged.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        settings = get_settings()
        self._model = model or settings.openai_transcription_model
        self._client = client or AsyncOpenAI(
            api_key=api_key or settings.openai_api_key,
            timeout=timeout or settings.ai_request_timeout,
        )

    async def transcribe(
        self,
        media: bytes,
        filename: str,
        language: str | None = None,
        response_format: str = "text",
    ) -> str:
        request: dict = {
            "file": (filename, media),
            "model": self._model,
            "response_format": response_format,
        }
        if language:
            request["language"] = language

        try:
            result = await self._client.audio.transcriptions.create(**request)
        except Exception as exc:
            logger.error("OpenAI transcription failed for %s: %s", filename, exc)
            raise TranscriptionError(detail="Failed to generate transcription") from exc

        # response_format="text" yields a plain string; json formats an object
        if isinstance(result, str):
            return result.strip()
        return (getattr(result, "text", "") or "").strip()

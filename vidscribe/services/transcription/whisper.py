"""Whisper STT implementation using faster-whisper.

Runs transcription locally instead of through a hosted API. The
WhisperModel is loaded lazily and cached at module level to avoid
repeated initialization overhead. faster-whisper decodes video containers
through PyAV, so uploads are written to a temporary file and passed by path.
"""

import asyncio
import logging
import tempfile
from pathlib import Path

from faster_whisper import WhisperModel

from vidscribe.core.config import get_settings
from vidscribe.core.exceptions import TranscriptionError
from vidscribe.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)

_model_cache: WhisperModel | None = None


class WhisperSTT(BaseSTT):
    """Speech-to-text provider using faster-whisper (CTranslate2).

    Args:
        model_size: Whisper model size (tiny, base, small, medium, large-v3).
        device: Computation device ("cpu" or "cuda").
        compute_type: CTranslate2 compute type ("int8", "float16", etc.).
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        model_size: str | None = None,
        device: str = "cpu",
        compute_type: str = "int8",
        settings=None,
    ) -> None:
        self._settings = settings or get_settings()
        self._model_size = model_size or self._settings.whisper_model
        self._device = device
        self._compute_type = compute_type

    def _get_model(self) -> WhisperModel:
        """Return the cached WhisperModel, loading it on first use."""
        global _model_cache  # noqa: PLW0603
        if _model_cache is None:
            logger.info(
                "Loading Whisper model: %s (device=%s, compute=%s)",
                self._model_size,
                self._device,
                self._compute_type,
            )
            _model_cache = WhisperModel(
                self._model_size,
                device=self._device,
                compute_type=self._compute_type,
            )
        return _model_cache

    def _run_transcription(self, media: bytes, suffix: str, language: str | None) -> str:
        """Run synchronous transcription (CPU-bound).

        Must be called via asyncio.to_thread(). The segment iterator is
        materialized inside this function to avoid CTranslate2 thread-safety
        issues.
        """
        model = self._get_model()
        with tempfile.TemporaryDirectory() as tmp_dir:
            media_path = Path(tmp_dir) / f"upload{suffix}"
            media_path.write_bytes(media)
            segments_iter, _info = model.transcribe(
                str(media_path),
                language=language,
                beam_size=5,
                vad_filter=True,
            )
            segments = list(segments_iter)
        return " ".join(seg.text.strip() for seg in segments if seg.text.strip())

    async def transcribe(
        self,
        media: bytes,
        filename: str,
        language: str | None = None,
        response_format: str = "text",
    ) -> str:
        if response_format != "text":
            logger.debug("Local whisper only produces text; ignoring format %s", response_format)
        suffix = Path(filename).suffix or ".webm"
        try:
            return await asyncio.to_thread(self._run_transcription, media, suffix, language)
        except Exception as exc:
            logger.exception("Whisper transcription failed for %s", filename)
            raise TranscriptionError(detail="Failed to generate transcription") from exc

"""Tests for WhisperSTT (mocked WhisperModel, no GPU needed)."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

import vidscribe.services.transcription.whisper as whisper_module
from vidscribe.core.exceptions import TranscriptionError
from vidscribe.services.transcription import create_stt
from vidscribe.services.transcription.whisper import WhisperSTT


def _make_segment(text="Hello world"):
    """Create a mock faster-whisper segment object."""
    return SimpleNamespace(text=text, start=0.0, end=1.0)


@pytest.fixture(autouse=True)
def _clear_model_cache():
    """Ensure module-level model cache is cleared before each test."""
    original = whisper_module._model_cache
    whisper_module._model_cache = None
    yield
    whisper_module._model_cache = original


@pytest.fixture
def mock_whisper_model():
    model = MagicMock()
    model.transcribe.return_value = (
        iter([_make_segment(" Hello world "), _make_segment(""), _make_segment("again")]),
        SimpleNamespace(language="en"),
    )
    return model


@pytest.fixture
def stt(mock_whisper_model, settings):
    instance = WhisperSTT(model_size="tiny", settings=settings)
    with patch.object(WhisperSTT, "_get_model", return_value=mock_whisper_model):
        yield instance


class TestWhisperSTT:
    async def test_joins_segments(self, stt):
        assert await stt.transcribe(b"video", "clip.webm", language="en") == "Hello world again"

    async def test_passes_temp_file_with_suffix(self, stt, mock_whisper_model):
        await stt.transcribe(b"video", "clip.mp4", language="en")

        path_arg = mock_whisper_model.transcribe.call_args.args[0]
        assert path_arg.endswith(".mp4")
        assert not Path(path_arg).exists()
        assert mock_whisper_model.transcribe.call_args.kwargs["language"] == "en"

    async def test_model_failure(self, stt, mock_whisper_model):
        mock_whisper_model.transcribe.side_effect = RuntimeError("decode failed")
        with pytest.raises(TranscriptionError) as exc_info:
            await stt.transcribe(b"video", "clip.webm")
        assert exc_info.value.detail == "Failed to generate transcription"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_model_is_cached(self, settings):
        with patch.object(whisper_module, "WhisperModel") as mock_cls:
            stt = WhisperSTT(model_size="tiny", settings=settings)
            first = stt._get_model()
            second = stt._get_model()
        assert first is second
        mock_cls.assert_called_once_with("tiny", device="cpu", compute_type="int8")


class TestCreateSTT:
    def test_local_alias(self, settings):
        with patch("vidscribe.services.transcription.whisper.get_settings", return_value=settings):
            assert isinstance(create_stt("local"), WhisperSTT)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown STT provider"):
            create_stt("deepgram")

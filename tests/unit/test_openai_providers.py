"""Unit tests for the OpenAI transcription and chat providers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import APIConnectionError, APITimeoutError

from vidscribe.core.exceptions import TranscriptionError
from vidscribe.services.llm.openai_llm import OpenAILLM
from vidscribe.services.transcription.openai_whisper import OpenAIWhisperSTT

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _mock_settings(**overrides):
    defaults = {
        "openai_api_key": "sk-test",
        "openai_transcription_model": "whisper-1",
        "openai_chat_model": "gpt-3.5-turbo",
        "ai_request_timeout": 300.0,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _chat_response(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.audio.transcriptions.create = AsyncMock(return_value="Hello from the video.\n")
    client.chat.completions.create = AsyncMock(return_value=_chat_response("a, b, c"))
    return client


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class TestOpenAIWhisperSTT:
    @pytest.fixture
    def stt(self, openai_client):
        with patch(
            "vidscribe.services.transcription.openai_whisper.get_settings",
            return_value=_mock_settings(),
        ):
            return OpenAIWhisperSTT(client=openai_client)

    def test_client_built_from_settings(self):
        with patch(
            "vidscribe.services.transcription.openai_whisper.get_settings",
            return_value=_mock_settings(),
        ):
            with patch(
                "vidscribe.services.transcription.openai_whisper.AsyncOpenAI"
            ) as mock_cls:
                OpenAIWhisperSTT()
        mock_cls.assert_called_once_with(api_key="sk-test", timeout=300.0)

    async def test_sends_media_as_file(self, stt, openai_client):
        text = await stt.transcribe(b"video", "clip.webm", language="en")

        assert text == "Hello from the video."
        openai_client.audio.transcriptions.create.assert_awaited_once_with(
            file=("clip.webm", b"video"),
            model="whisper-1",
            response_format="text",
            language="en",
        )

    async def test_language_omitted_when_none(self, stt, openai_client):
        await stt.transcribe(b"video", "clip.webm")
        kwargs = openai_client.audio.transcriptions.create.await_args.kwargs
        assert "language" not in kwargs

    async def test_object_response(self, stt, openai_client):
        openai_client.audio.transcriptions.create.return_value = SimpleNamespace(text=" hi ")
        assert await stt.transcribe(b"v", "clip.mp4", response_format="json") == "hi"

    async def test_sdk_error_becomes_transcription_error(self, stt, openai_client):
        openai_client.audio.transcriptions.create.side_effect = APIConnectionError(
            request=_REQUEST
        )
        with pytest.raises(TranscriptionError) as exc_info:
            await stt.transcribe(b"v", "clip.webm")
        assert exc_info.value.detail == "Failed to generate transcription"


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class TestOpenAILLM:
    @pytest.fixture
    def llm(self, openai_client):
        with patch(
            "vidscribe.services.llm.openai_llm.get_settings", return_value=_mock_settings()
        ):
            return OpenAILLM(client=openai_client)

    async def test_system_and_user_messages(self, llm, openai_client):
        reply = await llm.complete(system="Tag it.", user_text="transcript")

        assert reply == "a, b, c"
        openai_client.chat.completions.create.assert_awaited_once_with(
            model="gpt-3.5-turbo",
            messages=[
                {"role": "system", "content": "Tag it."},
                {"role": "user", "content": "transcript"},
            ],
        )

    async def test_temperature_passed_when_set(self, llm, openai_client):
        await llm.complete(system="s", user_text="u", temperature=0.2)
        assert openai_client.chat.completions.create.await_args.kwargs["temperature"] == 0.2

    async def test_no_choices(self, llm, openai_client):
        openai_client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        assert await llm.complete(system="s", user_text="u") == ""

    async def test_null_content(self, llm, openai_client):
        openai_client.chat.completions.create.return_value = _chat_response(None)
        assert await llm.complete(system="s", user_text="u") == ""

    async def test_timeout(self, llm, openai_client):
        openai_client.chat.completions.create.side_effect = APITimeoutError(request=_REQUEST)
        with pytest.raises(TimeoutError):
            await llm.complete(system="s", user_text="u")

    async def test_connection_error(self, llm, openai_client):
        openai_client.chat.completions.create.side_effect = APIConnectionError(request=_REQUEST)
        with pytest.raises(ConnectionError):
            await llm.complete(system="s", user_text="u")

    async def test_unexpected_error(self, llm, openai_client):
        openai_client.chat.completions.create.side_effect = ValueError("boom")
        with pytest.raises(RuntimeError, match="boom"):
            await llm.complete(system="s", user_text="u")

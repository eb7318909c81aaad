"""Tests for Settings defaults and startup credential checks."""

from vidscribe.core.config import Settings
from vidscribe.core.exceptions import ConfigurationError, FileTooLargeError
from vidscribe.core.utils import format_file_size, strip_code_fences


def _settings(**overrides) -> Settings:
    values = {
        "openai_api_key": "sk-test",
        "minio_access_key": "a",
        "minio_secret_key": "s",
        "database_url": "sqlite+aiosqlite:///:memory:",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    def test_defaults(self):
        settings = _settings()
        assert settings.max_upload_bytes == 100 * 1024 * 1024
        assert settings.storage_folder == "video-transcriptions"
        assert settings.allowed_formats == ["webm", "mp4", "mov"]
        assert settings.transcription_language == "en"
        assert settings.openai_transcription_model == "whisper-1"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_BYTES", "2048")
        monkeypatch.setenv("LLM_PROVIDER", "ollama")
        settings = _settings()
        assert settings.max_upload_bytes == 2048
        assert settings.llm_provider == "ollama"


class TestMissingCredentials:
    def test_complete(self):
        assert _settings().missing_credentials() == []

    def test_all_missing(self):
        settings = _settings(
            openai_api_key="", minio_access_key="", minio_secret_key="", database_url=""
        )
        assert settings.missing_credentials() == [
            "OPENAI_API_KEY",
            "MINIO_ACCESS_KEY",
            "MINIO_SECRET_KEY",
            "DATABASE_URL",
        ]

    def test_openai_key_not_needed_for_local_providers(self):
        settings = _settings(openai_api_key="", stt_provider="local", llm_provider="ollama")
        assert settings.missing_credentials() == []

    def test_claude_key_required_for_claude(self):
        settings = _settings(stt_provider="openai", llm_provider="claude", claude_api_key="")
        assert settings.missing_credentials() == ["CLAUDE_API_KEY"]

    def test_configuration_error_lists_names(self):
        exc = ConfigurationError(["OPENAI_API_KEY", "DATABASE_URL"])
        assert exc.detail == "Missing required configuration: OPENAI_API_KEY, DATABASE_URL"


class TestUtils:
    def test_format_file_size(self):
        assert format_file_size(0) == "0 Bytes"
        assert format_file_size(1536) == "1.5 KB"
        assert format_file_size(100 * 1024 * 1024) == "100 MB"

    def test_too_large_message(self):
        exc = FileTooLargeError(size=101 * 1024 * 1024, limit=100 * 1024 * 1024)
        assert exc.detail == "File size must be less than 100MB"
        assert exc.status_code == 413

    def test_strip_code_fences(self):
        assert strip_code_fences("```text\na, b\n```") == "a, b"
        assert strip_code_fences("  a, b ") == "a, b"

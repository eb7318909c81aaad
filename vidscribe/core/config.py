"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """VidScribe application settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        stt_provider: Speech-to-text backend ("openai" or "local").
        llm_provider: Tag generation backend ("openai", "claude" or "ollama").
        database_url: Async SQLAlchemy connection string for the record store.
        max_upload_bytes: Largest accepted upload; bigger files are rejected
            before any storage or AI call.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Speech-to-text ---
    stt_provider: str = "openai"
    openai_api_key: str = ""  # Required when stt_provider or llm_provider is "openai"
    openai_transcription_model: str = "whisper-1"
    whisper_model: str = "base"  # faster-whisper size when stt_provider="local"
    transcription_language: str = "en"  # ISO 639-1 source language
    transcribe_from_storage: bool = False  # Re-download from object storage before STT

    # --- Tag generation ---
    llm_provider: str = "openai"
    openai_chat_model: str = "gpt-3.5-turbo"
    claude_api_key: str = ""  # Required when llm_provider="claude"
    claude_model: str = "claude-sonnet-4-20250514"
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"

    # Seconds allowed for a single AI or storage call
    ai_request_timeout: float = 300.0

    # --- Object storage (MinIO / S3-compatible) ---
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = ""
    minio_secret_key: str = ""
    minio_bucket: str = "videos"
    minio_secure: bool = False
    storage_public_url: str = ""  # Empty = derive from endpoint + bucket
    storage_folder: str = "video-transcriptions"
    allowed_formats: list[str] = ["webm", "mp4", "mov"]

    # --- Record store ---
    database_url: str = ""
    db_pool_size: int = 5
    db_max_overflow: int = 5

    # --- Upload limits ---
    max_upload_bytes: int = 100 * 1024 * 1024  # 100 MiB

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:8501",  # Streamlit
        "http://localhost:3000",  # Dev frontend
    ]

    # --- Client ---
    api_base_url: str = "http://localhost:8000"

    def missing_credentials(self) -> list[str]:
        """Return the env var names that must be set for the chosen providers."""
        missing: list[str] = []
        if "openai" in (self.stt_provider, self.llm_provider) and not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if self.llm_provider == "claude" and not self.claude_api_key:
            missing.append("CLAUDE_API_KEY")
        if not self.minio_access_key:
            missing.append("MINIO_ACCESS_KEY")
        if not self.minio_secret_key:
            missing.append("MINIO_SECRET_KEY")
        if not self.database_url:
            missing.append("DATABASE_URL")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()

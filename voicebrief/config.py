from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from voicebrief.pipeline_config import StorageBackend, TranscriptionProvider


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    assemblyai_api_key: str = ""  # Only needed when transcription_provider is "assemblyai"

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Models and providers
    llm_model: str = "claude-sonnet-4-20250514"
    transcription_provider: TranscriptionProvider = TranscriptionProvider.WHISPER
    whisper_model: str = "whisper-1"
    request_timeout_seconds: float = 120.0

    # Audio above this size is split before upload (Whisper rejects > 25 MB)
    transcription_max_bytes: int = 25 * 1024 * 1024
    transcription_chunk_seconds: int = 600

    # Refresh tiers
    session_validity_minutes: int = Field(default=30, ge=15, le=60)
    daily_lookback_hours: int = 24
    timezone: str | None = None  # IANA name; None means the host's local zone

    # App config
    storage_backend: StorageBackend = StorageBackend.MEMORY
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except OSError:
        # If .env is unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()

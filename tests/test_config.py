"""Tests for settings validation and RefreshConfig."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from voicebrief.config import Settings
from voicebrief.pipeline_config import RefreshConfig, StorageBackend, Tier, TranscriptionProvider


class TestEnums:
    def test_values(self) -> None:
        assert Tier("daily") is Tier.DAILY
        assert TranscriptionProvider("assemblyai") is TranscriptionProvider.ASSEMBLYAI
        assert StorageBackend("supabase") is StorageBackend.SUPABASE


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.session_validity_minutes == 30
        assert s.transcription_provider is TranscriptionProvider.WHISPER
        assert s.storage_backend is StorageBackend.MEMORY

    @pytest.mark.parametrize("minutes", [14, 61])
    def test_session_window_bounds(self, minutes: int) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, session_validity_minutes=minutes)  # type: ignore[call-arg]

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("SESSION_VALIDITY_MINUTES", "45")
        monkeypatch.setenv("TRANSCRIPTION_PROVIDER", "assemblyai")

        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.session_validity_minutes == 45
        assert s.transcription_provider is TranscriptionProvider.ASSEMBLYAI


class TestRefreshConfig:
    def test_defaults(self) -> None:
        config = RefreshConfig()
        assert config.session_validity == timedelta(minutes=30)
        assert config.daily_lookback == timedelta(hours=24)

    def test_from_settings(self) -> None:
        s = Settings(  # type: ignore[call-arg]
            _env_file=None, session_validity_minutes=15, daily_lookback_hours=12
        )

        config = RefreshConfig.from_settings(s)

        assert config.session_validity == timedelta(minutes=15)
        assert config.daily_lookback == timedelta(hours=12)

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            RefreshConfig().session_validity = timedelta(minutes=5)  # type: ignore[misc]

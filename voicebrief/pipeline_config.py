"""Refresh configuration: tier and provider enums and the RefreshConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from voicebrief.config import Settings


class Tier(str, Enum):
    """Refresh granularities, each with its own network-call budget."""

    NOTE = "note"
    SESSION = "session"
    DAILY = "daily"


class TranscriptionProvider(str, Enum):
    """Speech-to-text backends."""

    WHISPER = "whisper"
    ASSEMBLYAI = "assemblyai"


class StorageBackend(str, Enum):
    """Where notes, extraction results, and refresh state are kept."""

    MEMORY = "memory"
    SUPABASE = "supabase"


@dataclass(frozen=True)
class RefreshConfig:
    """Immutable configuration for the refresh coordinator.

    Defaults mirror the app's behaviour: a 30-minute session window and a
    digest covering the prior 24 hours.
    """

    session_validity: timedelta = timedelta(minutes=30)
    daily_lookback: timedelta = timedelta(hours=24)

    @classmethod
    def from_settings(cls, settings: Settings) -> RefreshConfig:
        return cls(
            session_validity=timedelta(minutes=settings.session_validity_minutes),
            daily_lookback=timedelta(hours=settings.daily_lookback_hours),
        )

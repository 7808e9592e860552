"""Builds the coordinator from settings and exposes it to route handlers."""

from __future__ import annotations

from fastapi import Request

from voicebrief.config import Settings
from voicebrief.intelligence.coordinator import RefreshCoordinator, local_clock
from voicebrief.pipeline_config import RefreshConfig, StorageBackend
from voicebrief.storage.repository import InMemoryRepository, Repository


def build_repository(settings: Settings) -> Repository:
    if settings.storage_backend is StorageBackend.SUPABASE:
        from voicebrief.storage.supabase_store import SupabaseRepository

        return SupabaseRepository()
    return InMemoryRepository()


def build_coordinator(settings: Settings) -> RefreshCoordinator:
    return RefreshCoordinator(
        build_repository(settings),
        config=RefreshConfig.from_settings(settings),
        clock=local_clock(settings.timezone),
    )


def get_coordinator(request: Request) -> RefreshCoordinator:
    """Return the coordinator created for this app instance."""
    return request.app.state.coordinator

"""Shared fakes for coordinator and API tests (no external APIs required)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import pytest

from voicebrief.digest.daily import DigestPayload
from voicebrief.errors import IntelligenceError
from voicebrief.extraction.models import ExtractedItem, ItemType
from voicebrief.intelligence.coordinator import RefreshCoordinator
from voicebrief.intelligence.models import Priority
from voicebrief.pipeline_config import RefreshConfig
from voicebrief.storage.repository import InMemoryRepository


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeServices:
    """Stand-ins for the transcription, extraction, and digest calls that count invocations."""

    def __init__(self) -> None:
        self.transcribe_calls: list[str] = []
        self.extract_calls: list[str] = []
        self.digest_calls: list[str] = []
        self.transcribe_error: IntelligenceError | None = None
        self.extract_error: IntelligenceError | None = None
        self.digest_error: IntelligenceError | None = None
        self.transcript = "I decided to ship on Friday. I'll email Dana the contract."

    def transcribe(self, audio_path: str) -> str:
        self.transcribe_calls.append(audio_path)
        if self.transcribe_error:
            raise self.transcribe_error
        return self.transcript

    def extract(self, transcript: str) -> list[ExtractedItem]:
        self.extract_calls.append(transcript)
        if self.extract_error:
            raise self.extract_error
        return [
            ExtractedItem(item_type=ItemType.DECISION, content="Ship on Friday"),
            ExtractedItem(
                item_type=ItemType.COMMITMENT, content="Email Dana the contract", owner="me"
            ),
            ExtractedItem(item_type=ItemType.ACTION, content="Book QA slot", due="tomorrow"),
        ]

    def digest(self, context: str) -> DigestPayload:
        self.digest_calls.append(context)
        if self.digest_error:
            raise self.digest_error
        return DigestPayload(
            summary="Ship day is Friday.",
            highlights=["One decision recorded"],
            priorities=[Priority(content="Book QA slot", reason="Blocks the release")],
        )


@pytest.fixture
def services() -> FakeServices:
    return FakeServices()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 10, 0))


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def make_coordinator(
    repo: InMemoryRepository, services: FakeServices, clock: FakeClock
) -> Callable[..., RefreshCoordinator]:
    def factory(**kwargs: object) -> RefreshCoordinator:
        kwargs.setdefault("config", RefreshConfig())
        return RefreshCoordinator(
            repo,
            transcribe=services.transcribe,
            extract=services.extract,
            digest=services.digest,
            clock=clock,
            **kwargs,  # type: ignore[arg-type]
        )

    return factory

"""Notes and the aggregates built over them by the refresh tiers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class NoteStatus(str, Enum):
    UNPROCESSED = "unprocessed"
    TRANSCRIBED = "transcribed"
    EXTRACTED = "extracted"
    TRANSCRIPTION_FAILED = "transcription_failed"
    EXTRACTION_FAILED = "extraction_failed"

    @property
    def failed(self) -> bool:
        return self in (NoteStatus.TRANSCRIPTION_FAILED, NoteStatus.EXTRACTION_FAILED)


@dataclass
class Note:
    """A captured voice or text note."""

    created_at: datetime
    updated_at: datetime
    title: str = ""
    transcript: str | None = None
    audio_path: str | None = None
    status: NoteStatus = NoteStatus.UNPROCESSED
    error: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def display_title(self) -> str:
        if self.title:
            return self.title
        if self.transcript:
            return self.transcript[:50]
        return "Untitled Note"

    @property
    def has_audio(self) -> bool:
        return self.audio_path is not None


@dataclass(frozen=True)
class SessionStats:
    total_notes: int = 0
    notes_today: int = 0
    notes_this_week: int = 0
    open_actions: int = 0
    open_commitments: int = 0
    unresolved: int = 0
    failed_notes: int = 0


@dataclass(frozen=True)
class AttentionWarning:
    type: str  # "commitment" or "overdue"
    title: str
    description: str
    days_since_issue: int
    note_id: str | None = None


@dataclass
class SessionSummary:
    """Local-only aggregate over the notes touched in the current session."""

    generated_at: datetime
    since: datetime
    recent_notes: list[str] = field(default_factory=list)
    stats: SessionStats = field(default_factory=SessionStats)
    attention: list[AttentionWarning] = field(default_factory=list)


@dataclass(frozen=True)
class Priority:
    content: str
    reason: str = ""
    project: str | None = None


@dataclass(frozen=True)
class DailyWarning:
    type: str  # "stalled", "overdue", or "commitment"
    content: str
    days_since_issue: int = 0


@dataclass
class DailySummary:
    """The once-per-day digest, immutable for its calendar date."""

    brief_date: date
    generated_at: datetime
    summary: str
    highlights: list[str] = field(default_factory=list)
    priorities: list[Priority] = field(default_factory=list)
    warnings: list[DailyWarning] = field(default_factory=list)
    notes_covered: int = 0
    open_actions: int = 0
    open_commitments: int = 0

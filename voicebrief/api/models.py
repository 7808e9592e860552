"""Pydantic request/response schemas for the VoiceBrief API."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict

from voicebrief.extraction.models import ExtractionResult, ItemType
from voicebrief.intelligence.models import NoteStatus


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CreateNoteRequest(BaseModel):
    """Request body for POST /api/notes. At least one of transcript or audio_path is required."""

    title: str = ""
    transcript: str | None = None
    audio_path: str | None = None


class NoteResponse(_FromAttributes):
    id: str
    title: str
    transcript: str | None = None
    audio_path: str | None = None
    status: NoteStatus
    error: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class ExtractedItemResponse(_FromAttributes):
    """A single extracted item in API responses."""

    item_type: ItemType
    content: str
    owner: str | None = None
    due: str | None = None
    detail: str | None = None
    completed: bool = False


class ExtractionResponse(BaseModel):
    note_id: str
    created_at: dt.datetime
    items_extracted: int
    decisions: list[ExtractedItemResponse] = []
    actions: list[ExtractedItemResponse] = []
    commitments: list[ExtractedItemResponse] = []
    unresolved: list[ExtractedItemResponse] = []

    @classmethod
    def from_result(cls, result: ExtractionResult) -> ExtractionResponse:
        def dump(items: list) -> list[ExtractedItemResponse]:
            return [ExtractedItemResponse.model_validate(i) for i in items]

        return cls(
            note_id=result.note_id,
            created_at=result.created_at,
            items_extracted=len(result.items),
            decisions=dump(result.decisions),
            actions=dump(result.actions),
            commitments=dump(result.commitments),
            unresolved=dump(result.unresolved),
        )


class NoteDetail(BaseModel):
    """A note with every extraction result derived from it."""

    note: NoteResponse
    extractions: list[ExtractionResponse] = []


class SessionStatsResponse(_FromAttributes):
    total_notes: int
    notes_today: int
    notes_this_week: int
    open_actions: int
    open_commitments: int
    unresolved: int
    failed_notes: int


class AttentionWarningResponse(_FromAttributes):
    type: str
    title: str
    description: str
    days_since_issue: int
    note_id: str | None = None


class SessionSummaryResponse(_FromAttributes):
    generated_at: dt.datetime
    since: dt.datetime
    recent_notes: list[str]
    stats: SessionStatsResponse
    attention: list[AttentionWarningResponse]


class PriorityResponse(_FromAttributes):
    content: str
    reason: str = ""
    project: str | None = None


class DailyWarningResponse(_FromAttributes):
    type: str
    content: str
    days_since_issue: int = 0


class DailySummaryResponse(_FromAttributes):
    brief_date: dt.date
    generated_at: dt.datetime
    summary: str
    highlights: list[str]
    priorities: list[PriorityResponse]
    warnings: list[DailyWarningResponse]
    notes_covered: int
    open_actions: int
    open_commitments: int


class ForegroundRequest(BaseModel):
    """Request body for POST /api/foreground. ``now`` defaults to the server's local time."""

    now: dt.datetime | None = None
    force: bool = False


class ForegroundResponse(BaseModel):
    session: SessionSummaryResponse
    session_refreshed: bool
    daily: DailySummaryResponse | None = None
    daily_error: str | None = None


class DailyBriefRequest(BaseModel):
    date: dt.date | None = None


class DailyBriefResponse(BaseModel):
    brief_date: dt.date
    daily: DailySummaryResponse | None = None


class CountersResponse(_FromAttributes):
    notes_today: int
    notes_this_week: int
    total_notes: int
    ai_calls_this_month: int
    last_updated: dt.datetime | None = None

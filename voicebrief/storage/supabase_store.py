"""Supabase-backed repository for notes, extraction results, and refresh state."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import Any, cast

from supabase import Client, create_client

from voicebrief.config import settings
from voicebrief.extraction.models import ExtractedItem, ExtractionResult
from voicebrief.intelligence.models import DailySummary, DailyWarning, Note, NoteStatus, Priority
from voicebrief.intelligence.state import RefreshState, UsageCounters

REFRESH_STATE_KEY = "refresh_state"
COUNTERS_KEY = "usage_counters"


def get_supabase_client() -> Client:
    """Create and return a Supabase client from settings."""
    return create_client(settings.supabase_url, settings.supabase_key)


def note_to_row(note: Note) -> dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title,
        "transcript": note.transcript,
        "audio_path": note.audio_path,
        "status": note.status.value,
        "error": note.error,
        "created_at": note.created_at.isoformat(),
        "updated_at": note.updated_at.isoformat(),
    }


def row_to_note(row: dict[str, Any]) -> Note:
    return Note(
        id=str(row["id"]),
        title=row.get("title") or "",
        transcript=row.get("transcript"),
        audio_path=row.get("audio_path"),
        status=NoteStatus(row.get("status") or NoteStatus.UNPROCESSED.value),
        error=row.get("error"),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def daily_to_row(summary: DailySummary) -> dict[str, Any]:
    return {
        "brief_date": summary.brief_date.isoformat(),
        "generated_at": summary.generated_at.isoformat(),
        "summary": summary.summary,
        "highlights": summary.highlights,
        "priorities": [asdict(p) for p in summary.priorities],
        "warnings": [asdict(w) for w in summary.warnings],
        "notes_covered": summary.notes_covered,
        "open_actions": summary.open_actions,
        "open_commitments": summary.open_commitments,
    }


def row_to_daily(row: dict[str, Any]) -> DailySummary:
    return DailySummary(
        brief_date=date.fromisoformat(row["brief_date"]),
        generated_at=datetime.fromisoformat(row["generated_at"]),
        summary=row.get("summary") or "",
        highlights=list(row.get("highlights") or []),
        priorities=[Priority(**p) for p in row.get("priorities") or []],
        warnings=[DailyWarning(**w) for w in row.get("warnings") or []],
        notes_covered=row.get("notes_covered") or 0,
        open_actions=row.get("open_actions") or 0,
        open_commitments=row.get("open_commitments") or 0,
    )


class SupabaseRepository:
    """Repository over the ``notes``, ``extraction_results``, ``daily_summaries``,
    and ``app_state`` tables."""

    def __init__(self, client: Client | None = None) -> None:
        self._client = client or get_supabase_client()

    def _rows(self, result: Any) -> list[dict[str, Any]]:
        # Supabase .data is typed as JSON (broad union); cast to concrete type.
        return cast(list[dict[str, Any]], result.data or [])

    # -- notes ---------------------------------------------------------------

    def save_note(self, note: Note) -> None:
        self._client.table("notes").upsert(note_to_row(note)).execute()

    def get_note(self, note_id: str) -> Note | None:
        result = self._client.table("notes").select("*").eq("id", note_id).execute()
        rows = self._rows(result)
        return row_to_note(rows[0]) if rows else None

    def list_notes(self, since: datetime | None = None) -> list[Note]:
        query = self._client.table("notes").select("*")
        if since is not None:
            query = query.gte("updated_at", since.isoformat())
        result = query.order("created_at").execute()
        return [row_to_note(r) for r in self._rows(result)]

    # -- extraction results --------------------------------------------------

    def save_extraction(self, result: ExtractionResult) -> None:
        self._client.table("extraction_results").insert(
            {
                "note_id": result.note_id,
                "created_at": result.created_at.isoformat(),
                "items": [i.to_dict() for i in result.items],
            }
        ).execute()

    def list_extractions(
        self, note_id: str | None = None, since: datetime | None = None
    ) -> list[ExtractionResult]:
        query = self._client.table("extraction_results").select("*")
        if note_id is not None:
            query = query.eq("note_id", note_id)
        if since is not None:
            query = query.gte("created_at", since.isoformat())
        result = query.order("created_at").execute()
        return [
            ExtractionResult(
                note_id=str(r["note_id"]),
                created_at=datetime.fromisoformat(r["created_at"]),
                items=[ExtractedItem.from_dict(i) for i in r.get("items") or []],
            )
            for r in self._rows(result)
        ]

    # -- daily summaries -----------------------------------------------------

    def save_daily_summary(self, summary: DailySummary) -> None:
        self._client.table("daily_summaries").upsert(
            daily_to_row(summary), on_conflict="brief_date"
        ).execute()

    def get_daily_summary(self, brief_date: date) -> DailySummary | None:
        result = (
            self._client.table("daily_summaries")
            .select("*")
            .eq("brief_date", brief_date.isoformat())
            .execute()
        )
        rows = self._rows(result)
        return row_to_daily(rows[0]) if rows else None

    # -- state ---------------------------------------------------------------

    def _load_state(self, key: str) -> dict[str, Any]:
        result = self._client.table("app_state").select("value").eq("key", key).execute()
        rows = self._rows(result)
        return cast(dict[str, Any], rows[0]["value"]) if rows else {}

    def _save_state(self, key: str, value: dict[str, Any]) -> None:
        self._client.table("app_state").upsert({"key": key, "value": value}).execute()

    def load_refresh_state(self) -> RefreshState:
        return RefreshState.from_dict(self._load_state(REFRESH_STATE_KEY))

    def save_refresh_state(self, state: RefreshState) -> None:
        self._save_state(REFRESH_STATE_KEY, state.to_dict())

    def load_counters(self) -> UsageCounters:
        return UsageCounters.from_dict(self._load_state(COUNTERS_KEY))

    def save_counters(self, counters: UsageCounters) -> None:
        self._save_state(COUNTERS_KEY, counters.to_dict())

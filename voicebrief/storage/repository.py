"""Repository interface and the in-memory implementation."""

from __future__ import annotations

import copy
import threading
from datetime import date, datetime
from typing import Protocol

from voicebrief.extraction.models import ExtractionResult
from voicebrief.intelligence.models import DailySummary, Note
from voicebrief.intelligence.state import RefreshState, UsageCounters


class Repository(Protocol):
    """Persistence used by the refresh coordinator."""

    def save_note(self, note: Note) -> None: ...

    def get_note(self, note_id: str) -> Note | None: ...

    def list_notes(self, since: datetime | None = None) -> list[Note]: ...

    def save_extraction(self, result: ExtractionResult) -> None: ...

    def list_extractions(
        self, note_id: str | None = None, since: datetime | None = None
    ) -> list[ExtractionResult]: ...

    def save_daily_summary(self, summary: DailySummary) -> None: ...

    def get_daily_summary(self, brief_date: date) -> DailySummary | None: ...

    def load_refresh_state(self) -> RefreshState: ...

    def save_refresh_state(self, state: RefreshState) -> None: ...

    def load_counters(self) -> UsageCounters: ...

    def save_counters(self, counters: UsageCounters) -> None: ...


class InMemoryRepository:
    """Process-local storage. Values are copied in and out so callers never share mutable state."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._notes: dict[str, Note] = {}
        self._extractions: list[ExtractionResult] = []
        self._daily: dict[date, DailySummary] = {}
        self._state = RefreshState()
        self._counters = UsageCounters()

    def save_note(self, note: Note) -> None:
        with self._lock:
            self._notes[note.id] = copy.deepcopy(note)

    def get_note(self, note_id: str) -> Note | None:
        with self._lock:
            note = self._notes.get(note_id)
            return copy.deepcopy(note) if note else None

    def list_notes(self, since: datetime | None = None) -> list[Note]:
        with self._lock:
            notes = [n for n in self._notes.values() if since is None or n.updated_at >= since]
            return copy.deepcopy(sorted(notes, key=lambda n: n.created_at))

    def save_extraction(self, result: ExtractionResult) -> None:
        with self._lock:
            self._extractions.append(copy.deepcopy(result))

    def list_extractions(
        self, note_id: str | None = None, since: datetime | None = None
    ) -> list[ExtractionResult]:
        with self._lock:
            results = [
                r
                for r in self._extractions
                if (note_id is None or r.note_id == note_id)
                and (since is None or r.created_at >= since)
            ]
            return copy.deepcopy(results)

    def save_daily_summary(self, summary: DailySummary) -> None:
        with self._lock:
            self._daily[summary.brief_date] = copy.deepcopy(summary)

    def get_daily_summary(self, brief_date: date) -> DailySummary | None:
        with self._lock:
            summary = self._daily.get(brief_date)
            return copy.deepcopy(summary) if summary else None

    def load_refresh_state(self) -> RefreshState:
        with self._lock:
            return copy.deepcopy(self._state)

    def save_refresh_state(self, state: RefreshState) -> None:
        with self._lock:
            self._state = copy.deepcopy(state)

    def load_counters(self) -> UsageCounters:
        with self._lock:
            return copy.deepcopy(self._counters)

    def save_counters(self, counters: UsageCounters) -> None:
        with self._lock:
            self._counters = copy.deepcopy(counters)

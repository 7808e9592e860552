"""Refresh coordinator: decides when to call the transcription and language-model APIs.

Three tiers:

- note: on save, transcribe (if needed) and extract, one call each.
- session: on app foreground, rebuild the session summary from local data
  once per validity window.
- daily: once per local calendar date, one digest call.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, TypeVar, cast
from zoneinfo import ZoneInfo

from voicebrief.digest.daily import DigestPayload, build_brief_context, generate_daily_digest
from voicebrief.errors import IntelligenceError, NoteProcessingError
from voicebrief.extraction.extractor import extract_from_transcript
from voicebrief.extraction.models import ExtractedItem, ExtractionResult, ItemType
from voicebrief.intelligence.cache import CalendarDay, TieredRefreshCache, ValidityWindow
from voicebrief.intelligence.models import DailySummary, Note, NoteStatus, SessionSummary
from voicebrief.intelligence.session import build_session_summary, start_of_day
from voicebrief.intelligence.state import RefreshState, UsageCounters
from voicebrief.pipeline_config import RefreshConfig, Tier
from voicebrief.storage.repository import Repository
from voicebrief.transcription.transcriber import transcribe_file

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ForegroundOutcome:
    session: SessionSummary
    session_refreshed: bool
    daily: DailySummary | None = None
    daily_error: str | None = None


def local_clock(tz_name: str | None = None) -> Callable[[], datetime]:
    """Return a clock reading local wall time in ``tz_name`` (or the host's zone)."""
    tz = ZoneInfo(tz_name) if tz_name else None

    def now() -> datetime:
        return datetime.now(tz) if tz else datetime.now().astimezone()

    return now


class RefreshCoordinator:
    """Runs the three refresh tiers against an injected repository and state.

    Network calls run in worker threads and may overlap across notes; writes
    to the counters and RefreshState are serialized by ``_state_lock``.
    """

    def __init__(
        self,
        repository: Repository,
        *,
        config: RefreshConfig | None = None,
        state: RefreshState | None = None,
        counters: UsageCounters | None = None,
        transcribe: Callable[[str], str] = transcribe_file,
        extract: Callable[[str], list[ExtractedItem]] = extract_from_transcript,
        digest: Callable[[str], DigestPayload] = generate_daily_digest,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repo = repository
        self._config = config or RefreshConfig()
        self.state = state if state is not None else repository.load_refresh_state()
        self.counters = counters if counters is not None else repository.load_counters()
        self._transcribe = transcribe
        self._extract = extract
        self._digest = digest
        self._clock = clock or local_clock()
        self._state_lock = asyncio.Lock()
        self._cache = TieredRefreshCache(
            self.state,
            {
                Tier.SESSION: ValidityWindow(self._config.session_validity),
                Tier.DAILY: CalendarDay(),
            },
            on_commit=self._persist_state,
        )

    @property
    def repository(self) -> Repository:
        return self._repo

    def now(self) -> datetime:
        return self._clock()

    def localize(self, value: datetime) -> datetime:
        """Attach the clock's zone to a naive ``value`` so it compares with stored times."""
        if value.tzinfo is not None:
            return value
        return value.replace(tzinfo=self.now().tzinfo)

    async def _store(self, fn: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(fn, *args)

    async def _persist_state(self, tier: Tier) -> None:
        async with self._state_lock:
            await self._store(self._repo.save_refresh_state, self.state)

    # -- note tier -----------------------------------------------------------

    async def on_note_saved(self, note: Note) -> ExtractionResult:
        """Transcribe (if needed) and extract insights for a saved note.

        Raises:
            ValueError: the note has neither transcript nor audio.
            NoteProcessingError: transcription or extraction failed; the note's
                status records which.
        """
        if not note.transcript and not note.has_audio:
            raise ValueError(f"Note {note.id} has neither a transcript nor audio")

        calls = 0
        if not note.transcript:
            try:
                transcript = await asyncio.to_thread(self._transcribe, note.audio_path)
            except IntelligenceError as exc:
                await self._mark_failed(note, NoteStatus.TRANSCRIPTION_FAILED, exc)
                raise NoteProcessingError(note.id, "transcription", exc) from exc
            calls += 1
            note.transcript = transcript
            note.status = NoteStatus.TRANSCRIBED
            note.error = None
            note.updated_at = self.now()
            await self._store(self._repo.save_note, note)

        try:
            items = await asyncio.to_thread(self._extract, note.transcript)
        except IntelligenceError as exc:
            await self._mark_failed(note, NoteStatus.EXTRACTION_FAILED, exc)
            raise NoteProcessingError(note.id, "extraction", exc) from exc
        calls += 1

        now = self.now()
        result = ExtractionResult(note_id=note.id, created_at=now, items=items)
        await self._store(self._repo.save_extraction, result)
        note.status = NoteStatus.EXTRACTED
        note.error = None
        note.updated_at = now
        await self._store(self._repo.save_note, note)

        async with self._state_lock:
            self.counters.record_note(now)
            self.counters.record_ai_calls(calls, now)
            await self._store(self._repo.save_counters, self.counters)

        logger.info(
            "Processed note %s: %d items from %d network calls", note.id, len(items), calls
        )
        return result

    async def _mark_failed(self, note: Note, status: NoteStatus, exc: IntelligenceError) -> None:
        logger.warning("Note %s %s: %s (%s)", note.id, status.value, exc, exc.kind)
        note.status = status
        note.error = f"{exc.kind}: {exc}"
        note.updated_at = self.now()
        await self._store(self._repo.save_note, note)

    # -- session tier --------------------------------------------------------

    async def on_app_foregrounded(
        self, now: datetime | None = None, *, force: bool = False
    ) -> ForegroundOutcome:
        """Refresh the session summary if stale, then run the daily check.

        Never raises on network failure: the session tier makes no network
        calls and daily failures are reported in the outcome.
        """
        now = self.localize(now) if now else self.now()
        refresh = await self._cache.resolve(
            Tier.SESSION, now, lambda: self._compute_session(now), force=force
        )
        outcome = ForegroundOutcome(
            session=cast(SessionSummary, refresh.value),
            session_refreshed=refresh.refreshed,
        )

        try:
            outcome.daily = await self.check_daily_brief(now.date())
        except IntelligenceError as exc:
            logger.warning("Daily brief for %s failed: %s", now.date(), exc)
            outcome.daily_error = f"{exc.kind}: {exc}"
        return outcome

    async def _compute_session(self, now: datetime) -> SessionSummary:
        since = self.state.last_session_refresh or start_of_day(now)
        notes = await self._store(self._repo.list_notes)
        extractions = await self._store(self._repo.list_extractions)
        return build_session_summary(notes, extractions, now=now, since=since)

    @property
    def session_summary(self) -> SessionSummary | None:
        return self._cache.peek(Tier.SESSION)

    # -- daily tier ----------------------------------------------------------

    async def check_daily_brief(
        self, today: date | None = None, *, force: bool = False
    ) -> DailySummary | None:
        """Generate today's brief unless one was already generated for this date.

        Raises:
            IntelligenceError: the digest call failed; RefreshState is unchanged.
        """
        today = today or self.now().date()
        refresh = await self._cache.resolve(
            Tier.DAILY,
            today,
            lambda: self._generate_daily(today),
            force=force,
            fallback=lambda: self._store(self._repo.get_daily_summary, today),
        )
        return refresh.value

    async def regenerate_daily_brief(self, today: date | None = None) -> DailySummary | None:
        """Regenerate the brief for ``today`` even if one exists (manual retry)."""
        return await self.check_daily_brief(today, force=True)

    async def _generate_daily(self, today: date) -> DailySummary:
        now = self.now()
        until = now
        if today != now.date():
            # A brief for another date covers the lookback before that date ends
            until = datetime.combine(today + timedelta(days=1), time.min, tzinfo=now.tzinfo)
        since = until - self._config.daily_lookback
        notes = [
            n for n in await self._store(self._repo.list_notes, since) if n.created_at <= until
        ]
        recent = [
            r
            for r in await self._store(self._repo.list_extractions, None, since)
            if r.created_at <= until
        ]
        context = build_brief_context(notes, recent, until)

        payload = await asyncio.to_thread(self._digest, context)

        everything = await self._store(self._repo.list_extractions)
        open_items = [
            i for r in everything if r.created_at <= until for i in r.items if not i.completed
        ]
        summary = DailySummary(
            brief_date=today,
            generated_at=now,
            summary=payload.summary,
            highlights=payload.highlights,
            priorities=payload.priorities,
            warnings=payload.warnings,
            notes_covered=len(notes),
            open_actions=sum(1 for i in open_items if i.item_type is ItemType.ACTION),
            open_commitments=sum(1 for i in open_items if i.item_type is ItemType.COMMITMENT),
        )
        await self._store(self._repo.save_daily_summary, summary)

        async with self._state_lock:
            self.counters.record_ai_calls(1, now)
            await self._store(self._repo.save_counters, self.counters)
        return summary

"""Session summary built from local data only (no network calls)."""

from __future__ import annotations

from datetime import datetime, time, timedelta

from voicebrief.extraction.models import ExtractionResult
from voicebrief.intelligence.models import AttentionWarning, Note, SessionStats, SessionSummary

COMMITMENT_WARNING_DAYS = 5
MAX_COMMITMENT_WARNINGS = 3
MAX_OVERDUE_WARNINGS = 5

# Due text that reads as already late
OVERDUE_MARKERS = ("overdue", "yesterday", "last week")


def start_of_day(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)


def start_of_week(now: datetime) -> datetime:
    """Monday 00:00 of ``now``'s ISO week."""
    return start_of_day(now) - timedelta(days=now.weekday())


def is_overdue(due: str | None) -> bool:
    text = (due or "").lower()
    return any(marker in text for marker in OVERDUE_MARKERS)


def build_session_summary(
    notes: list[Note],
    extractions: list[ExtractionResult],
    now: datetime,
    since: datetime,
) -> SessionSummary:
    """Aggregate notes and extraction results into a SessionSummary.

    Args:
        notes: All notes.
        extractions: All extraction results.
        now: Generation time; defines "today" and "this week".
        since: Notes updated at or after this time count as part of the session.
    """
    today = start_of_day(now)
    week = start_of_week(now)

    actions = [a for r in extractions for a in r.actions if not a.completed]
    open_commitments = [
        (r, c) for r in extractions for c in r.commitments if not c.completed
    ]
    unresolved = [u for r in extractions for u in r.unresolved]

    stats = SessionStats(
        total_notes=len(notes),
        notes_today=sum(1 for n in notes if n.created_at >= today),
        notes_this_week=sum(1 for n in notes if n.created_at >= week),
        open_actions=len(actions),
        open_commitments=len(open_commitments),
        unresolved=len(unresolved),
        failed_notes=sum(1 for n in notes if n.status.failed),
    )

    attention: list[AttentionWarning] = []
    for result, commitment in open_commitments:
        days = (now - result.created_at).days
        if days < COMMITMENT_WARNING_DAYS:
            continue
        attention.append(
            AttentionWarning(
                type="commitment",
                title=commitment.content[:50],
                description=f"Open commitment for {days} days",
                days_since_issue=days,
                note_id=result.note_id,
            )
        )
        if len(attention) >= MAX_COMMITMENT_WARNINGS:
            break

    overdue = 0
    for result in extractions:
        for action in result.actions:
            if action.completed or not is_overdue(action.due) or overdue >= MAX_OVERDUE_WARNINGS:
                continue
            overdue += 1
            attention.append(
                AttentionWarning(
                    type="overdue",
                    title=action.content[:50],
                    description=f"Due {action.due}",
                    days_since_issue=(now - result.created_at).days,
                    note_id=result.note_id,
                )
            )

    recent = sorted(
        (n for n in notes if n.updated_at >= since), key=lambda n: n.updated_at, reverse=True
    )

    return SessionSummary(
        generated_at=now,
        since=since,
        recent_notes=[n.id for n in recent],
        stats=stats,
        attention=attention,
    )

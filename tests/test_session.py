"""Tests for the local session summary aggregation."""

from __future__ import annotations

from datetime import datetime

from voicebrief.extraction.models import ExtractedItem, ExtractionResult, ItemType
from voicebrief.intelligence.models import Note, NoteStatus
from voicebrief.intelligence.session import (
    build_session_summary,
    is_overdue,
    start_of_day,
    start_of_week,
)

# Friday
NOW = datetime(2024, 3, 1, 10, 0)


def _note(created: datetime, updated: datetime | None = None, **kwargs) -> Note:
    return Note(created_at=created, updated_at=updated or created, **kwargs)


def _result(note_id: str, created: datetime, *items: ExtractedItem) -> ExtractionResult:
    return ExtractionResult(note_id=note_id, created_at=created, items=list(items))


class TestHelpers:
    def test_start_of_day(self) -> None:
        assert start_of_day(NOW) == datetime(2024, 3, 1)

    def test_start_of_week_is_monday(self) -> None:
        assert start_of_week(NOW) == datetime(2024, 2, 26)

    def test_is_overdue(self) -> None:
        assert is_overdue("Yesterday")
        assert is_overdue("was due last week")
        assert not is_overdue("Friday")
        assert not is_overdue(None)


class TestBuildSessionSummary:
    def test_stats(self) -> None:
        notes = [
            _note(datetime(2024, 3, 1, 9, 0)),
            _note(datetime(2024, 2, 27, 9, 0)),
            _note(datetime(2024, 2, 20, 9, 0), status=NoteStatus.EXTRACTION_FAILED),
        ]
        extractions = [
            _result(
                notes[0].id,
                datetime(2024, 3, 1, 9, 0),
                ExtractedItem(item_type=ItemType.ACTION, content="a"),
                ExtractedItem(item_type=ItemType.ACTION, content="done", completed=True),
                ExtractedItem(item_type=ItemType.COMMITMENT, content="c"),
                ExtractedItem(item_type=ItemType.UNRESOLVED, content="u"),
            )
        ]

        summary = build_session_summary(notes, extractions, NOW, since=start_of_day(NOW))

        stats = summary.stats
        assert stats.total_notes == 3
        assert stats.notes_today == 1
        assert stats.notes_this_week == 2
        assert stats.open_actions == 1
        assert stats.open_commitments == 1
        assert stats.unresolved == 1
        assert stats.failed_notes == 1

    def test_recent_notes_since_newest_first(self) -> None:
        old = _note(datetime(2024, 2, 29, 9, 0))
        edited = _note(datetime(2024, 2, 28, 9, 0), datetime(2024, 3, 1, 9, 45))
        fresh = _note(datetime(2024, 3, 1, 9, 30))

        summary = build_session_summary(
            [old, edited, fresh], [], NOW, since=datetime(2024, 3, 1, 9, 0)
        )

        assert summary.recent_notes == [edited.id, fresh.id]
        assert summary.since == datetime(2024, 3, 1, 9, 0)
        assert summary.generated_at == NOW

    def test_stale_commitments_warn_and_are_capped(self) -> None:
        extractions = [
            _result(
                f"n{i}",
                datetime(2024, 2, 20, 9, 0),
                ExtractedItem(item_type=ItemType.COMMITMENT, content=f"promise {i}"),
            )
            for i in range(5)
        ]
        extractions.append(
            _result(
                "recent",
                datetime(2024, 2, 29, 9, 0),
                ExtractedItem(item_type=ItemType.COMMITMENT, content="new promise"),
            )
        )

        summary = build_session_summary([], extractions, NOW, since=NOW)

        commitments = [w for w in summary.attention if w.type == "commitment"]
        assert len(commitments) == 3
        assert commitments[0].days_since_issue == 10
        assert all(w.note_id != "recent" for w in commitments)

    def test_overdue_actions_warn(self) -> None:
        extractions = [
            _result(
                "n1",
                datetime(2024, 2, 29, 9, 0),
                ExtractedItem(item_type=ItemType.ACTION, content="Pay invoice", due="yesterday"),
                ExtractedItem(item_type=ItemType.ACTION, content="Plan offsite", due="next month"),
                ExtractedItem(
                    item_type=ItemType.ACTION, content="Old", due="overdue", completed=True
                ),
            )
        ]

        summary = build_session_summary([], extractions, NOW, since=NOW)

        assert [(w.type, w.title, w.description) for w in summary.attention] == [
            ("overdue", "Pay invoice", "Due yesterday")
        ]

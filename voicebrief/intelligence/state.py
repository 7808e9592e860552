"""Refresh markers and usage counters owned by the coordinator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from voicebrief.pipeline_config import Tier

Marker = datetime | date


@dataclass
class RefreshState:
    """When each tier was last refreshed.

    The session tier is keyed by timestamp, the daily tier by calendar date.
    """

    markers: dict[Tier, Marker] = field(default_factory=dict)

    @property
    def last_session_refresh(self) -> datetime | None:
        value = self.markers.get(Tier.SESSION)
        return value if isinstance(value, datetime) else None

    @property
    def last_daily_brief_date(self) -> date | None:
        return self.markers.get(Tier.DAILY)

    def marker(self, tier: Tier) -> Marker | None:
        return self.markers.get(tier)

    def mark(self, tier: Tier, value: Marker) -> None:
        self.markers[tier] = value

    def clear(self, tier: Tier) -> None:
        self.markers.pop(tier, None)

    def to_dict(self) -> dict[str, Any]:
        return {tier.value: value.isoformat() for tier, value in self.markers.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RefreshState:
        state = cls()
        for key, raw in data.items():
            if raw is None:
                continue
            tier = Tier(key)
            if tier is Tier.DAILY:
                state.mark(tier, date.fromisoformat(raw))
            else:
                state.mark(tier, datetime.fromisoformat(raw))
        return state


@dataclass
class UsageCounters:
    """Live counters shown in the UI and used for usage gating.

    Daily, weekly, and monthly counts reset lazily the first time they are
    touched in a new period.
    """

    notes_today: int = 0
    notes_this_week: int = 0
    total_notes: int = 0
    ai_calls_this_month: int = 0
    last_updated: datetime | None = None

    def roll_over(self, now: datetime) -> None:
        last = self.last_updated
        if last is not None:
            if last.date() != now.date():
                self.notes_today = 0
            if last.isocalendar()[:2] != now.isocalendar()[:2]:
                self.notes_this_week = 0
            if (last.year, last.month) != (now.year, now.month):
                self.ai_calls_this_month = 0
        self.last_updated = now

    def record_note(self, now: datetime) -> None:
        self.roll_over(now)
        self.notes_today += 1
        self.notes_this_week += 1
        self.total_notes += 1

    def record_ai_calls(self, count: int, now: datetime) -> None:
        self.roll_over(now)
        self.ai_calls_this_month += count

    def to_dict(self) -> dict[str, Any]:
        return {
            "notes_today": self.notes_today,
            "notes_this_week": self.notes_this_week,
            "total_notes": self.total_notes,
            "ai_calls_this_month": self.ai_calls_this_month,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UsageCounters:
        last = data.get("last_updated")
        return cls(
            notes_today=int(data.get("notes_today", 0)),
            notes_this_week=int(data.get("notes_this_week", 0)),
            total_notes=int(data.get("total_notes", 0)),
            ai_calls_this_month=int(data.get("ai_calls_this_month", 0)),
            last_updated=datetime.fromisoformat(last) if last else None,
        )

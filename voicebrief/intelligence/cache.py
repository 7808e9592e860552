"""Stale-while-valid, at-most-once-per-key refresh cache.

Each tier stores a marker in ``RefreshState`` (a timestamp or a calendar
date) and a policy decides whether that marker is still fresh for a probe.
Refreshes of one tier are serialized, so concurrent triggers share a single
computation, and the marker is written only after the computation succeeds.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Generic, Protocol, TypeVar

from voicebrief.intelligence.state import Marker, RefreshState
from voicebrief.pipeline_config import Tier

logger = logging.getLogger(__name__)

V = TypeVar("V")


class FreshnessPolicy(Protocol):
    def is_fresh(self, marker: Marker, probe: Marker) -> bool: ...


@dataclass(frozen=True)
class ValidityWindow:
    """Fresh until more than ``window`` has elapsed since the marker."""

    window: timedelta

    def is_fresh(self, marker: Marker, probe: Marker) -> bool:
        return probe - marker <= self.window  # type: ignore[operator]


@dataclass(frozen=True)
class CalendarDay:
    """Fresh for the marker's calendar date only, however little time has passed."""

    def is_fresh(self, marker: Marker, probe: Marker) -> bool:
        return _as_date(marker) == _as_date(probe)


def _as_date(value: Marker) -> date:
    # datetime subclasses date, so check it first
    return value.date() if isinstance(value, datetime) else value


@dataclass(frozen=True)
class Refresh(Generic[V]):
    value: V | None
    refreshed: bool


class TieredRefreshCache:
    def __init__(
        self,
        state: RefreshState,
        policies: dict[Tier, FreshnessPolicy],
        on_commit: Callable[[Tier], Awaitable[None]] | None = None,
    ) -> None:
        self._state = state
        self._policies = policies
        self._on_commit = on_commit
        self._locks = {tier: asyncio.Lock() for tier in policies}
        self._values: dict[Tier, Any] = {}

    def peek(self, tier: Tier) -> Any:
        """Return the in-memory value for ``tier`` without checking freshness."""
        return self._values.get(tier)

    def is_fresh(self, tier: Tier, probe: Marker) -> bool:
        marker = self._state.marker(tier)
        return marker is not None and self._policies[tier].is_fresh(marker, probe)

    async def resolve(
        self,
        tier: Tier,
        probe: Marker,
        compute: Callable[[], Awaitable[V]],
        *,
        force: bool = False,
        fallback: Callable[[], Awaitable[V | None]] | None = None,
    ) -> Refresh[V]:
        """Return the cached value for ``tier`` or compute a new one.

        Args:
            tier: Which tier to resolve.
            probe: The current timestamp or date, compared with the stored marker.
            compute: Produces a fresh value. If it raises, the marker is left untouched.
            force: Recompute even when the marker is fresh.
            fallback: Loads a stored value when none is in memory (e.g. after a
                restart or a lost marker). A stored value is returned without
                calling ``compute`` and, for a stale marker, becomes the new
                marker. When given, a fresh marker never triggers ``compute``,
                even if the fallback finds nothing.
        """
        async with self._locks[tier]:
            if not force:
                fresh = self.is_fresh(tier, probe)
                value = self._values.get(tier) if fresh else None
                if value is None and fallback is not None:
                    value = await fallback()
                    if value is not None:
                        self._values[tier] = value
                        if not fresh:
                            await self._commit(tier, probe)
                if value is not None or (fresh and fallback is not None):
                    logger.debug(
                        "%s tier already resolved for %s; skipping refresh", tier.value, probe
                    )
                    return Refresh(value=value, refreshed=False)

            value = await compute()
            self._values[tier] = value
            await self._commit(tier, probe)
            logger.info("%s tier refreshed for %s", tier.value, probe)
            return Refresh(value=value, refreshed=True)

    async def _commit(self, tier: Tier, probe: Marker) -> None:
        self._state.mark(tier, probe)
        if self._on_commit is not None:
            await self._on_commit(tier)

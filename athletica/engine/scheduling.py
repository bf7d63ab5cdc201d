"""
Adaptive recomputation interval for live stats.

Recomputation is advisory and read-only with respect to session state,
so it runs on its own cadence: tight while a set is in progress,
relaxed during rest, warmup or pause, and not at all once the session
is idle or terminal.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, Field

from athletica.core.config import settings

logger = logging.getLogger(__name__)


class RefreshIntervals(BaseModel):
    """Seconds between live-stat recomputations per lifecycle state."""

    exercise: float = Field(settings.REFRESH_INTERVAL_ACTIVE_SET_SECONDS, gt=0)
    rest: float = Field(settings.REFRESH_INTERVAL_REST_SECONDS, gt=0)
    warmup: float = Field(settings.REFRESH_INTERVAL_REST_SECONDS, gt=0)
    paused: float = Field(settings.REFRESH_INTERVAL_PAUSED_SECONDS, gt=0)


DEFAULT_INTERVALS = RefreshIntervals()


def refresh_interval(state: str, intervals: Optional[RefreshIntervals] = None) -> Optional[float]:
    """Seconds until the next recomputation, or ``None`` to stop polling."""
    cfg = intervals or DEFAULT_INTERVALS
    return {
        "exercise": cfg.exercise,
        "rest": cfg.rest,
        "warmup": cfg.warmup,
        "paused": cfg.paused,
    }.get(state)


class LiveStatsPoller:
    """Drives periodic live-stat refreshes for one session.

    *refresh* recomputes and publishes the stats, returning the session
    state it observed.  A failed refresh is logged and retried on the
    previous interval; it never propagates out of :meth:`run`.
    """

    def __init__(self, refresh: Callable[[], Awaitable[str]], initial_state: str,
                 intervals: Optional[RefreshIntervals] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep, ):
        self._refresh = refresh
        self._state = initial_state
        self._intervals = intervals or DEFAULT_INTERVALS
        self._sleep = sleep
        self._stopped = False
        self.refresh_count = 0
        self.failure_count = 0

    @property
    def state(self) -> str:
        return self._state

    def stop(self) -> None:
        self._stopped = True

    async def run(self, max_iterations: Optional[int] = None) -> int:
        """Poll until the session stops being active.  Returns refresh count."""
        iterations = 0
        while not self._stopped:
            interval = refresh_interval(self._state, self._intervals)
            if interval is None:
                logger.debug("Stopping live stats poller in state '%s'", self._state)
                break
            if max_iterations is not None and iterations >= max_iterations:
                break
            await self._sleep(interval)
            iterations += 1
            try:
                self._state = await self._refresh()
                self.refresh_count += 1
            except Exception:
                self.failure_count += 1
                logger.exception("Live stats refresh failed; retrying in %.0fs", interval)
        return self.refresh_count

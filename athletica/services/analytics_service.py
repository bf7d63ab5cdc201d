"""
Analytics service.

Loads a session with its logs, delegates to :mod:`athletica.engine.analytics`
and memoizes live stats per session in a short-lived TTL cache.  The
cache is shared by every request of the process and is invalidated by
expiry only, so a write may show up one refresh later.

At completion :meth:`AnalyticsService.finalize` freezes the summary into
a ``session_analytics`` row (staged, committed by the caller's unit of
work).
"""

import asyncio
import datetime
import logging
from typing import Optional

from sqlmodel import Session

from athletica.core.clock import Clock, utcnow
from athletica.core.config import settings
from athletica.core.exceptions import InvalidTransition, NotFound
from athletica.db.repositories.exercise_log import ExerciseLogRepository
from athletica.db.repositories.session_analytics import SessionAnalyticsRepository
from athletica.db.repositories.set_log import SetLogRepository
from athletica.db.repositories.workout_session import WorkoutSessionRepository
from athletica.engine import analytics
from athletica.engine.cache import TTLCache
from athletica.engine.scheduling import LiveStatsPoller, RefreshIntervals
from athletica.engine.state_machine import SessionState
from athletica.models.exercise_log import ExerciseLog
from athletica.models.session_analytics import SessionAnalytics
from athletica.models.set_log import SetLog
from athletica.models.workout_session import WorkoutSession
from athletica.schemas.analytics import LiveStats, PreviousSessionStats, SessionSummary

logger = logging.getLogger(__name__)

# Process-wide live stats cache, keyed by session id
LIVE_STATS_CACHE: TTLCache[int, LiveStats] = TTLCache(settings.LIVE_STATS_CACHE_TTL_SECONDS)


class AnalyticsService:
    """Service for live stats and session summaries."""

    def __init__(self, session: Session, clock: Clock = utcnow, cache: Optional[TTLCache[int, LiveStats]] = None,
                 config: Optional[analytics.AnalyticsConfig] = None, ):
        self.sessions = WorkoutSessionRepository(session)
        self.exercise_logs = ExerciseLogRepository(session)
        self.set_logs = SetLogRepository(session)
        self.repository = SessionAnalyticsRepository(session)
        self.clock = clock
        self.cache = cache if cache is not None else LIVE_STATS_CACHE
        self.config = config or analytics.DEFAULT_CONFIG

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_live_stats(self, user_id: str, session_id: int) -> LiveStats:
        entry = self._get_owned_session(user_id, session_id)
        return self.cache.get_or_compute(session_id, lambda: self._compute_live_stats(entry))

    def get_summary(self, user_id: str, session_id: int) -> SessionSummary:
        """Summary of a completed session, served from its frozen analytics row."""
        entry = self._get_owned_session(user_id, session_id)
        if entry.state != SessionState.COMPLETED.value:
            raise InvalidTransition("get the summary", entry.state, (SessionState.COMPLETED.value,))
        snapshot = self.repository.get_by_session(entry.id)
        if snapshot is None:
            raise NotFound("Session analytics", session_id)
        logs = self.exercise_logs.list_by_session(entry.id)
        sets_by_log = self.set_logs.list_by_session(entry.id)
        return analytics.summary_from_snapshot(entry, snapshot, logs, sets_by_log)

    def previous_stats(self, entry: WorkoutSession) -> Optional[PreviousSessionStats]:
        previous = self.sessions.get_previous_completed(entry)
        if previous is None:
            return None
        return PreviousSessionStats(session_id=previous.id, completed_at=previous.completed_at,
                                    total_volume_kg=previous.total_volume_kg,
                                    active_duration_seconds=previous.active_duration_seconds,
                                    performance_score=previous.performance_score, )

    async def watch_live_stats(self, user_id: str, session_id: int, intervals: Optional[RefreshIntervals] = None,
                               max_iterations: Optional[int] = None, ) -> int:
        """Refresh the cached live stats on the adaptive cadence until the session stops.

        Returns the number of successful refreshes.
        """
        entry = self._get_owned_session(user_id, session_id)

        def recompute() -> str:
            current = self._get_owned_session(user_id, session_id)
            self.sessions.session.refresh(current)
            self.cache.put(session_id, self._compute_live_stats(current))
            return current.state

        async def refresh() -> str:
            # Blocking queries run in a worker thread, one tick at a time
            return await asyncio.to_thread(recompute)

        poller = LiveStatsPoller(refresh, entry.state, intervals)
        return await poller.run(max_iterations=max_iterations)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def finalize(self, entry: WorkoutSession, logs: list[ExerciseLog], sets_by_log: dict[int, list[SetLog]],
                 now: datetime.datetime, ) -> SessionSummary:
        """Freeze the summary of a just-completed session.

        Stages one ``session_analytics`` row (never a second one) and
        copies the score and calories onto the session row.
        """
        summary = analytics.build_session_summary(entry, logs, sets_by_log, now, self.previous_stats(entry),
                                                  self.config)
        entry.performance_score = summary.performance.score
        entry.calories_burned = summary.calories_burned

        if self.repository.get_by_session(entry.id) is None:
            self.repository.add(self._to_row(summary))
            logger.info("Session %s analytics frozen: score %s, %s kcal", entry.id, summary.performance.score,
                        summary.calories_burned)
        self.cache.invalidate(entry.id)
        return summary

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _compute_live_stats(self, entry: WorkoutSession) -> LiveStats:
        sets = [s for group in self.set_logs.list_by_session(entry.id).values() for s in group]
        return analytics.compute_live_stats(entry, sets, self.clock(), self.previous_stats(entry), self.config)

    def _get_owned_session(self, user_id: str, session_id: int) -> WorkoutSession:
        entry = self.sessions.get_by_id(session_id)
        if not entry or entry.user_id != user_id:
            raise NotFound("Session", session_id)
        return entry

    @staticmethod
    def _to_row(summary: SessionSummary) -> SessionAnalytics:
        return SessionAnalytics(session_id=summary.session_id, user_id=summary.user_id,
                                workout_id=summary.workout_id, total_volume_kg=summary.total_volume_kg,
                                volume_per_exercise={e.exercise_id: e.total_volume_kg for e in summary.exercises},
                                average_weight_kg=summary.average_weight_kg, total_reps=summary.total_reps,
                                total_sets=summary.total_sets, average_reps_per_set=summary.average_reps_per_set,
                                average_intensity=summary.average_intensity, average_rpe=summary.average_rpe,
                                total_duration_seconds=summary.total_duration_seconds,
                                active_duration_seconds=summary.active_duration_seconds,
                                time_under_tension_seconds=summary.time_under_tension_seconds,
                                average_rest_seconds=summary.average_rest_seconds,
                                work_to_rest_ratio=summary.work_to_rest_ratio,
                                calories_burned=summary.calories_burned,
                                performance_score=summary.performance.score,
                                score_breakdown=summary.performance.breakdown.model_dump(),
                                degraded_factors=list(summary.performance.degraded_factors),
                                average_form_quality=summary.average_form_quality,
                                exercises_with_poor_form=list(summary.exercises_with_poor_form),
                                completion_rate=summary.completion_rate,
                                exercises_skipped=summary.exercises_skipped,
                                sets_to_failure=summary.sets_to_failure,
                                vs_previous_session=summary.comparison.model_dump(),
                                recovery_estimate_hours=summary.recovery_estimate_hours,
                                insights=summary.insights.model_dump(), calculated_at=summary.calculated_at, )

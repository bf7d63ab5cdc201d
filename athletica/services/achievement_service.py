"""
Achievement service.

Builds the evaluation context from a completed session plus lifetime
counters, runs the rule table and records new unlocks.  An unlock that
already exists is a no-op, so evaluating the same session twice is safe.
"""

import datetime
import logging
from collections import Counter
from typing import Optional

from sqlmodel import Session

from athletica.catalog.base import WorkoutPlanProvider
from athletica.catalog.providers import RegisteredPlanProvider
from athletica.core.clock import Clock, utcnow
from athletica.core.config import settings
from athletica.core.exceptions import DuplicateUnlock, InvalidTransition, NotFound
from athletica.db.repositories.achievement_unlock import AchievementUnlockRepository
from athletica.db.repositories.exercise_log import ExerciseLogRepository
from athletica.db.repositories.set_log import SetLogRepository
from athletica.db.repositories.workout_session import WorkoutSessionRepository
from athletica.db.unit_of_work import unit_of_work
from athletica.engine import achievements
from athletica.engine.state_machine import SessionState
from athletica.models.achievement_unlock import AchievementUnlock
from athletica.models.exercise_log import ExerciseLog
from athletica.models.set_log import SetLog
from athletica.models.workout_session import WorkoutSession
from athletica.schemas.achievement import (AchievementDefinitionResponse, AchievementEvaluateRequest, AchievementStats,
                                           AchievementUnlockResponse, LifetimeStats, UnlockedAchievement, )

logger = logging.getLogger(__name__)

# Completed-session dates older than this cannot extend the longest tracked streak
STREAK_LOOKBACK_DAYS = 400


class AchievementService:
    """Service for achievement evaluation and listing."""

    def __init__(self, session: Session, clock: Clock = utcnow, plans: Optional[WorkoutPlanProvider] = None):
        self.db = session
        self.repository = AchievementUnlockRepository(session)
        self.sessions = WorkoutSessionRepository(session)
        self.exercise_logs = ExerciseLogRepository(session)
        self.set_logs = SetLogRepository(session)
        self.clock = clock
        self.plans = plans or RegisteredPlanProvider()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, user_id: str, data: AchievementEvaluateRequest) -> list[UnlockedAchievement]:
        """Evaluate a completed session on demand.  Returns only new unlocks."""
        entry = self.sessions.get_by_id(data.session_id)
        if not entry or entry.user_id != user_id:
            raise NotFound("Session", data.session_id)
        if entry.state != SessionState.COMPLETED.value:
            raise InvalidTransition("evaluate achievements", entry.state, (SessionState.COMPLETED.value,))
        logs = self.exercise_logs.list_by_session(entry.id)
        sets_by_log = self.set_logs.list_by_session(entry.id)
        with unit_of_work(self.db, "evaluate achievements"):
            unlocked = self.evaluate_session(entry, logs, sets_by_log, self.clock(), data.lifetime_stats)
        return unlocked

    def evaluate_session(self, entry: WorkoutSession, logs: list[ExerciseLog], sets_by_log: dict[int, list[SetLog]],
                         now: datetime.datetime, lifetime: Optional[LifetimeStats] = None, ) -> list[UnlockedAchievement]:
        """Run the rules for *entry* and stage the new unlocks (no commit)."""
        sets = [s for log in logs for s in sets_by_log.get(log.id, [])]
        plan = self.plans.get_plan(entry.workout_id)
        ctx = achievements.build_context(sets_completed=entry.sets_completed, total_sets=entry.total_sets,
                                         rpes=[s.rpe for s in sets if s.rpe is not None],
                                         form_ratings=[s.form_quality for s in sets if s.form_quality is not None],
                                         rest_periods_skipped=entry.rest_periods_skipped,
                                         active_seconds=entry.active_duration_seconds,
                                         estimated_seconds=(plan.estimated_duration if plan else
                                                            settings.IDEAL_SESSION_DURATION_SECONDS),
                                         lifetime=lifetime or self.lifetime_stats(entry.user_id, now),
                                         start_time=entry.started_at, )

        new: list[UnlockedAchievement] = []
        for achievement in achievements.evaluate_achievements(ctx, now):
            row = AchievementUnlock(user_id=entry.user_id, achievement_id=achievement.achievement_id,
                                    category=achievement.category, rarity=achievement.rarity,
                                    title=achievement.title, points=achievement.points, session_id=entry.id,
                                    unlocked_at=achievement.unlocked_at, )
            try:
                self.repository.create_if_absent(row)
            except DuplicateUnlock as exc:
                logger.debug("Skipping unlock: %s", exc.message)
                continue
            new.append(achievement)
        if new:
            logger.info("User %s unlocked %s (+%s points)", entry.user_id, [a.achievement_id for a in new],
                        achievements.total_points(new))
        return new

    def lifetime_stats(self, user_id: str, now: datetime.datetime) -> LifetimeStats:
        """Lifetime counters over the user's completed sessions."""
        volume, reps = self.sessions.sum_completed_totals(user_id)
        dates = self.sessions.completed_dates(user_id, now - datetime.timedelta(days=STREAK_LOOKBACK_DAYS))
        return LifetimeStats(workout_count=self.sessions.count_completed_by_user(user_id),
                             current_streak_days=achievements.compute_current_streak(dates, now.date()),
                             total_volume_kg=round(volume, 2), total_reps=reps, )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_unlocked(self, user_id: str) -> list[AchievementUnlockResponse]:
        return [AchievementUnlockResponse.model_validate(row) for row in self.repository.list_by_user(user_id)]

    def get_stats(self, user_id: str) -> AchievementStats:
        rows = self.repository.list_by_user(user_id)
        return AchievementStats(total_unlocked=len(rows), total_available=len(achievements.ACHIEVEMENTS),
                                total_points=sum(row.points for row in rows),
                                by_rarity=dict(Counter(row.rarity for row in rows)),
                                by_category=dict(Counter(row.category for row in rows)), )

    @staticmethod
    def list_definitions() -> list[AchievementDefinitionResponse]:
        return [AchievementDefinitionResponse(id=d.id, title=d.title, description=d.description, icon=d.icon,
                                              category=d.category, rarity=d.rarity, points=d.points, ) for d in
                achievements.ACHIEVEMENTS]

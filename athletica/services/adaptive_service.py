"""
Adaptive service.

Wires the pure adaptive engine to the learned metrics, the set history
and the exercise catalog.  Missing history is never an error: the
engine falls back to its neutral defaults.
"""

import datetime
import logging
from typing import Optional

from sqlmodel import Session

from athletica.catalog.base import ExerciseCatalog, WorkoutPlanProvider
from athletica.catalog.exercise_profile import compare_difficulty
from athletica.catalog.providers import BuiltinExerciseCatalog, RegisteredPlanProvider
from athletica.core.clock import Clock, utcnow
from athletica.core.exceptions import InvalidTransition, NotFound
from athletica.db.repositories.adaptive_metric import AdaptiveMetricRepository
from athletica.db.repositories.recommendation import RecommendationRepository
from athletica.db.repositories.set_log import SetLogRepository
from athletica.db.unit_of_work import unit_of_work
from athletica.engine import adaptive
from athletica.models.adaptive_metric import AdaptiveUserMetric
from athletica.models.exercise_log import ExerciseLog
from athletica.models.recommendation import ExerciseRecommendation
from athletica.models.set_log import SetLog
from athletica.models.workout_session import WorkoutSession
from athletica.schemas.adaptive import (AdaptiveMetricResponse, ExerciseSuggestion, OneRepMaxEstimate,
                                        RecommendationFeedback, RecommendationResponse, RestRecommendation, )

logger = logging.getLogger(__name__)


class AdaptiveService:
    """Service for rest recommendations, exercise recommendations and learning."""

    def __init__(self, session: Session, clock: Clock = utcnow, catalog: Optional[ExerciseCatalog] = None,
                 plans: Optional[WorkoutPlanProvider] = None, config: Optional[adaptive.AdaptiveConfig] = None, ):
        self.db = session
        self.metrics = AdaptiveMetricRepository(session)
        self.recommendations = RecommendationRepository(session)
        self.set_logs = SetLogRepository(session)
        self.clock = clock
        self.catalog = catalog or BuiltinExerciseCatalog()
        self.plans = plans or RegisteredPlanProvider()
        self.config = config or adaptive.DEFAULT_CONFIG

    # ------------------------------------------------------------------
    # Rest
    # ------------------------------------------------------------------

    def recommend_rest(self, user_id: str, exercise_id: str, set_number: int, rpe: Optional[float] = None,
                       goal: Optional[str] = None, ) -> RestRecommendation:
        metric = self.metrics.get(user_id, exercise_id)
        return adaptive.recommend_rest(exercise_id, set_number, rpe, goal, metric, self.config)

    def rest_before_set(self, entry: WorkoutSession, log: ExerciseLog, set_number: int,
                        rpe: Optional[float] = None) -> int:
        """Recommended rest before *set_number* of *log* (seconds)."""
        plan = self.plans.get_plan(entry.workout_id)
        goal = plan.training_goal if plan else None
        recommendation = self.recommend_rest(entry.user_id, log.exercise_id, set_number, rpe, goal)
        logger.debug("Session %s: rest %ss before set %s of %s (%s)", entry.id, recommendation.recommended_seconds,
                     recommendation.set_number, log.exercise_id, recommendation.reasoning)
        return recommendation.recommended_seconds

    # ------------------------------------------------------------------
    # Exercise recommendations
    # ------------------------------------------------------------------

    def recommend_exercises(self, user_id: str, exercise_id: str, trigger: str,
                            session_id: Optional[int] = None, ) -> list[RecommendationResponse]:
        """Rank alternatives for *exercise_id* and record what was shown."""
        original = self.catalog.get(exercise_id)
        if original is None:
            raise NotFound("Exercise", exercise_id)
        candidates = self.catalog.in_category(original.category, exclude=exercise_id,
                                              limit=self.config.candidate_limit)
        feedback = self.recommendations.feedback_stats(user_id, exercise_id)
        suggestions = adaptive.recommend_exercises(original, candidates, trigger, feedback, self.config)

        rows: list[ExerciseRecommendation] = []
        with unit_of_work(self.db, "record recommendations"):
            for suggestion in suggestions:
                rows.append(self.recommendations.add(
                    ExerciseRecommendation(user_id=user_id, session_id=session_id, original_exercise_id=exercise_id,
                                           recommended_exercise_id=suggestion.exercise_id,
                                           recommendation_type=suggestion.recommendation_type,
                                           reason=suggestion.reason, trigger_event=trigger,
                                           confidence=suggestion.confidence, model_version=adaptive.MODEL_VERSION,
                                           created_at=self.clock(), )))
        for row in rows:
            self.db.refresh(row)
        logger.info("Recommended %s alternatives for %s (%s)", len(rows), exercise_id, trigger)
        return [self._to_response(row, suggestion) for row, suggestion in zip(rows, suggestions)]

    def respond(self, user_id: str, recommendation_id: int, data: RecommendationFeedback) -> RecommendationResponse:
        """Record the user's answer to a recommendation (once)."""
        row = self.recommendations.get_by_id(recommendation_id)
        if not row or row.user_id != user_id:
            raise NotFound("Recommendation", recommendation_id)
        if row.responded_at is not None:
            raise InvalidTransition("respond", "answered", subject=f"recommendation {recommendation_id}")
        with unit_of_work(self.db, "respond to recommendation"):
            row.was_accepted = data.accepted
            row.feedback_score = data.feedback_score
            row.user_feedback = data.feedback
            row.responded_at = self.clock()
            self.recommendations.add(row)
        self.db.refresh(row)
        return self._to_response(row, self._describe(row))

    # ------------------------------------------------------------------
    # Strength and learned metrics
    # ------------------------------------------------------------------

    def estimate_one_rep_max(self, user_id: str, exercise_id: str) -> OneRepMaxEstimate:
        recent = self.set_logs.get_recent_for_user_exercise(user_id, exercise_id, limit=self.config.one_rm_window)
        return adaptive.estimate_one_rep_max(exercise_id, recent, self.config)

    def get_metrics(self, user_id: str, exercise_id: Optional[str] = None) -> list[AdaptiveMetricResponse]:
        if exercise_id is None:
            return [AdaptiveMetricResponse.model_validate(m) for m in self.metrics.list_by_user(user_id)]
        metric = self.metrics.get(user_id, exercise_id)
        if metric is None:
            raise NotFound("Metrics for exercise", exercise_id)
        return [AdaptiveMetricResponse.model_validate(metric)]

    def learn_from_session(self, entry: WorkoutSession, logs: list[ExerciseLog], sets_by_log: dict[int, list[SetLog]],
                           now: datetime.datetime, ) -> list[AdaptiveUserMetric]:
        """Fold a completed session into the per-exercise metrics (staged only)."""
        updated: list[AdaptiveUserMetric] = []
        for log in sorted(logs, key=lambda l: l.order_index):
            metric = self.metrics.get(entry.user_id, log.exercise_id)
            recent = self.set_logs.get_recent_for_user_exercise(entry.user_id, log.exercise_id,
                                                                limit=self.config.one_rm_window)
            metric = adaptive.update_metric(metric, entry.user_id, log, sets_by_log.get(log.id, []), recent, now,
                                            self.config)
            updated.append(self.metrics.add(metric))
        logger.info("Session %s: learned metrics for %s exercises", entry.id, len(updated))
        return updated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _describe(self, row: ExerciseRecommendation) -> ExerciseSuggestion:
        """Rebuild the display fields of a stored recommendation from the catalog."""
        original = self.catalog.get(row.original_exercise_id)
        candidate = self.catalog.get(row.recommended_exercise_id)
        if original is None or candidate is None:
            return ExerciseSuggestion(exercise_id=row.recommended_exercise_id, display_name=row.recommended_exercise_id,
                                      recommendation_type=row.recommendation_type, confidence=row.confidence,
                                      reason=row.reason, difficulty_comparison="same", )
        return ExerciseSuggestion(exercise_id=candidate.exercise_id, display_name=candidate.display_name,
                                  recommendation_type=row.recommendation_type, confidence=row.confidence,
                                  reason=row.reason,
                                  benefits=adaptive.describe_benefits(candidate, row.recommendation_type),
                                  difficulty_comparison=compare_difficulty(original, candidate), )

    @staticmethod
    def _to_response(row: ExerciseRecommendation, suggestion: ExerciseSuggestion) -> RecommendationResponse:
        return RecommendationResponse(**suggestion.model_dump(), id=row.id,
                                      original_exercise_id=row.original_exercise_id, trigger_event=row.trigger_event,
                                      was_accepted=row.was_accepted, feedback_score=row.feedback_score,
                                      responded_at=row.responded_at, )

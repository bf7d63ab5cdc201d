"""
Exercise recommendation repository.

Handles database operations for :class:`ExerciseRecommendation`,
including the accept/reject counts that tune future confidence.
"""

from typing import Optional

from sqlalchemy import case, func
from sqlmodel import Session, select

from athletica.models.recommendation import ExerciseRecommendation
from athletica.schemas.adaptive import FeedbackStats


class RecommendationRepository:
    """Repository for ExerciseRecommendation database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, entry: ExerciseRecommendation) -> ExerciseRecommendation:
        self.session.add(entry)
        return entry

    def get_by_id(self, entry_id: int) -> Optional[ExerciseRecommendation]:
        return self.session.get(ExerciseRecommendation, entry_id)

    def feedback_stats(self, user_id: str, original_exercise_id: str) -> dict[str, FeedbackStats]:
        """Answered recommendations per recommended exercise for this original."""
        accepted = func.sum(case((ExerciseRecommendation.was_accepted.is_(True), 1), else_=0))
        statement = (select(ExerciseRecommendation.recommended_exercise_id, func.count(), accepted).where(
            ExerciseRecommendation.user_id == user_id,
            ExerciseRecommendation.original_exercise_id == original_exercise_id,
            ExerciseRecommendation.was_accepted.is_not(None), ).group_by(
            ExerciseRecommendation.recommended_exercise_id))
        return {row[0]: FeedbackStats(responses=int(row[1]), accepted=int(row[2] or 0)) for row in
                self.session.exec(statement).all()}

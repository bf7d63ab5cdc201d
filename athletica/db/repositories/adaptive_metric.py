"""
Adaptive metric repository.

Handles database operations for :class:`AdaptiveUserMetric`.
"""

from typing import Optional

from sqlmodel import Session, select

from athletica.models.adaptive_metric import AdaptiveUserMetric


class AdaptiveMetricRepository:
    """Repository for AdaptiveUserMetric database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, entry: AdaptiveUserMetric) -> AdaptiveUserMetric:
        self.session.add(entry)
        return entry

    def get(self, user_id: str, exercise_id: str) -> Optional[AdaptiveUserMetric]:
        statement = select(AdaptiveUserMetric).where(AdaptiveUserMetric.user_id == user_id,
                                                     AdaptiveUserMetric.exercise_id == exercise_id, )
        return self.session.exec(statement).first()

    def list_by_user(self, user_id: str) -> list[AdaptiveUserMetric]:
        statement = (select(AdaptiveUserMetric).where(AdaptiveUserMetric.user_id == user_id).order_by(
            AdaptiveUserMetric.exercise_id))
        return list(self.session.exec(statement).all())

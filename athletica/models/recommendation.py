"""
Exercise recommendation model.

Immutable once issued; the response fields are written once when the
user accepts or rejects the suggestion.
"""

import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class ExerciseRecommendation(SQLModel, table=True):
    """An engine-issued alternative/progression/regression suggestion."""

    __tablename__ = "exercise_recommendations"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(nullable=False, max_length=64, index=True)
    session_id: Optional[int] = Field(default=None, foreign_key="workout_sessions.id", ondelete="SET NULL")
    original_exercise_id: str = Field(nullable=False, max_length=100, index=True)
    recommended_exercise_id: str = Field(nullable=False, max_length=100)

    # alternative | progression | regression | similar
    recommendation_type: str = Field(nullable=False, max_length=20)
    reason: str = Field(nullable=False, max_length=255)
    trigger_event: str = Field(nullable=False, max_length=30)
    confidence: float = Field(nullable=False)
    model_version: str = Field(default="v1", nullable=False, max_length=20)

    # User response
    was_shown: bool = Field(default=True, nullable=False)
    was_accepted: Optional[bool] = Field(default=None)
    feedback_score: Optional[int] = Field(default=None)
    user_feedback: Optional[str] = Field(default=None, max_length=500)
    responded_at: Optional[datetime.datetime] = Field(default=None)

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

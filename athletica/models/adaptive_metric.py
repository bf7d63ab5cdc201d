"""
Adaptive per-(user, exercise) metric model.

Historical learning state updated after every completed session.
Rows are never deleted by the engine.
"""

import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class AdaptiveUserMetric(SQLModel, table=True):
    """Learned statistics for one user on one exercise."""

    __tablename__ = "adaptive_user_metrics"
    __table_args__ = (UniqueConstraint("user_id", "exercise_id", name="uq_adaptive_metric_user_exercise"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(nullable=False, max_length=64, index=True)
    exercise_id: str = Field(nullable=False, max_length=100, index=True)

    # Rest
    preferred_rest_seconds: int = Field(default=90, nullable=False)
    rest_seconds_variance: float = Field(default=0.0, nullable=False)

    # Reps / strength
    optimal_rep_range_min: Optional[int] = Field(default=None)
    optimal_rep_range_max: Optional[int] = Field(default=None)
    last_1rm_estimate_kg: Optional[float] = Field(default=None)
    strength_progression_rate: Optional[float] = Field(default=None)

    # Lifetime counters
    total_volume_lifetime_kg: float = Field(default=0.0, nullable=False)
    total_sessions: int = Field(default=0, nullable=False)
    total_sets: int = Field(default=0, nullable=False)
    total_reps: int = Field(default=0, nullable=False)

    # Running averages
    average_rpe: Optional[float] = Field(default=None)
    average_form_quality: Optional[float] = Field(default=None)
    consistency_score: Optional[float] = Field(default=None)

    # Skips
    times_planned: int = Field(default=0, nullable=False)
    times_skipped: int = Field(default=0, nullable=False)
    skip_rate: float = Field(default=0.0, nullable=False)

    model_version: str = Field(default="v1", nullable=False, max_length=20)
    confidence_score: float = Field(default=0.5, nullable=False)
    last_calculated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

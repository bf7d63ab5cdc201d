"""
Session analytics snapshot model.

Created exactly once when a session completes and never updated.
Aggregates are stored as individual columns so history queries can
compare sessions without decoding JSON.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class SessionAnalytics(SQLModel, table=True):
    """Frozen analytics for one completed session."""

    __tablename__ = "session_analytics"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="workout_sessions.id", ondelete="CASCADE", nullable=False, unique=True,
                            index=True)
    user_id: str = Field(nullable=False, max_length=64, index=True)
    workout_id: str = Field(nullable=False, max_length=100, index=True)

    # Volume
    total_volume_kg: float = Field(default=0.0, nullable=False)
    volume_per_exercise: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False), )
    average_weight_kg: Optional[float] = Field(default=None)
    total_reps: int = Field(default=0, nullable=False)
    total_sets: int = Field(default=0, nullable=False)
    average_reps_per_set: Optional[float] = Field(default=None)

    # Intensity
    average_intensity: float = Field(default=0.5, nullable=False)
    average_rpe: Optional[float] = Field(default=None)

    # Time
    total_duration_seconds: int = Field(default=0, nullable=False)
    active_duration_seconds: int = Field(default=0, nullable=False)
    time_under_tension_seconds: int = Field(default=0, nullable=False)
    average_rest_seconds: Optional[float] = Field(default=None)
    work_to_rest_ratio: Optional[float] = Field(default=None)

    # Energy
    calories_burned: int = Field(default=0, nullable=False)
    calorie_calculation_method: str = Field(default="mets_blended", nullable=False, max_length=30)

    # Score
    performance_score: int = Field(default=50, nullable=False)
    score_breakdown: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False), )
    degraded_factors: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False), )

    # Quality
    average_form_quality: Optional[float] = Field(default=None)
    exercises_with_poor_form: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False), )
    completion_rate: float = Field(default=0.0, nullable=False)
    exercises_skipped: int = Field(default=0, nullable=False)
    sets_to_failure: int = Field(default=0, nullable=False)

    # Comparison / recovery
    vs_previous_session: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False), )
    recovery_estimate_hours: int = Field(default=24, nullable=False)
    insights: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False), )

    calculated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

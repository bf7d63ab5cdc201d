"""
Exercise log database model.

One row per planned exercise within a session, created when the
session's workout plan is loaded.
"""

import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class ExerciseLog(SQLModel, table=True):
    """Planned vs realised work for one exercise of a session."""

    __tablename__ = "exercise_logs"
    __table_args__ = (UniqueConstraint("session_id", "order_index", name="uq_exercise_log_session_order"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="workout_sessions.id", ondelete="CASCADE", nullable=False, index=True)
    exercise_id: str = Field(nullable=False, max_length=100, index=True)
    order_index: int = Field(nullable=False)

    # pending | in_progress | completed | skipped | failed
    status: str = Field(default="pending", nullable=False, max_length=20)

    # Targets (from the workout plan)
    target_sets: int = Field(default=3, nullable=False)
    target_reps: Optional[int] = Field(default=None)
    target_weight_kg: Optional[float] = Field(default=None)
    target_duration_seconds: Optional[int] = Field(default=None)
    target_rest_seconds: int = Field(default=90, nullable=False)

    # Realised totals
    completed_sets: int = Field(default=0, nullable=False)
    total_volume_kg: float = Field(default=0.0, nullable=False)
    total_reps: int = Field(default=0, nullable=False)
    average_rpe: Optional[float] = Field(default=None)
    peak_rpe: Optional[int] = Field(default=None)
    form_quality_average: Optional[float] = Field(default=None)

    # Skip metadata
    skip_reason: Optional[str] = Field(default=None, max_length=50)
    skip_notes: Optional[str] = Field(default=None, max_length=1000)
    alternative_exercise_id: Optional[str] = Field(default=None, max_length=100)
    alternative_was_completed: bool = Field(default=False, nullable=False)

    started_at: Optional[datetime.datetime] = Field(default=None)
    completed_at: Optional[datetime.datetime] = Field(default=None)
    duration_seconds: Optional[int] = Field(default=None)

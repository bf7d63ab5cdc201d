"""
Set log database model.

Append-only child of :class:`~athletica.models.exercise_log.ExerciseLog`.
"""

import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class SetLog(SQLModel, table=True):
    """One completed (or attempted) set."""

    __tablename__ = "set_logs"
    __table_args__ = (UniqueConstraint("exercise_log_id", "set_number", name="uq_set_log_exercise_set"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    exercise_log_id: int = Field(foreign_key="exercise_logs.id", ondelete="CASCADE", nullable=False, index=True)
    set_number: int = Field(nullable=False)
    # working | warmup | drop | failure
    set_type: str = Field(default="working", nullable=False, max_length=20)

    reps_target: Optional[int] = Field(default=None)
    reps_completed: int = Field(default=0, nullable=False)
    weight_kg: Optional[float] = Field(default=None)

    duration_target_seconds: Optional[int] = Field(default=None)
    duration_actual_seconds: Optional[int] = Field(default=None)

    rest_target_seconds: Optional[int] = Field(default=None)
    rest_actual_seconds: Optional[int] = Field(default=None)
    rest_quality: Optional[int] = Field(default=None)

    rpe: Optional[int] = Field(default=None)
    form_quality: Optional[int] = Field(default=None)
    was_failure: bool = Field(default=False, nullable=False)
    tempo: Optional[str] = Field(default=None, max_length=20)
    time_under_tension_seconds: Optional[int] = Field(default=None)
    notes: Optional[str] = Field(default=None, max_length=500)

    started_at: Optional[datetime.datetime] = Field(default=None)
    completed_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

"""
Workout session database model.

One row per workout attempt.  The lifecycle columns (``state``,
``current_phase``, position indexes) are owned by the session state
machine; running totals are maintained incrementally as sets are
logged so live reads never need to aggregate the set logs.
"""

import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class WorkoutSession(SQLModel, table=True):
    """A single workout attempt by a user.

    ``pause_intervals`` is an ordered list of
    ``{paused_at, resumed_at, duration_seconds}`` dicts; the last entry
    has ``resumed_at = None`` while the session is paused.  ``realtime``
    holds the versioned snapshot used for optimistic client sync.
    """

    __tablename__ = "workout_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(nullable=False, max_length=64, index=True)
    workout_id: str = Field(nullable=False, max_length=100, index=True)

    # Lifecycle
    state: str = Field(default="idle", nullable=False, max_length=20, index=True)
    current_phase: Optional[str] = Field(default=None, max_length=20)
    current_exercise_index: int = Field(default=0, nullable=False)
    current_set_index: int = Field(default=0, nullable=False)
    phase_started_at: Optional[datetime.datetime] = Field(default=None)
    has_warmup: bool = Field(default=False, nullable=False)

    scheduled_at: Optional[datetime.datetime] = Field(default=None)
    started_at: Optional[datetime.datetime] = Field(default=None)
    completed_at: Optional[datetime.datetime] = Field(default=None, index=True)
    cancelled_at: Optional[datetime.datetime] = Field(default=None)

    # Pause bookkeeping
    paused_at: Optional[datetime.datetime] = Field(default=None)
    resumed_at: Optional[datetime.datetime] = Field(default=None)
    paused_from_state: Optional[str] = Field(default=None, max_length=20)
    total_paused_seconds: int = Field(default=0, nullable=False)
    pause_intervals: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False), )

    # Duration breakdown
    total_duration_seconds: int = Field(default=0, nullable=False)
    active_duration_seconds: int = Field(default=0, nullable=False)
    warmup_duration_seconds: int = Field(default=0, nullable=False)
    cooldown_duration_seconds: int = Field(default=0, nullable=False)

    # Running totals
    total_exercises: int = Field(default=0, nullable=False)
    total_sets: int = Field(default=0, nullable=False)
    exercises_completed: int = Field(default=0, nullable=False)
    sets_completed: int = Field(default=0, nullable=False)
    total_volume_kg: float = Field(default=0.0, nullable=False)
    total_reps: int = Field(default=0, nullable=False)
    calories_burned: int = Field(default=0, nullable=False)
    completion_percentage: float = Field(default=0.0, nullable=False)
    performance_score: Optional[int] = Field(default=None)

    # Rest bookkeeping (consistency scoring)
    rest_target_seconds: Optional[int] = Field(default=None)
    rest_periods_skipped: int = Field(default=0, nullable=False)
    rest_shortfall_seconds: int = Field(default=0, nullable=False)

    # Versioned realtime snapshot
    realtime: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False), )

    # Post-hoc feedback (1-5)
    difficulty_rating: Optional[int] = Field(default=None)
    energy_level: Optional[int] = Field(default=None)
    mood_rating: Optional[int] = Field(default=None)
    notes: Optional[str] = Field(default=None, max_length=1000)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

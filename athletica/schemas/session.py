"""
Workout session API schemas.
"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from athletica.schemas.achievement import UnlockedAchievement
from athletica.schemas.analytics import SessionSummary
from athletica.schemas.realtime import RealtimeSnapshot
from athletica.schemas.set_log import SetLogResponse

SkipReason = Literal["injury", "equipment", "difficulty", "preference", "time", "fatigue", "other"]


class SessionCreate(BaseModel):
    """Schema for creating a session from a workout plan."""

    workout_id: str = Field(..., description="Workout plan identifier, e.g. 'full_body_foundation'")
    scheduled_at: Optional[datetime.datetime] = None


class CompleteExerciseRequest(BaseModel):
    exercise_log_id: Optional[int] = Field(None, description="Defaults to the current exercise")


class SkipExerciseRequest(BaseModel):
    """Skip an exercise, keeping the reason for later learning."""

    exercise_log_id: Optional[int] = Field(None, description="Defaults to the current exercise")
    reason: SkipReason
    notes: Optional[str] = Field(None, max_length=1000)
    alternative_exercise_id: Optional[str] = Field(None, max_length=100)


class StartRestRequest(BaseModel):
    target_seconds: Optional[int] = Field(None, ge=0, le=600,
                                          description="Rest target; the adaptive recommendation is used if omitted")


class SessionFeedback(BaseModel):
    """Post-session subjective ratings."""

    difficulty_rating: Optional[int] = Field(None, ge=1, le=5)
    energy_level: Optional[int] = Field(None, ge=1, le=5)
    mood_rating: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = Field(None, max_length=1000)


class PauseInterval(BaseModel):
    paused_at: datetime.datetime
    resumed_at: Optional[datetime.datetime] = None
    duration_seconds: int = 0


class ExerciseLogResponse(BaseModel):
    """Schema for an exercise log in API responses."""

    id: int
    exercise_id: str
    order_index: int
    status: str
    target_sets: int
    target_reps: Optional[int]
    target_weight_kg: Optional[float]
    target_duration_seconds: Optional[int]
    target_rest_seconds: int
    completed_sets: int
    total_volume_kg: float
    total_reps: int
    average_rpe: Optional[float]
    peak_rpe: Optional[int]
    form_quality_average: Optional[float]
    skip_reason: Optional[str]
    skip_notes: Optional[str]
    alternative_exercise_id: Optional[str]
    alternative_was_completed: bool
    started_at: Optional[datetime.datetime]
    completed_at: Optional[datetime.datetime]
    duration_seconds: Optional[int]
    sets: list[SetLogResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class CompletionResult(BaseModel):
    """Side results of the completion pipeline."""

    summary: SessionSummary
    new_achievements: list[UnlockedAchievement] = Field(default_factory=list)


class SessionResponse(BaseModel):
    """Schema for a workout session in API responses."""

    id: int
    user_id: str
    workout_id: str
    state: str
    current_phase: Optional[str]
    current_exercise_index: int
    current_set_index: int

    scheduled_at: Optional[datetime.datetime]
    started_at: Optional[datetime.datetime]
    completed_at: Optional[datetime.datetime]
    cancelled_at: Optional[datetime.datetime]
    paused_at: Optional[datetime.datetime]
    resumed_at: Optional[datetime.datetime]
    total_paused_seconds: int
    pause_intervals: list[PauseInterval]

    total_duration_seconds: int
    active_duration_seconds: int
    warmup_duration_seconds: int
    cooldown_duration_seconds: int

    total_exercises: int
    total_sets: int
    exercises_completed: int
    sets_completed: int
    total_volume_kg: float
    total_reps: int
    calories_burned: int
    completion_percentage: float
    performance_score: Optional[int]

    rest_target_seconds: Optional[int]
    rest_periods_skipped: int
    rest_shortfall_seconds: int

    difficulty_rating: Optional[int]
    energy_level: Optional[int]
    mood_rating: Optional[int]
    notes: Optional[str]

    realtime: RealtimeSnapshot
    exercises: list[ExerciseLogResponse] = Field(default_factory=list)
    completion: Optional[CompletionResult] = None

    created_at: datetime.datetime
    updated_at: datetime.datetime

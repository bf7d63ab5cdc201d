"""
Analytics schemas.

Live stats are advisory and recomputed on demand; the session summary
is frozen at completion and backed by a ``session_analytics`` row.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field

from athletica.schemas.set_log import SetLogResponse


class ScoreBreakdown(BaseModel):
    """The six weighted factors of the performance score (each 0-100)."""

    completion: float = Field(..., ge=0.0, le=100.0)
    volume: float = Field(..., ge=0.0, le=100.0)
    intensity: float = Field(..., ge=0.0, le=100.0)
    consistency: float = Field(..., ge=0.0, le=100.0)
    efficiency: float = Field(..., ge=0.0, le=100.0)
    progression: float = Field(..., ge=0.0, le=100.0)


class PerformanceScore(BaseModel):
    """Weighted performance score with its sub-scores."""

    score: int = Field(..., ge=0, le=100)
    breakdown: ScoreBreakdown
    degraded_factors: list[str] = Field(default_factory=list,
                                        description="Factors that fell back to their neutral default")


class PreviousSessionStats(BaseModel):
    """The comparable prior session used for deltas and volume progress."""

    session_id: int
    completed_at: Optional[datetime.datetime]
    total_volume_kg: float
    active_duration_seconds: int
    performance_score: Optional[int]


class SessionComparison(BaseModel):
    """Percent deltas versus the previous comparable session."""

    has_previous: bool = False
    previous_session_id: Optional[int] = None
    volume_change_percent: float = 0.0
    duration_change_percent: float = 0.0
    performance_change_percent: float = 0.0


class LiveStats(BaseModel):
    """Live session statistics."""

    session_id: int
    state: str
    computed_at: datetime.datetime

    elapsed_seconds: int
    active_seconds: int
    paused_seconds: int

    total_volume_kg: float
    total_reps: int
    sets_completed: int
    total_sets: int
    exercises_completed: int
    total_exercises: int

    average_rpe: Optional[float]
    average_intensity: float = Field(..., ge=0.0, le=1.0)
    estimated_calories: int
    completion_percentage: float = Field(..., description="Exercises completed over planned")
    sets_completion_percentage: float = Field(..., description="Sets completed over planned")
    estimated_remaining_seconds: int

    performance: PerformanceScore
    vs_previous_session_percent: float = 0.0


class ExerciseBreakdown(BaseModel):
    """Per-exercise result inside a session summary."""

    exercise_log_id: int
    exercise_id: str
    order_index: int
    status: str
    target_sets: int
    completed_sets: int
    completion_ratio: float
    total_volume_kg: float
    total_reps: int
    average_rpe: Optional[float]
    form_quality_average: Optional[float]
    sets: list[SetLogResponse] = Field(default_factory=list)


class SessionInsights(BaseModel):
    """Narrative feedback generated at completion."""

    volume_trend: str = Field(..., description="increasing, decreasing or stable")
    intensity_level: str = Field(..., description="high, moderate or low")
    intensity_recommendation: str
    form_issues: list[str] = Field(default_factory=list, description="Exercise ids with average form below 3")
    improvement_tips: list[str] = Field(default_factory=list)
    next_workout_recommendation: str
    rest_day_suggested: bool
    progress_notes: list[str] = Field(default_factory=list)


class SessionSummary(BaseModel):
    """Frozen summary of a completed session."""

    session_id: int
    user_id: str
    workout_id: str
    completed_at: Optional[datetime.datetime]

    total_duration_seconds: int
    active_duration_seconds: int
    paused_seconds: int

    total_volume_kg: float
    total_reps: int
    total_sets: int
    average_reps_per_set: Optional[float]
    average_weight_kg: Optional[float]
    average_rpe: Optional[float]
    average_intensity: float
    time_under_tension_seconds: int
    average_rest_seconds: Optional[float]
    work_to_rest_ratio: Optional[float]
    calories_burned: int

    completion_percentage: float
    completion_rate: float = Field(..., description="Sets completed over planned, 0-100")
    exercises_skipped: int
    sets_to_failure: int
    average_form_quality: Optional[float]
    exercises_with_poor_form: list[str] = Field(default_factory=list)

    performance: PerformanceScore
    comparison: SessionComparison
    recovery_estimate_hours: int
    insights: SessionInsights
    exercises: list[ExerciseBreakdown] = Field(default_factory=list)
    calculated_at: datetime.datetime

"""
Adaptive engine schemas: rest recommendation, exercise suggestions,
one-rep-max estimates and the learned per-exercise metrics.
"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

TrainingGoal = Literal["strength", "hypertrophy", "endurance"]
RecommendationTrigger = Literal["skipped", "low_form", "injury", "preference"]
RecommendationType = Literal["alternative", "progression", "regression", "similar"]


class RestFactors(BaseModel):
    """Multiplicative factors applied to the base rest time."""

    difficulty: float
    fatigue: float
    historical: float


class RestRecommendation(BaseModel):
    """Adaptive rest duration for the next set."""

    exercise_id: str
    set_number: int
    recommended_seconds: int = Field(..., ge=30, le=300)
    base_seconds: int
    factors: RestFactors
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str = Field(..., description="e.g. 'Base: 90s • +20% (RPE 9) • +12% (set 3)'")


class ExerciseSuggestion(BaseModel):
    """A ranked candidate produced by the recommendation scorer."""

    exercise_id: str
    display_name: str
    recommendation_type: RecommendationType
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str
    benefits: list[str] = Field(default_factory=list)
    difficulty_comparison: Literal["easier", "same", "harder"]


class RecommendationRequest(BaseModel):
    """Ask for alternatives to an exercise."""

    exercise_id: str
    trigger: RecommendationTrigger = "preference"
    session_id: Optional[int] = Field(None, description="Session the request was made from, if any")


class RecommendationResponse(ExerciseSuggestion):
    """A persisted suggestion, as returned to the client."""

    id: int
    original_exercise_id: str
    trigger_event: str
    was_accepted: Optional[bool] = None
    feedback_score: Optional[int] = None
    responded_at: Optional[datetime.datetime] = None


class RecommendationFeedback(BaseModel):
    """User response to a recommendation (recorded once)."""

    accepted: bool
    feedback_score: Optional[int] = Field(None, ge=1, le=5)
    feedback: Optional[str] = Field(None, max_length=500)


class FeedbackStats(BaseModel):
    """Past responses for one (original, recommended) pair."""

    responses: int = 0
    accepted: int = 0

    @property
    def accept_rate(self) -> float:
        return self.accepted / self.responses if self.responses else 0.5


class OneRepMaxEstimate(BaseModel):
    """Median-of-Epley one-rep-max estimate."""

    exercise_id: str
    estimated_1rm_kg: float = Field(..., ge=0.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    sample_size: int = 0


class AdaptiveMetricResponse(BaseModel):
    """Learned per-(user, exercise) metric."""

    user_id: str
    exercise_id: str
    preferred_rest_seconds: int
    rest_seconds_variance: float
    optimal_rep_range_min: Optional[int]
    optimal_rep_range_max: Optional[int]
    last_1rm_estimate_kg: Optional[float]
    strength_progression_rate: Optional[float]
    total_volume_lifetime_kg: float
    total_sessions: int
    total_sets: int
    total_reps: int
    average_rpe: Optional[float]
    average_form_quality: Optional[float]
    consistency_score: Optional[float]
    times_planned: int
    times_skipped: int
    skip_rate: float
    model_version: str
    confidence_score: float
    last_calculated_at: datetime.datetime

    class Config:
        from_attributes = True

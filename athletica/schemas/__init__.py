"""Pydantic schemas for request/response validation."""

from athletica.schemas.realtime import RealtimeSnapshot
from athletica.schemas.set_log import SetCreate, SetLogResponse
from athletica.schemas.analytics import (
    LiveStats,
    PerformanceScore,
    PreviousSessionStats,
    ScoreBreakdown,
    SessionComparison,
    SessionSummary,
)
from athletica.schemas.achievement import (
    AchievementContext,
    AchievementStats,
    LifetimeStats,
    UnlockedAchievement,
)
from athletica.schemas.adaptive import (
    OneRepMaxEstimate,
    RecommendationResponse,
    RestRecommendation,
)
from athletica.schemas.session import (
    SessionCreate,
    SessionFeedback,
    SessionResponse,
    SkipExerciseRequest,
)

__all__ = [
    "RealtimeSnapshot",
    "SetCreate",
    "SetLogResponse",
    "LiveStats",
    "PerformanceScore",
    "PreviousSessionStats",
    "ScoreBreakdown",
    "SessionComparison",
    "SessionSummary",
    "AchievementContext",
    "AchievementStats",
    "LifetimeStats",
    "UnlockedAchievement",
    "OneRepMaxEstimate",
    "RecommendationResponse",
    "RestRecommendation",
    "SessionCreate",
    "SessionFeedback",
    "SessionResponse",
    "SkipExerciseRequest",
]

"""
Achievement schemas.

:class:`AchievementContext` is the only input of the rule evaluator;
it is assembled from a finished session plus lifetime counters.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field


class LifetimeStats(BaseModel):
    """Lifetime counters including the session being evaluated."""

    workout_count: int = Field(0, ge=0)
    current_streak_days: int = Field(0, ge=0)
    total_volume_kg: float = Field(0.0, ge=0.0)
    total_reps: int = Field(0, ge=0)


class AchievementContext(BaseModel):
    """Flat view of one session and the user's lifetime stats."""

    sets_completed: int = 0
    sets_skipped: int = 0
    average_effort: Optional[float] = Field(None, description="Average RPE, None if no set was rated")
    rest_periods_skipped: int = 0
    all_sets_good_form: bool = False
    duration: int = Field(0, description="Active duration in seconds")
    estimated_duration: int = Field(0, description="Planned duration in seconds")
    lifetime_workout_count: int = 0
    current_streak_days: int = 0
    lifetime_volume: float = 0.0
    lifetime_reps: int = 0
    start_time: Optional[datetime.datetime] = None


class UnlockedAchievement(BaseModel):
    """One achievement produced by an evaluation pass."""

    achievement_id: str
    title: str
    description: str
    icon: str
    category: str
    rarity: str
    points: int
    unlocked_at: datetime.datetime


class AchievementEvaluateRequest(BaseModel):
    """Evaluate achievements for a completed session.

    ``lifetime_stats`` is derived from the user's completed sessions
    when omitted.
    """

    session_id: int
    lifetime_stats: Optional[LifetimeStats] = None


class AchievementUnlockResponse(BaseModel):
    """A persisted unlock."""

    achievement_id: str
    title: str
    category: str
    rarity: str
    points: int
    session_id: Optional[int]
    unlocked_at: datetime.datetime

    class Config:
        from_attributes = True


class AchievementStats(BaseModel):
    """Per-user achievement totals."""

    total_unlocked: int
    total_available: int
    total_points: int
    by_rarity: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)


class AchievementDefinitionResponse(BaseModel):
    """Static achievement metadata (rules are not exposed)."""

    id: str
    title: str
    description: str
    icon: str
    category: str
    rarity: str
    points: int

"""SQLModel database models."""

from athletica.models.workout_session import WorkoutSession
from athletica.models.exercise_log import ExerciseLog
from athletica.models.set_log import SetLog
from athletica.models.adaptive_metric import AdaptiveUserMetric
from athletica.models.recommendation import ExerciseRecommendation
from athletica.models.session_analytics import SessionAnalytics
from athletica.models.achievement_unlock import AchievementUnlock

__all__ = [
    "WorkoutSession",
    "ExerciseLog",
    "SetLog",
    "AdaptiveUserMetric",
    "ExerciseRecommendation",
    "SessionAnalytics",
    "AchievementUnlock",
]

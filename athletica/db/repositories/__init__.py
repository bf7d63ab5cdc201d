"""Database repositories."""

from athletica.db.repositories.workout_session import WorkoutSessionRepository
from athletica.db.repositories.exercise_log import ExerciseLogRepository
from athletica.db.repositories.set_log import SetLogRepository
from athletica.db.repositories.adaptive_metric import AdaptiveMetricRepository
from athletica.db.repositories.recommendation import RecommendationRepository
from athletica.db.repositories.session_analytics import SessionAnalyticsRepository
from athletica.db.repositories.achievement_unlock import AchievementUnlockRepository

__all__ = [
    "WorkoutSessionRepository",
    "ExerciseLogRepository",
    "SetLogRepository",
    "AdaptiveMetricRepository",
    "RecommendationRepository",
    "SessionAnalyticsRepository",
    "AchievementUnlockRepository",
]

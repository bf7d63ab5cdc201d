"""
Base database configuration.

Import all models here so Alembic can detect them for migrations.
"""

# Import all models for Alembic autogenerate
from athletica.models.workout_session import WorkoutSession  # noqa: F401
from athletica.models.exercise_log import ExerciseLog  # noqa: F401
from athletica.models.set_log import SetLog  # noqa: F401
from athletica.models.adaptive_metric import AdaptiveUserMetric  # noqa: F401
from athletica.models.recommendation import ExerciseRecommendation  # noqa: F401
from athletica.models.session_analytics import SessionAnalytics  # noqa: F401
from athletica.models.achievement_unlock import AchievementUnlock  # noqa: F401

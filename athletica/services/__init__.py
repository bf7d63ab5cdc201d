"""Business logic services."""

from athletica.services.analytics_service import AnalyticsService
from athletica.services.adaptive_service import AdaptiveService
from athletica.services.achievement_service import AchievementService
from athletica.services.session_service import SessionService

__all__ = [
    "AnalyticsService",
    "AdaptiveService",
    "AchievementService",
    "SessionService",
]

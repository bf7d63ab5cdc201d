"""
Session analytics repository.

Handles database operations for :class:`SessionAnalytics` (one frozen
row per completed session).
"""

from typing import Optional

from sqlmodel import Session, select

from athletica.models.session_analytics import SessionAnalytics


class SessionAnalyticsRepository:
    """Repository for SessionAnalytics database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, entry: SessionAnalytics) -> SessionAnalytics:
        self.session.add(entry)
        return entry

    def get_by_session(self, session_id: int) -> Optional[SessionAnalytics]:
        statement = select(SessionAnalytics).where(SessionAnalytics.session_id == session_id)
        return self.session.exec(statement).first()

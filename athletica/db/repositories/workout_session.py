"""
Workout session repository.

Handles database operations for :class:`WorkoutSession`, including the
lifetime aggregates used by the achievement engine.
"""

import datetime
from typing import Optional

from sqlalchemy import and_, func, or_
from sqlmodel import Session, select

from athletica.models.workout_session import WorkoutSession

_COMPLETED = "completed"


class WorkoutSessionRepository:
    """Repository for WorkoutSession database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, entry: WorkoutSession) -> WorkoutSession:
        """Stage without committing (see :func:`~athletica.db.unit_of_work.unit_of_work`)."""
        self.session.add(entry)
        return entry

    def get_by_id(self, entry_id: int) -> Optional[WorkoutSession]:
        return self.session.get(WorkoutSession, entry_id)

    def list_by_user(self, user_id: str, state: Optional[str] = None, limit: int = 50,
                     offset: int = 0, ) -> list[WorkoutSession]:
        statement = select(WorkoutSession).where(WorkoutSession.user_id == user_id)
        if state is not None:
            statement = statement.where(WorkoutSession.state == state)
        statement = statement.order_by(WorkoutSession.created_at.desc(), WorkoutSession.id.desc()).offset(
            offset).limit(limit)
        return list(self.session.exec(statement).all())

    def get_previous_completed(self, entry: WorkoutSession) -> Optional[WorkoutSession]:
        """Most recent completed session of the same user and workout before *entry*."""
        statement = select(WorkoutSession).where(WorkoutSession.user_id == entry.user_id,
                                                 WorkoutSession.workout_id == entry.workout_id,
                                                 WorkoutSession.state == _COMPLETED,
                                                 WorkoutSession.id != entry.id, )
        if entry.completed_at is not None:
            statement = statement.where(or_(WorkoutSession.completed_at < entry.completed_at,
                                            and_(WorkoutSession.completed_at == entry.completed_at,
                                                 WorkoutSession.id < entry.id), ))
        statement = statement.order_by(WorkoutSession.completed_at.desc(), WorkoutSession.id.desc())
        return self.session.exec(statement).first()

    # ------------------------------------------------------------------
    # Lifetime aggregates
    # ------------------------------------------------------------------

    def count_completed_by_user(self, user_id: str) -> int:
        statement = (select(func.count()).select_from(WorkoutSession).where(WorkoutSession.user_id == user_id,
                                                                            WorkoutSession.state == _COMPLETED, ))
        return self.session.exec(statement).first() or 0

    def sum_completed_totals(self, user_id: str) -> tuple[float, int]:
        """Lifetime ``(volume_kg, reps)`` over completed sessions."""
        statement = select(func.coalesce(func.sum(WorkoutSession.total_volume_kg), 0.0),
                           func.coalesce(func.sum(WorkoutSession.total_reps), 0), ).where(
            WorkoutSession.user_id == user_id, WorkoutSession.state == _COMPLETED, )
        row = self.session.exec(statement).first()
        if row is None:
            return 0.0, 0
        return float(row[0]), int(row[1])

    def completed_dates(self, user_id: str, since: datetime.datetime) -> list[datetime.date]:
        """Distinct calendar dates (UTC) with a completed session since *since*."""
        statement = select(WorkoutSession.completed_at).where(WorkoutSession.user_id == user_id,
                                                              WorkoutSession.state == _COMPLETED,
                                                              WorkoutSession.completed_at >= since, )
        return sorted({ts.date() for ts in self.session.exec(statement).all() if ts is not None})

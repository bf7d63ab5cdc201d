"""
Set log repository.

Handles database operations for :class:`SetLog`.  Sets are append-only;
the per-user history query joins through the exercise log and session.
"""

from typing import Optional

from sqlmodel import Session, select

from athletica.models.exercise_log import ExerciseLog
from athletica.models.set_log import SetLog
from athletica.models.workout_session import WorkoutSession


class SetLogRepository:
    """Repository for SetLog database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, entry: SetLog) -> SetLog:
        self.session.add(entry)
        return entry

    def get_by_id(self, entry_id: int) -> Optional[SetLog]:
        return self.session.get(SetLog, entry_id)

    def list_by_exercise_log(self, exercise_log_id: int) -> list[SetLog]:
        statement = (select(SetLog).where(SetLog.exercise_log_id == exercise_log_id).order_by(SetLog.set_number))
        return list(self.session.exec(statement).all())

    def list_by_session(self, session_id: int) -> dict[int, list[SetLog]]:
        """All sets of a session grouped by exercise log id, in set order."""
        statement = (select(SetLog).join(ExerciseLog, SetLog.exercise_log_id == ExerciseLog.id).where(
            ExerciseLog.session_id == session_id).order_by(ExerciseLog.order_index, SetLog.set_number))
        grouped: dict[int, list[SetLog]] = {}
        for entry in self.session.exec(statement).all():
            grouped.setdefault(entry.exercise_log_id, []).append(entry)
        return grouped

    def get_recent_for_user_exercise(self, user_id: str, exercise_id: str, limit: int = 20) -> list[SetLog]:
        """Most recent sets of *exercise_id* across the user's sessions, newest first."""
        statement = (select(SetLog).join(ExerciseLog, SetLog.exercise_log_id == ExerciseLog.id).join(
            WorkoutSession, ExerciseLog.session_id == WorkoutSession.id).where(WorkoutSession.user_id == user_id,
                                                                               ExerciseLog.exercise_id == exercise_id,
                                                                               ).order_by(SetLog.completed_at.desc(),
                                                                                          SetLog.id.desc()).limit(limit))
        return list(self.session.exec(statement).all())

"""
Exercise log repository.

Handles database operations for :class:`ExerciseLog`.
"""

from typing import Optional

from sqlmodel import Session, select

from athletica.models.exercise_log import ExerciseLog


class ExerciseLogRepository:
    """Repository for ExerciseLog database operations."""

    def __init__(self, session: Session):
        self.session = session

    def add_all(self, entries: list[ExerciseLog]) -> list[ExerciseLog]:
        self.session.add_all(entries)
        return entries

    def get_by_id(self, entry_id: int) -> Optional[ExerciseLog]:
        return self.session.get(ExerciseLog, entry_id)

    def list_by_session(self, session_id: int) -> list[ExerciseLog]:
        statement = (select(ExerciseLog).where(ExerciseLog.session_id == session_id).order_by(ExerciseLog.order_index))
        return list(self.session.exec(statement).all())

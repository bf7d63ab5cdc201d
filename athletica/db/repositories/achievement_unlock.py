"""
Achievement unlock repository.

Handles database operations for :class:`AchievementUnlock`.  The unique
(user_id, achievement_id) constraint is the authority on duplicates;
:meth:`create_if_absent` turns a violation into :class:`DuplicateUnlock`.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from athletica.core.exceptions import DuplicateUnlock
from athletica.models.achievement_unlock import AchievementUnlock


class AchievementUnlockRepository:
    """Repository for AchievementUnlock database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str, achievement_id: str) -> Optional[AchievementUnlock]:
        statement = select(AchievementUnlock).where(AchievementUnlock.user_id == user_id,
                                                    AchievementUnlock.achievement_id == achievement_id, )
        return self.session.exec(statement).first()

    def create_if_absent(self, entry: AchievementUnlock) -> AchievementUnlock:
        """Insert the unlock, or raise :class:`DuplicateUnlock` if it exists.

        Runs in a savepoint so a lost race only discards this row.
        """
        if self.get(entry.user_id, entry.achievement_id) is not None:
            raise DuplicateUnlock(entry.user_id, entry.achievement_id)
        try:
            with self.session.begin_nested():
                self.session.add(entry)
        except IntegrityError as exc:
            raise DuplicateUnlock(entry.user_id, entry.achievement_id) from exc
        return entry

    def list_by_user(self, user_id: str) -> list[AchievementUnlock]:
        statement = (select(AchievementUnlock).where(AchievementUnlock.user_id == user_id).order_by(
            AchievementUnlock.unlocked_at.desc(), AchievementUnlock.id.desc()))
        return list(self.session.exec(statement).all())

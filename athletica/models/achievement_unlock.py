"""
Achievement unlock model.

Append-only; at most one row per (user, achievement).
"""

import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class AchievementUnlock(SQLModel, table=True):
    """A user's unlock of a static achievement definition."""

    __tablename__ = "achievement_unlocks"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="uq_achievement_unlock_user_achievement"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(nullable=False, max_length=64, index=True)
    achievement_id: str = Field(nullable=False, max_length=50)
    category: str = Field(nullable=False, max_length=20)
    rarity: str = Field(nullable=False, max_length=20)
    title: str = Field(nullable=False, max_length=100)
    points: int = Field(default=0, nullable=False)
    session_id: Optional[int] = Field(default=None, foreign_key="workout_sessions.id", ondelete="SET NULL")
    unlocked_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

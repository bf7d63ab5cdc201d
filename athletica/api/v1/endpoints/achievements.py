"""
Achievement endpoints.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from athletica.api.dependencies import get_current_user_id
from athletica.db.session import get_db
from athletica.schemas.achievement import (AchievementDefinitionResponse, AchievementEvaluateRequest, AchievementStats,
                                           AchievementUnlockResponse, UnlockedAchievement, )
from athletica.services.achievement_service import AchievementService

router = APIRouter()


@router.get("/definitions", summary="List every achievement that can be unlocked.",
            response_model=list[AchievementDefinitionResponse], )
def list_achievement_definitions():
    return AchievementService.list_definitions()


@router.post("/evaluate", summary="Evaluate achievements for a completed session (idempotent).",
             response_model=list[UnlockedAchievement], )
def evaluate_achievements(data: AchievementEvaluateRequest, db: Session = Depends(get_db),
                          user_id: str = Depends(get_current_user_id), ):
    """Returns only the achievements newly unlocked by this call."""
    return AchievementService(db).evaluate(user_id, data)


@router.get("", summary="List the user's unlocked achievements.", response_model=list[AchievementUnlockResponse], )
def list_achievements(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return AchievementService(db).list_unlocked(user_id)


@router.get("/stats", summary="Get achievement totals for the user.", response_model=AchievementStats, )
def get_achievement_stats(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return AchievementService(db).get_stats(user_id)

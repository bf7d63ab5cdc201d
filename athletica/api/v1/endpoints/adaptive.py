"""
Adaptive engine endpoints: rest time, exercise recommendations,
one-rep max and learned metrics.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from athletica.api.dependencies import get_current_user_id
from athletica.db.session import get_db
from athletica.schemas.adaptive import (AdaptiveMetricResponse, OneRepMaxEstimate, RecommendationFeedback,
                                        RecommendationRequest, RecommendationResponse, RestRecommendation,
                                        TrainingGoal, )
from athletica.services.adaptive_service import AdaptiveService

router = APIRouter()


@router.get("/rest", summary="Get the adaptive rest time before a set.", response_model=RestRecommendation, )
def get_adaptive_rest(exercise_id: str = Query(..., description="Exercise slug"),
                      set_number: int = Query(..., ge=1, le=50, description="Set about to be performed"),
                      rpe: Optional[int] = Query(None, ge=1, le=10, description="RPE of the previous set"),
                      goal: Optional[TrainingGoal] = Query(None, description="Training goal (hypertrophy if omitted)"),
                      db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return AdaptiveService(db).recommend_rest(user_id, exercise_id, set_number, rpe, goal)


@router.post("/recommendations", summary="Get up to three alternatives for an exercise.",
             response_model=list[RecommendationResponse], )
def get_exercise_recommendations(data: RecommendationRequest, db: Session = Depends(get_db),
                                 user_id: str = Depends(get_current_user_id), ):
    return AdaptiveService(db).recommend_exercises(user_id, data.exercise_id, data.trigger, data.session_id)


@router.post("/recommendations/{recommendation_id}/feedback", summary="Accept or reject a recommendation.",
             response_model=RecommendationResponse, )
def respond_to_recommendation(recommendation_id: int, data: RecommendationFeedback, db: Session = Depends(get_db),
                              user_id: str = Depends(get_current_user_id), ):
    return AdaptiveService(db).respond(user_id, recommendation_id, data)


@router.get("/one-rep-max/{exercise_id}", summary="Estimate the one-rep max from recent sets.",
            response_model=OneRepMaxEstimate, )
def estimate_one_rep_max(exercise_id: str, db: Session = Depends(get_db),
                         user_id: str = Depends(get_current_user_id), ):
    return AdaptiveService(db).estimate_one_rep_max(user_id, exercise_id)


@router.get("/metrics", summary="List learned per-exercise metrics.", response_model=list[AdaptiveMetricResponse], )
def list_exercise_metrics(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return AdaptiveService(db).get_metrics(user_id)


@router.get("/metrics/{exercise_id}", summary="Get learned metrics for one exercise.",
            response_model=AdaptiveMetricResponse, )
def get_exercise_metrics(exercise_id: str, db: Session = Depends(get_db),
                         user_id: str = Depends(get_current_user_id), ):
    return AdaptiveService(db).get_metrics(user_id, exercise_id)[0]

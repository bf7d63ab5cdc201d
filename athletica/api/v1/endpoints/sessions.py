"""
Workout session endpoints.

Lifecycle commands, the exercise/set flow, live stats and the
completion summary.  Every command returns the updated session.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from athletica.api.dependencies import get_current_user_id
from athletica.db.session import get_db
from athletica.schemas.analytics import LiveStats, SessionSummary
from athletica.schemas.session import (CompleteExerciseRequest, SessionCreate, SessionFeedback, SessionResponse,
                                       SkipExerciseRequest, StartRestRequest, )
from athletica.schemas.set_log import SetCreate
from athletica.services.analytics_service import AnalyticsService
from athletica.services.session_service import SessionService

router = APIRouter()


@router.post("", summary="Create a session from a workout plan.", response_model=SessionResponse,
             status_code=status.HTTP_201_CREATED, )
def create_session(data: SessionCreate, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).create(user_id, data)


@router.get("", summary="List the user's sessions, newest first.", response_model=list[SessionResponse], )
def list_sessions(state: Optional[str] = Query(None, description="Filter by lifecycle state"),
                  limit: int = Query(50, ge=1, le=200), offset: int = Query(0, ge=0), db: Session = Depends(get_db),
                  user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).list_sessions(user_id, state, limit, offset)


@router.get("/{session_id}", summary="Get a session with its exercises and sets.", response_model=SessionResponse, )
def get_session(session_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).get(user_id, session_id)


# ----------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------


@router.post("/{session_id}/start", summary="Start the session.", response_model=SessionResponse, )
def start_session(session_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).start(user_id, session_id)


@router.post("/{session_id}/pause", summary="Pause the session.", response_model=SessionResponse, )
def pause_session(session_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).pause(user_id, session_id)


@router.post("/{session_id}/resume", summary="Resume a paused session.", response_model=SessionResponse, )
def resume_session(session_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).resume(user_id, session_id)


@router.post("/{session_id}/complete", summary="Complete the session and freeze its summary.",
             response_model=SessionResponse, )
def complete_session(session_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).complete(user_id, session_id)


@router.post("/{session_id}/cancel", summary="Cancel the session.", response_model=SessionResponse, )
def cancel_session(session_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).cancel(user_id, session_id)


@router.post("/{session_id}/feedback", summary="Record post-session ratings.", response_model=SessionResponse, )
def submit_feedback(session_id: int, data: SessionFeedback, db: Session = Depends(get_db),
                    user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).submit_feedback(user_id, session_id, data)


# ----------------------------------------------------------------------
# Exercise and set flow
# ----------------------------------------------------------------------


@router.post("/{session_id}/exercises/{index}/start", summary="Start the exercise at a plan position.",
             response_model=SessionResponse, )
def start_exercise(session_id: int, index: int, db: Session = Depends(get_db),
                   user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).start_exercise(user_id, session_id, index)


@router.post("/{session_id}/exercises/complete", summary="End an exercise early as completed.",
             response_model=SessionResponse, )
def complete_exercise(session_id: int, data: Optional[CompleteExerciseRequest] = None, db: Session = Depends(get_db),
                      user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).complete_exercise(user_id, session_id, data or CompleteExerciseRequest())


@router.post("/{session_id}/exercises/skip", summary="Skip an exercise with a reason.",
             response_model=SessionResponse, )
def skip_exercise(session_id: int, data: SkipExerciseRequest, db: Session = Depends(get_db),
                  user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).skip_exercise(user_id, session_id, data)


@router.post("/{session_id}/sets", summary="Log a completed set.", response_model=SessionResponse,
             status_code=status.HTTP_201_CREATED, )
def complete_set(session_id: int, data: SetCreate, db: Session = Depends(get_db),
                 user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).complete_set(user_id, session_id, data)


@router.post("/{session_id}/rest/start", summary="Start a rest period.", response_model=SessionResponse, )
def start_rest(session_id: int, data: Optional[StartRestRequest] = None, db: Session = Depends(get_db),
               user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).start_rest(user_id, session_id, data or StartRestRequest())


@router.post("/{session_id}/rest/skip", summary="End the current rest early.", response_model=SessionResponse, )
def skip_rest(session_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).skip_rest(user_id, session_id)


@router.post("/{session_id}/cooldown", summary="Switch to the cooldown phase.", response_model=SessionResponse, )
def start_cooldown(session_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return SessionService(db).start_cooldown(user_id, session_id)


# ----------------------------------------------------------------------
# Analytics
# ----------------------------------------------------------------------


@router.get("/{session_id}/stats", summary="Get live session statistics (cached for a few seconds).",
            response_model=LiveStats, )
def get_live_stats(session_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id), ):
    return AnalyticsService(db).get_live_stats(user_id, session_id)


@router.get("/{session_id}/summary", summary="Get the summary of a completed session.",
            response_model=SessionSummary, )
def get_session_summary(session_id: int, db: Session = Depends(get_db),
                        user_id: str = Depends(get_current_user_id), ):
    return AnalyticsService(db).get_summary(user_id, session_id)

"""
Set log schemas.

Rating ranges are validated here, before anything reaches the state
machine: RPE 1-10, form and rest quality 1-5.
"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

SetType = Literal["working", "warmup", "drop", "failure"]


class SetCreate(BaseModel):
    """Data for one completed set."""

    exercise_log_id: Optional[int] = Field(None, description="Defaults to the current exercise")
    set_type: SetType = "working"
    reps_target: Optional[int] = Field(None, ge=0)
    reps_completed: int = Field(0, ge=0, le=1000)
    weight_kg: Optional[float] = Field(None, ge=0, le=1000)
    duration_target_seconds: Optional[int] = Field(None, ge=0)
    duration_actual_seconds: Optional[int] = Field(None, ge=0)
    rest_target_seconds: Optional[int] = Field(None, ge=0)
    rest_actual_seconds: Optional[int] = Field(None, ge=0)
    rest_quality: Optional[int] = Field(None, ge=1, le=5)
    rpe: Optional[int] = Field(None, ge=1, le=10, description="Rate of perceived exertion")
    form_quality: Optional[int] = Field(None, ge=1, le=5)
    was_failure: bool = False
    tempo: Optional[str] = Field(None, max_length=20, description="Eccentric-pause-concentric-pause, e.g. '3-1-2-0'")
    time_under_tension_seconds: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)
    started_at: Optional[datetime.datetime] = None
    next_rest_seconds: Optional[int] = Field(None, ge=0, le=600,
                                             description="Override for the rest that follows this set")


class SetLogResponse(BaseModel):
    """A persisted set."""

    id: int
    exercise_log_id: int
    set_number: int
    set_type: str
    reps_target: Optional[int]
    reps_completed: int
    weight_kg: Optional[float]
    duration_target_seconds: Optional[int]
    duration_actual_seconds: Optional[int]
    rest_target_seconds: Optional[int]
    rest_actual_seconds: Optional[int]
    rest_quality: Optional[int]
    rpe: Optional[int]
    form_quality: Optional[int]
    was_failure: bool
    tempo: Optional[str]
    time_under_tension_seconds: Optional[int]
    notes: Optional[str]
    started_at: Optional[datetime.datetime]
    completed_at: datetime.datetime

    class Config:
        from_attributes = True

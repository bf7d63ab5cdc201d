"""
Realtime session snapshot.

A versioned view of "what is happening now" used for optimistic client
sync.  ``version`` increases by one on every persisted mutation, so a
client holding version *n* knows it is stale as soon as it sees *n + 1*.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RealtimeSnapshot(BaseModel):
    """Typed realtime snapshot stored on the session row."""

    version: int = Field(0, ge=0, description="Monotonic sequence number")
    state: str = Field("idle", description="Lifecycle state")
    phase: Optional[str] = Field(None, description="warmup, working_set, rest or cooldown")
    current_exercise_index: int = Field(0, ge=0)
    current_exercise_id: Optional[str] = None
    current_set_number: int = Field(0, ge=0, description="Next set number on the current exercise")
    phase_started_at: Optional[datetime.datetime] = None
    rest_target_seconds: Optional[int] = None
    exercises_completed: int = 0
    sets_completed: int = 0
    total_reps_completed: int = 0
    total_volume_kg: float = 0.0
    estimated_calories: int = 0
    last_updated_at: Optional[datetime.datetime] = None

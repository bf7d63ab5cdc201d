"""Catalog listing schemas."""

from typing import Optional

from pydantic import BaseModel


class ExerciseInfo(BaseModel):
    exercise_id: str
    display_name: str
    category: str
    difficulty: str
    primary_muscles: list[str]
    equipment: Optional[str]


class WorkoutPlanInfo(BaseModel):
    workout_id: str
    display_name: str
    training_goal: str
    has_warmup: bool
    has_cooldown: bool
    total_exercises: int
    total_sets: int
    estimated_duration_seconds: int

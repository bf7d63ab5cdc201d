"""
Workout plans and the plan registry.

A :class:`WorkoutPlan` is the ordered list of planned exercises a
session is created from.  Plans are registered at import time via
:func:`WorkoutPlanRegistry.register` (see :mod:`athletica.catalog`).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator

# Fallback per-exercise duration when a plan has no explicit estimate.
SECONDS_PER_EXERCISE_ESTIMATE = 15 * 60


class PlannedExercise(BaseModel):
    """One exercise slot of a workout plan."""

    exercise_id: str
    sets: int = Field(3, ge=1, le=20)
    reps: Optional[int] = Field(None, ge=1, le=100)
    weight_kg: Optional[float] = Field(None, ge=0.0, le=1000.0)
    duration_seconds: Optional[int] = Field(None, ge=1, description="For timed exercises")
    rest_seconds: int = Field(90, ge=0, le=600)


class WorkoutPlan(BaseModel):
    """An ordered workout template."""

    workout_id: str = Field(..., description="Unique slug")
    display_name: str
    training_goal: str = Field("hypertrophy", description="strength, hypertrophy or endurance")
    has_warmup: bool = True
    has_cooldown: bool = False
    exercises: list[PlannedExercise] = Field(..., min_length=1)
    estimated_duration_seconds: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def _check_goal(self) -> "WorkoutPlan":
        if self.training_goal not in ("strength", "hypertrophy", "endurance"):
            raise ValueError(f"Unknown training goal '{self.training_goal}'")
        return self

    @property
    def total_sets(self) -> int:
        return sum(e.sets for e in self.exercises)

    @property
    def estimated_duration(self) -> int:
        """Planned duration in seconds (15 minutes per exercise by default)."""
        if self.estimated_duration_seconds:
            return self.estimated_duration_seconds
        return len(self.exercises) * SECONDS_PER_EXERCISE_ESTIMATE


class WorkoutPlanRegistry:
    """Singleton registry of available workout plans."""

    _plans: dict[str, WorkoutPlan] = {}

    @classmethod
    def register(cls, plan: WorkoutPlan) -> None:
        """Register a workout plan.

        Raises :class:`ValueError` if ``workout_id`` is already taken.
        """
        if plan.workout_id in cls._plans:
            raise ValueError(f"Workout '{plan.workout_id}' already registered")
        cls._plans[plan.workout_id] = plan

    @classmethod
    def get(cls, workout_id: str) -> Optional[WorkoutPlan]:
        """Get a plan by *workout_id*.  Returns ``None`` if not found."""
        return cls._plans.get(workout_id)

    @classmethod
    def all(cls) -> dict[str, WorkoutPlan]:
        """Return all registered plans as ``{workout_id: plan}``."""
        return dict(cls._plans)

    @classmethod
    def available_workout_ids(cls) -> list[str]:
        """Return sorted list of all registered ``workout_id`` values."""
        return sorted(cls._plans.keys())

    @classmethod
    def clear(cls) -> None:
        """Remove all plans.  Useful for testing."""
        cls._plans.clear()

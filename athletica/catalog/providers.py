"""Default implementations backed by the built-in tables."""

from typing import Optional

from athletica.catalog.base import ExerciseCatalog, WorkoutPlanProvider
from athletica.catalog.exercise_catalog import EXERCISE_CATALOG
from athletica.catalog.exercise_profile import ExerciseProfile
from athletica.catalog.plans import WorkoutPlan, WorkoutPlanRegistry


class BuiltinExerciseCatalog(ExerciseCatalog):
    """Exercise lookup over ``EXERCISE_CATALOG``."""

    def get(self, exercise_id: str) -> Optional[ExerciseProfile]:
        return EXERCISE_CATALOG.get(exercise_id)

    def in_category(self, category: str, exclude: Optional[str] = None,
                    limit: Optional[int] = None, ) -> list[ExerciseProfile]:
        matches = [p for p in EXERCISE_CATALOG.values() if p.category == category and p.exercise_id != exclude]
        return matches[:limit] if limit is not None else matches


class RegisteredPlanProvider(WorkoutPlanProvider):
    """Plan lookup over :class:`WorkoutPlanRegistry`."""

    def get_plan(self, workout_id: str) -> Optional[WorkoutPlan]:
        return WorkoutPlanRegistry.get(workout_id)

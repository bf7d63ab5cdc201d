"""
Interfaces to the read-only collaborators of the session engine.

The engine never owns exercise or workout definitions.  It reads them
through these two interfaces so a deployment can back them with a CMS,
a database or the built-in tables shipped in this package.
"""

from abc import ABC, abstractmethod
from typing import Optional

from athletica.catalog.exercise_profile import ExerciseProfile
from athletica.catalog.plans import WorkoutPlan


class ExerciseCatalog(ABC):
    """Read-only exercise lookup."""

    @abstractmethod
    def get(self, exercise_id: str) -> Optional[ExerciseProfile]:
        """Return the profile for *exercise_id*, or ``None``."""
        ...

    @abstractmethod
    def in_category(self, category: str, exclude: Optional[str] = None,
                    limit: Optional[int] = None, ) -> list[ExerciseProfile]:
        """Exercises of *category*, in catalog order, minus *exclude*."""
        ...


class WorkoutPlanProvider(ABC):
    """Supplies the ordered planned exercises of a workout."""

    @abstractmethod
    def get_plan(self, workout_id: str) -> Optional[WorkoutPlan]:
        """Return the plan for *workout_id*, or ``None``."""
        ...

"""
Exercise catalog and workout plans.

Import this module to register all built-in workout plans.
New plans are added by:
  1. Defining a :class:`WorkoutPlan` (see ``builtin_plans``)
  2. Adding a registration line below
"""

from athletica.catalog.builtin_plans import BUILTIN_PLANS
from athletica.catalog.plans import WorkoutPlanRegistry

# Register all built-in plans
for _plan in BUILTIN_PLANS:
    if WorkoutPlanRegistry.get(_plan.workout_id) is None:
        WorkoutPlanRegistry.register(_plan)

__all__ = ["WorkoutPlanRegistry"]

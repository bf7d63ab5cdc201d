"""
Read-only catalog endpoints: exercises and workout plans.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

# Ensure built-in plans are registered before the registry is used.
import athletica.catalog  # noqa: F401
from athletica.catalog.exercise_catalog import EXERCISE_CATALOG
from athletica.catalog.plans import WorkoutPlan, WorkoutPlanRegistry
from athletica.schemas.catalog import ExerciseInfo, WorkoutPlanInfo

router = APIRouter()


def _plan_info(plan: WorkoutPlan) -> WorkoutPlanInfo:
    return WorkoutPlanInfo(workout_id=plan.workout_id, display_name=plan.display_name,
                           training_goal=plan.training_goal, has_warmup=plan.has_warmup,
                           has_cooldown=plan.has_cooldown, total_exercises=len(plan.exercises),
                           total_sets=plan.total_sets, estimated_duration_seconds=plan.estimated_duration, )


@router.get("/exercises", summary="List catalog exercises.", response_model=list[ExerciseInfo], )
def list_exercises(category: Optional[str] = Query(None, description="Movement category filter")):
    return [ExerciseInfo(exercise_id=p.exercise_id, display_name=p.display_name, category=p.category,
                         difficulty=p.difficulty.value, primary_muscles=p.primary_muscles, equipment=p.equipment, )
            for p in EXERCISE_CATALOG.values() if category is None or p.category == category]


@router.get("/workouts", summary="List registered workout plans.", response_model=list[WorkoutPlanInfo], )
def list_workouts():
    return [_plan_info(WorkoutPlanRegistry.get(w)) for w in WorkoutPlanRegistry.available_workout_ids()]


@router.get("/workouts/{workout_id}", summary="Get one workout plan.", response_model=WorkoutPlanInfo, )
def get_workout(workout_id: str):
    plan = WorkoutPlanRegistry.get(workout_id)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                            detail=(f"Unknown workout: '{workout_id}'. "
                                    f"Available: {WorkoutPlanRegistry.available_workout_ids()}"), )
    return _plan_info(plan)

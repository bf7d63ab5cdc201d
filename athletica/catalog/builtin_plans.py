"""
Built-in workout plans.

Three reference templates, one per training goal.
"""

from athletica.catalog.plans import PlannedExercise, WorkoutPlan

FULL_BODY_FOUNDATION = WorkoutPlan(
    workout_id="full_body_foundation",
    display_name="Full Body Foundation",
    training_goal="hypertrophy",
    has_warmup=True,
    has_cooldown=True,
    exercises=[
        PlannedExercise(exercise_id="goblet_squat", sets=3, reps=12, weight_kg=20.0, rest_seconds=90),
        PlannedExercise(exercise_id="push_up", sets=3, reps=10, rest_seconds=90),
        PlannedExercise(exercise_id="dumbbell_row", sets=3, reps=12, weight_kg=18.0, rest_seconds=90),
    ],
    estimated_duration_seconds=45 * 60,
)

STRENGTH_UPPER_LOWER = WorkoutPlan(
    workout_id="strength_upper_lower",
    display_name="Strength: Upper / Lower",
    training_goal="strength",
    has_warmup=True,
    exercises=[
        PlannedExercise(exercise_id="back_squat", sets=5, reps=5, weight_kg=100.0, rest_seconds=180),
        PlannedExercise(exercise_id="bench_press", sets=5, reps=5, weight_kg=80.0, rest_seconds=180),
        PlannedExercise(exercise_id="barbell_row", sets=4, reps=6, weight_kg=70.0, rest_seconds=150),
        PlannedExercise(exercise_id="overhead_press", sets=3, reps=6, weight_kg=45.0, rest_seconds=150),
    ],
    estimated_duration_seconds=60 * 60,
)

CONDITIONING_CIRCUIT = WorkoutPlan(
    workout_id="conditioning_circuit",
    display_name="Conditioning Circuit",
    training_goal="endurance",
    has_warmup=False,
    exercises=[
        PlannedExercise(exercise_id="burpee", sets=4, reps=15, rest_seconds=45),
        PlannedExercise(exercise_id="kettlebell_swing", sets=4, reps=20, weight_kg=16.0, rest_seconds=45),
        PlannedExercise(exercise_id="mountain_climber", sets=4, duration_seconds=40, rest_seconds=30),
        PlannedExercise(exercise_id="plank", sets=3, duration_seconds=60, rest_seconds=30),
    ],
)

BUILTIN_PLANS: list[WorkoutPlan] = [FULL_BODY_FOUNDATION, STRENGTH_UPPER_LOWER, CONDITIONING_CIRCUIT]

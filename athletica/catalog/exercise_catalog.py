"""
Built-in exercise catalog.

Each entry is an :class:`~athletica.catalog.exercise_profile.ExerciseProfile`
with a category, a difficulty tier and its primary muscles.  Catalog
order matters: recommendation candidates are drawn in this order before
being ranked.

To add a new exercise, call :func:`register_exercise` or simply append to
``EXERCISE_CATALOG`` at import time.
"""

from __future__ import annotations

from athletica.catalog.exercise_profile import DifficultyTier, ExerciseProfile

# ======================================================================
# Catalog storage
# ======================================================================

EXERCISE_CATALOG: dict[str, ExerciseProfile] = {}


def register_exercise(profile: ExerciseProfile) -> None:
    """Register an exercise profile in the global catalog."""
    EXERCISE_CATALOG[profile.exercise_id] = profile


def get_exercise(exercise_id: str) -> ExerciseProfile | None:
    """Look up an exercise by its ID.  Returns ``None`` if not found."""
    return EXERCISE_CATALOG.get(exercise_id)


# ======================================================================
# Helpers
# ======================================================================

# Aliases for brevity in the table below
B = DifficultyTier.BEGINNER
I = DifficultyTier.INTERMEDIATE
A = DifficultyTier.ADVANCED
E = DifficultyTier.EXPERT

# ======================================================================
# Built-in exercises
# ======================================================================

_EXERCISES: list[ExerciseProfile] = [
    # ── Lower Body ────────────────────────────────────────────────
    ExerciseProfile(exercise_id="back_squat", display_name="Back Squat", category="lower_body", difficulty=I,
                    primary_muscles=["quadriceps", "glutes", "hamstrings", "core"], equipment="barbell"),
    ExerciseProfile(exercise_id="goblet_squat", display_name="Goblet Squat", category="lower_body", difficulty=B,
                    primary_muscles=["quadriceps", "glutes", "core"], equipment="dumbbell"),
    ExerciseProfile(exercise_id="bodyweight_squat", display_name="Bodyweight Squat", category="lower_body",
                    difficulty=B, primary_muscles=["quadriceps", "glutes"]),
    ExerciseProfile(exercise_id="front_squat", display_name="Front Squat", category="lower_body", difficulty=A,
                    primary_muscles=["quadriceps", "glutes", "core", "upper_back"], equipment="barbell"),
    ExerciseProfile(exercise_id="leg_press", display_name="Leg Press", category="lower_body", difficulty=B,
                    primary_muscles=["quadriceps", "glutes"], equipment="machine"),
    ExerciseProfile(exercise_id="bulgarian_split_squat", display_name="Bulgarian Split Squat",
                    category="lower_body", difficulty=I, primary_muscles=["quadriceps", "glutes"],
                    equipment="dumbbell"),
    ExerciseProfile(exercise_id="deadlift", display_name="Deadlift", category="lower_body", difficulty=A,
                    primary_muscles=["hamstrings", "glutes", "erectors", "traps"], equipment="barbell"),
    ExerciseProfile(exercise_id="romanian_deadlift", display_name="Romanian Deadlift", category="lower_body",
                    difficulty=I, primary_muscles=["hamstrings", "glutes", "erectors"], equipment="barbell"),
    ExerciseProfile(exercise_id="pistol_squat", display_name="Pistol Squat", category="lower_body", difficulty=E,
                    primary_muscles=["quadriceps", "glutes", "core"]),
    ExerciseProfile(exercise_id="walking_lunge", display_name="Walking Lunge", category="lower_body", difficulty=B,
                    primary_muscles=["quadriceps", "glutes", "hamstrings"], equipment="dumbbell"),

    # ── Upper Push ────────────────────────────────────────────────
    ExerciseProfile(exercise_id="bench_press", display_name="Bench Press", category="upper_push", difficulty=I,
                    primary_muscles=["chest", "triceps", "front_delts"], equipment="barbell"),
    ExerciseProfile(exercise_id="push_up", display_name="Push-Up", category="upper_push", difficulty=B,
                    primary_muscles=["chest", "triceps", "front_delts"]),
    ExerciseProfile(exercise_id="incline_push_up", display_name="Incline Push-Up", category="upper_push",
                    difficulty=B, primary_muscles=["chest", "triceps"]),
    ExerciseProfile(exercise_id="dumbbell_bench_press", display_name="Dumbbell Bench Press",
                    category="upper_push", difficulty=I, primary_muscles=["chest", "triceps", "front_delts"],
                    equipment="dumbbell"),
    ExerciseProfile(exercise_id="overhead_press", display_name="Overhead Press", category="upper_push",
                    difficulty=I, primary_muscles=["front_delts", "triceps", "upper_chest"], equipment="barbell"),
    ExerciseProfile(exercise_id="dips", display_name="Dips", category="upper_push", difficulty=A,
                    primary_muscles=["chest", "triceps", "front_delts"]),
    ExerciseProfile(exercise_id="handstand_push_up", display_name="Handstand Push-Up", category="upper_push",
                    difficulty=E, primary_muscles=["front_delts", "triceps"]),

    # ── Upper Pull ────────────────────────────────────────────────
    ExerciseProfile(exercise_id="pull_up", display_name="Pull-Up", category="upper_pull", difficulty=A,
                    primary_muscles=["lats", "biceps", "rear_delts"]),
    ExerciseProfile(exercise_id="lat_pulldown", display_name="Lat Pulldown", category="upper_pull", difficulty=B,
                    primary_muscles=["lats", "biceps"], equipment="machine"),
    ExerciseProfile(exercise_id="barbell_row", display_name="Barbell Row", category="upper_pull", difficulty=I,
                    primary_muscles=["lats", "rhomboids", "rear_delts", "biceps"], equipment="barbell"),
    ExerciseProfile(exercise_id="dumbbell_row", display_name="One-Arm Dumbbell Row", category="upper_pull",
                    difficulty=B, primary_muscles=["lats", "rhomboids", "biceps"], equipment="dumbbell"),
    ExerciseProfile(exercise_id="inverted_row", display_name="Inverted Row", category="upper_pull", difficulty=B,
                    primary_muscles=["lats", "rhomboids", "biceps"]),
    ExerciseProfile(exercise_id="muscle_up", display_name="Muscle-Up", category="upper_pull", difficulty=E,
                    primary_muscles=["lats", "biceps", "triceps", "chest"]),

    # ── Core ──────────────────────────────────────────────────────
    ExerciseProfile(exercise_id="plank", display_name="Plank", category="core", difficulty=B,
                    primary_muscles=["abs", "obliques"]),
    ExerciseProfile(exercise_id="dead_bug", display_name="Dead Bug", category="core", difficulty=B,
                    primary_muscles=["abs"]),
    ExerciseProfile(exercise_id="hanging_leg_raise", display_name="Hanging Leg Raise", category="core",
                    difficulty=A, primary_muscles=["abs", "hip_flexors"]),
    ExerciseProfile(exercise_id="ab_wheel_rollout", display_name="Ab Wheel Rollout", category="core",
                    difficulty=I, primary_muscles=["abs", "obliques", "lats"]),

    # ── Conditioning ──────────────────────────────────────────────
    ExerciseProfile(exercise_id="burpee", display_name="Burpee", category="conditioning", difficulty=I,
                    primary_muscles=["full_body"]),
    ExerciseProfile(exercise_id="mountain_climber", display_name="Mountain Climber", category="conditioning",
                    difficulty=B, primary_muscles=["core", "hip_flexors"]),
    ExerciseProfile(exercise_id="kettlebell_swing", display_name="Kettlebell Swing", category="conditioning",
                    difficulty=I, primary_muscles=["glutes", "hamstrings", "core"], equipment="kettlebell"),
    ExerciseProfile(exercise_id="jump_squat", display_name="Jump Squat", category="conditioning", difficulty=I,
                    primary_muscles=["quadriceps", "glutes", "calves"]),
]

# Auto-register all built-in exercises
for _ex in _EXERCISES:
    register_exercise(_ex)

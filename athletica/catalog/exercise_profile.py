"""
Exercise profiling for the recommendation engine.

Each exercise is characterised by a **movement category**, a
**difficulty tier** and the muscles it targets.  These are the only
inputs the adaptive engine needs to rank alternatives:

* **category** restricts the candidate pool (a skipped squat is replaced
  by another ``lower_body`` movement, never by a row).
* **difficulty** decides whether a candidate is a regression,
  an alternative or a progression.
* **primary_muscles** drives the overlap bonus of the confidence score.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ======================================================================
# Enums
# ======================================================================

class DifficultyTier(str, Enum):
    """Ordered difficulty tiers, easiest first."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER: list[DifficultyTier] = [
    DifficultyTier.BEGINNER,
    DifficultyTier.INTERMEDIATE,
    DifficultyTier.ADVANCED,
    DifficultyTier.EXPERT,
]


# ======================================================================
# ExerciseProfile data model
# ======================================================================

class ExerciseProfile(BaseModel):
    """Catalog entry describing a single exercise."""

    exercise_id: str = Field(..., description="Unique slug, e.g. 'back_squat'")
    display_name: str = Field(..., description="Human-readable name")
    category: str = Field(..., description="Movement category, e.g. 'lower_body', 'upper_push'")
    difficulty: DifficultyTier
    primary_muscles: list[str] = Field(default_factory=list, description="Primary muscles targeted")
    equipment: Optional[str] = Field(None, description="e.g. 'barbell', 'dumbbell', None for bodyweight")


def muscle_overlap_ratio(original: ExerciseProfile, candidate: ExerciseProfile) -> float:
    """Share of the original's primary muscles also trained by *candidate*.

    Returns ``0.0`` when the original lists no muscles.
    """
    if not original.primary_muscles:
        return 0.0
    shared = [m for m in original.primary_muscles if m in candidate.primary_muscles]
    return len(shared) / len(original.primary_muscles)


def compare_difficulty(original: ExerciseProfile, candidate: ExerciseProfile) -> str:
    """``'easier'``, ``'same'`` or ``'harder'`` relative to the original."""
    if candidate.difficulty.rank < original.difficulty.rank:
        return "easier"
    if candidate.difficulty.rank > original.difficulty.rank:
        return "harder"
    return "same"

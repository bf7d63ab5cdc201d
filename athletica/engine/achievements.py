"""
Achievement rules and their evaluator.

Every achievement is a row of :data:`ACHIEVEMENTS`: static metadata plus
a tuple of :class:`Condition` objects that must all hold for the rule to
fire.  A condition names a field of :class:`AchievementContext`, a
comparison kind and a threshold, so adding an achievement is a data
change: the evaluator never branches on achievement ids.

Evaluation is a single pure pass.  Every achievement produced by one
pass carries the same ``unlocked_at``.  Duplicate prevention is the
persistence layer's job (one row per user and achievement), which makes
re-evaluating a session a no-op.
"""

from __future__ import annotations

import datetime
import logging
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from athletica.schemas.achievement import AchievementContext, LifetimeStats, UnlockedAchievement

logger = logging.getLogger(__name__)


# ======================================================================
# Rule model
# ======================================================================


class ConditionKind(str, Enum):
    AT_LEAST = "at_least"
    AT_MOST = "at_most"
    EQUALS = "equals"
    IS_TRUE = "is_true"
    PERCENT_FASTER = "percent_faster"      # (reference - field) / reference * 100 >= threshold
    HOUR_BEFORE = "hour_before"
    HOUR_AT_OR_AFTER = "hour_at_or_after"


class Condition(BaseModel):
    """One predicate over a single context field."""

    field: str
    kind: ConditionKind
    threshold: float = 0
    reference_field: Optional[str] = Field(None, description="Baseline field for PERCENT_FASTER")


class AchievementDefinition(BaseModel):
    """Static metadata of an achievement and the rule that unlocks it."""

    id: str
    category: str = Field(..., description="performance, speed, milestone, streak, volume or special")
    title: str
    description: str
    icon: str
    rarity: str = Field(..., description="common, rare, epic or legendary")
    points: int = Field(..., ge=0)
    conditions: tuple[Condition, ...]


def _c(field: str, kind: ConditionKind, threshold: float = 0, reference_field: Optional[str] = None) -> Condition:
    return Condition(field=field, kind=kind, threshold=threshold, reference_field=reference_field)


_K = ConditionKind

ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    # Performance
    AchievementDefinition(id="perfect_form", category="performance", title="Perfect Form",
                          description="Completed all sets with excellent form (RPE ≤ 7)", icon="💎", rarity="rare",
                          points=50,
                          conditions=(_c("all_sets_good_form", _K.IS_TRUE), _c("average_effort", _K.AT_MOST, 7))),
    AchievementDefinition(id="beast_mode", category="performance", title="Beast Mode", description="All sets at RPE 9+",
                          icon="🔥", rarity="epic", points=100, conditions=(_c("average_effort", _K.AT_LEAST, 9),)),
    AchievementDefinition(id="consistent", category="performance", title="Consistency King",
                          description="Completed every planned set", icon="👑", rarity="rare", points=75,
                          conditions=(_c("sets_skipped", _K.EQUALS, 0), _c("sets_completed", _K.AT_LEAST, 1))),
    AchievementDefinition(id="no_rest_needed", category="performance", title="No Rest Needed",
                          description="Cut rest periods short and kept going", icon="⚡", rarity="epic", points=150,
                          conditions=(_c("rest_periods_skipped", _K.AT_LEAST, 1), _c("sets_completed", _K.AT_LEAST, 1))),
    # Speed
    AchievementDefinition(id="speed_demon", category="speed", title="Speed Demon",
                          description="Finished workout 20% faster than estimated", icon="⚡", rarity="epic",
                          points=100,
                          conditions=(_c("duration", _K.PERCENT_FASTER, 20, reference_field="estimated_duration"),)),
    # Milestones
    AchievementDefinition(id="first_workout", category="milestone", title="First Steps",
                          description="Completed your first workout!", icon="🎯", rarity="common", points=25,
                          conditions=(_c("lifetime_workout_count", _K.EQUALS, 1),)),
    AchievementDefinition(id="tenth_workout", category="milestone", title="Double Digits",
                          description="Completed 10 workouts", icon="🔟", rarity="rare", points=100,
                          conditions=(_c("lifetime_workout_count", _K.EQUALS, 10),)),
    AchievementDefinition(id="hundredth_workout", category="milestone", title="Century Club",
                          description="Completed 100 workouts!", icon="💯", rarity="legendary", points=500,
                          conditions=(_c("lifetime_workout_count", _K.EQUALS, 100),)),
    # Streaks
    AchievementDefinition(id="week_streak", category="streak", title="7 Day Warrior",
                          description="Worked out 7 days in a row", icon="📅", rarity="rare", points=150,
                          conditions=(_c("current_streak_days", _K.EQUALS, 7),)),
    AchievementDefinition(id="month_streak", category="streak", title="Monthly Grind",
                          description="30 day workout streak!", icon="🔥", rarity="epic", points=300,
                          conditions=(_c("current_streak_days", _K.EQUALS, 30),)),
    # Volume
    AchievementDefinition(id="ton_lifted", category="volume", title="Ton Moved",
                          description="Lifted 1000kg total volume", icon="🏋️", rarity="rare", points=100,
                          conditions=(_c("lifetime_volume", _K.AT_LEAST, 1000),)),
    AchievementDefinition(id="ten_thousand_reps", category="volume", title="10K Club",
                          description="Completed 10,000 reps lifetime", icon="💪", rarity="epic", points=200,
                          conditions=(_c("lifetime_reps", _K.AT_LEAST, 10_000),)),
    # Special
    AchievementDefinition(id="early_bird", category="special", title="Early Bird",
                          description="Workout started before 6 AM", icon="🌅", rarity="rare", points=75,
                          conditions=(_c("start_time", _K.HOUR_BEFORE, 6),)),
    AchievementDefinition(id="night_owl", category="special", title="Night Owl",
                          description="Workout started after 10 PM", icon="🦉", rarity="rare", points=75,
                          conditions=(_c("start_time", _K.HOUR_AT_OR_AFTER, 22),)),
)

# ======================================================================
# Evaluation
# ======================================================================


def _check(condition: Condition, ctx: AchievementContext) -> bool:
    """Evaluate one condition; a missing value never satisfies it."""
    value = getattr(ctx, condition.field)
    if value is None:
        return False
    kind = condition.kind
    if kind == ConditionKind.IS_TRUE:
        return bool(value)
    if kind in (ConditionKind.HOUR_BEFORE, ConditionKind.HOUR_AT_OR_AFTER):
        hour = value.hour
        return hour < condition.threshold if kind == ConditionKind.HOUR_BEFORE else hour >= condition.threshold
    if kind == ConditionKind.PERCENT_FASTER:
        reference = getattr(ctx, condition.reference_field or "", None)
        if not reference or reference <= 0:
            return False
        return (reference - value) / reference * 100 >= condition.threshold
    if kind == ConditionKind.AT_LEAST:
        return value >= condition.threshold
    if kind == ConditionKind.AT_MOST:
        return value <= condition.threshold
    if kind == ConditionKind.EQUALS:
        return value == condition.threshold
    raise ValueError(f"Unknown condition kind: {kind}")


def evaluate_achievements(ctx: AchievementContext, now: datetime.datetime,
                          definitions: Iterable[AchievementDefinition] = ACHIEVEMENTS, ) -> list[UnlockedAchievement]:
    """All achievements whose conditions hold for *ctx*, in table order."""
    unlocked = [
        UnlockedAchievement(achievement_id=d.id, title=d.title, description=d.description, icon=d.icon,
                            category=d.category, rarity=d.rarity, points=d.points, unlocked_at=now, )
        for d in definitions if all(_check(c, ctx) for c in d.conditions)
    ]
    logger.debug("Achievement pass unlocked %s", [a.achievement_id for a in unlocked])
    return unlocked


def total_points(achievements: Iterable[UnlockedAchievement]) -> int:
    return sum(a.points for a in achievements)


# ======================================================================
# Context assembly
# ======================================================================


def compute_current_streak(workout_dates: Iterable[datetime.date], today: datetime.date) -> int:
    """Consecutive days with a workout, ending today (or yesterday).

    A streak that ended before yesterday is broken and counts as 0.
    """
    days = set(workout_dates)
    if today in days:
        cursor = today
    elif today - datetime.timedelta(days=1) in days:
        cursor = today - datetime.timedelta(days=1)
    else:
        return 0
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= datetime.timedelta(days=1)
    return streak


def build_context(*, sets_completed: int, total_sets: int, rpes: list[float], form_ratings: list[int],
                  rest_periods_skipped: int, active_seconds: int, estimated_seconds: int,
                  lifetime: LifetimeStats, start_time: Optional[datetime.datetime], ) -> AchievementContext:
    """Flatten one finished session and the lifetime counters into a context.

    ``all_sets_good_form`` requires at least one rated set and every
    rated set at 4 or above.
    """
    return AchievementContext(sets_completed=sets_completed, sets_skipped=max(0, total_sets - sets_completed),
                              average_effort=round(sum(rpes) / len(rpes), 2) if rpes else None,
                              rest_periods_skipped=rest_periods_skipped,
                              all_sets_good_form=bool(form_ratings) and all(f >= 4 for f in form_ratings),
                              duration=active_seconds, estimated_duration=estimated_seconds,
                              lifetime_workout_count=lifetime.workout_count,
                              current_streak_days=lifetime.current_streak_days,
                              lifetime_volume=lifetime.total_volume_kg, lifetime_reps=lifetime.total_reps,
                              start_time=start_time, )

"""
Session analytics: live statistics, performance score and the frozen
completion summary.

All functions here are pure: they read the session row, its exercise
logs and set logs (plus an optional previous comparable session) and
return schemas.  Nothing is persisted and no session state is changed.

Performance score
-----------------

Six factors, each on 0-100, weighted-summed and rounded::

    completion   25%   sets completed / planned
    volume       20%   50 + 5 × %-change vs previous session (50 if none)
    intensity    20%   intensity × 100
    consistency  15%   0.6 × form + 0.4 × max(0, 100 − 10 × stddev(RPE))
    efficiency   10%   duration-band score blended 50/50 with completion
    progression  10%   neutral 50

A factor without the data it needs raises :class:`InsufficientData`
internally and degrades to its neutral value; any arithmetic failure
degrades the same way and is logged.  The score as a whole never fails.

Calories
--------

A blended estimate: 70% METs model (tier by intensity × body weight ×
active hours) and 30% reps model (reps × 0.1 kcal).  The body weight is
a configured constant, not the user's profile weight.
"""

from __future__ import annotations

import datetime
import logging
import statistics
from typing import Callable, Optional

from pydantic import BaseModel, Field

from athletica.core.clock import seconds_between
from athletica.core.config import settings
from athletica.core.exceptions import InsufficientData
from athletica.engine.state_machine import TERMINAL_STATES, ExerciseStatus, SessionState
from athletica.models.exercise_log import ExerciseLog
from athletica.models.session_analytics import SessionAnalytics
from athletica.models.set_log import SetLog
from athletica.models.workout_session import WorkoutSession
from athletica.schemas.analytics import (ExerciseBreakdown, LiveStats, PerformanceScore, PreviousSessionStats,
                                         ScoreBreakdown, SessionComparison, SessionInsights, SessionSummary, )
from athletica.schemas.set_log import SetLogResponse

logger = logging.getLogger(__name__)

# ======================================================================
# Configuration
# ======================================================================

_DEFAULT_WEIGHTS: dict[str, float] = {
    "completion": 0.25,
    "volume": 0.20,
    "intensity": 0.20,
    "consistency": 0.15,
    "efficiency": 0.10,
    "progression": 0.10,
}

# (minimum intensity, METs), checked top-down
_DEFAULT_METS_TIERS: list[tuple[float, float]] = [(0.85, 8.0), (0.70, 6.0), (0.50, 5.0)]


class AnalyticsConfig(BaseModel):
    """Constants of the analytics model, injectable for testing."""

    weights: dict[str, float] = Field(default_factory=lambda: dict(_DEFAULT_WEIGHTS))
    neutral_score: float = 50.0

    # Intensity
    default_intensity: float = 0.5
    rep_ratio_cap: float = Field(1.2, gt=0, description="Completed/target rep ratio is capped here before averaging")

    # Calories
    assumed_body_weight_kg: float = Field(settings.ASSUMED_BODY_WEIGHT_KG, gt=0)
    mets_tiers: list[tuple[float, float]] = Field(default_factory=lambda: list(_DEFAULT_METS_TIERS))
    base_mets: float = 3.5
    mets_weight: float = 0.7
    reps_weight: float = 0.3
    calories_per_rep: float = 0.1

    # Time
    ideal_duration_seconds: int = Field(settings.IDEAL_SESSION_DURATION_SECONDS, gt=0)
    default_remaining_seconds: int = 45 * 60

    # Score factors
    volume_change_multiplier: float = 5.0
    form_weight: float = 0.6
    rpe_stability_weight: float = 0.4
    rpe_stddev_penalty: float = 10.0
    efficiency_upper_ratio: float = 1.5
    efficiency_lower_ratio: float = 0.5
    over_duration_penalty: float = 50.0
    rushing_penalty: float = 100.0

    # Recovery
    recovery_base_hours: int = 24
    very_high_intensity: float = 0.9
    high_intensity: float = 0.75
    high_volume_kg: float = 10_000.0

    # Insights
    poor_form_threshold: float = 3.0
    rest_day_intensity: float = 0.8


# Singleton default config
DEFAULT_CONFIG = AnalyticsConfig()


# ======================================================================
# Basic measures
# ======================================================================


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def session_durations(session: WorkoutSession, now: datetime.datetime) -> tuple[int, int, int]:
    """``(elapsed, active, paused)`` seconds.

    Terminal sessions return their frozen duration fields; a paused
    session counts the open pause up to *now*.
    """
    if session.state in TERMINAL_STATES:
        return session.total_duration_seconds, session.active_duration_seconds, session.total_paused_seconds
    if session.started_at is None:
        return 0, 0, 0
    elapsed = seconds_between(session.started_at, now)
    paused = session.total_paused_seconds
    if session.state == SessionState.PAUSED.value:
        paused += seconds_between(session.paused_at, now)
    return elapsed, max(0, elapsed - paused), paused


def average_rpe(sets: list[SetLog]) -> Optional[float]:
    """Mean RPE over sets that report one, ``None`` if none do."""
    rpes = [s.rpe for s in sets if s.rpe is not None]
    if not rpes:
        return None
    return round(sum(rpes) / len(rpes), 2)


def compute_intensity(sets: list[SetLog], config: Optional[AnalyticsConfig] = None) -> float:
    """Session intensity in [0, 1].

    ``avg_rpe / 10`` when RPE was reported, otherwise the mean of
    ``min(completed / target, cap) / cap`` over sets with a rep target,
    otherwise the neutral default.
    """
    cfg = config or DEFAULT_CONFIG
    avg = average_rpe(sets)
    if avg is not None and avg > 0:
        return min(avg / 10.0, 1.0)
    ratios = [min(s.reps_completed / s.reps_target, cfg.rep_ratio_cap) / cfg.rep_ratio_cap for s in sets if
              s.reps_target]
    if not ratios:
        return cfg.default_intensity
    return sum(ratios) / len(ratios)


def mets_for_intensity(intensity: float, config: Optional[AnalyticsConfig] = None) -> float:
    cfg = config or DEFAULT_CONFIG
    for threshold, mets in cfg.mets_tiers:
        if intensity >= threshold:
            return mets
    return cfg.base_mets


def estimate_calories(active_seconds: int, total_reps: int, intensity: float,
                      config: Optional[AnalyticsConfig] = None) -> int:
    """Blended METs / reps calorie estimate, rounded to whole kcal."""
    cfg = config or DEFAULT_CONFIG
    hours = active_seconds / 3600.0
    mets_calories = mets_for_intensity(intensity, cfg) * cfg.assumed_body_weight_kg * hours
    rep_calories = total_reps * cfg.calories_per_rep
    return round(mets_calories * cfg.mets_weight + rep_calories * cfg.reps_weight)


def estimate_remaining_seconds(active_seconds: int, completion_percentage: float,
                               config: Optional[AnalyticsConfig] = None) -> int:
    """Linear projection of the remaining time from progress so far."""
    cfg = config or DEFAULT_CONFIG
    if completion_percentage <= 0:
        return cfg.default_remaining_seconds
    projected_total = active_seconds / completion_percentage * 100
    return max(0, round(projected_total - active_seconds))


def percent(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)


def percent_change(current: float, previous: Optional[float]) -> float:
    """Percent change, ``0.0`` when there is no usable baseline."""
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def set_volume(s: SetLog) -> float:
    return (s.weight_kg or 0.0) * s.reps_completed


def parse_tempo(tempo: Optional[str]) -> Optional[int]:
    """Seconds per rep from a tempo string such as ``'3-1-2-0'`` or ``'31X0'``.

    ``X`` (explosive) counts as zero seconds.  Returns ``None`` when
    the string is not a four-part tempo.
    """
    if not tempo:
        return None
    parts = [p for p in tempo.replace("/", "-").split("-") if p] if "-" in tempo or "/" in tempo else list(tempo)
    if len(parts) != 4:
        return None
    total = 0
    for part in parts:
        if part.upper() == "X":
            continue
        if not part.isdigit():
            return None
        total += int(part)
    return total


def set_time_under_tension(s: SetLog) -> int:
    """Recorded TUT, else tempo × reps, else the timed duration, else 0."""
    if s.time_under_tension_seconds is not None:
        return s.time_under_tension_seconds
    per_rep = parse_tempo(s.tempo)
    if per_rep is not None and s.reps_completed:
        return per_rep * s.reps_completed
    return s.duration_actual_seconds or 0


# ======================================================================
# Performance score factors
# ======================================================================


def _completion_factor(sets_completed: int, total_sets: int, exercises_completed: int,
                       total_exercises: int) -> float:
    if total_sets > 0:
        return _clamp(sets_completed / total_sets * 100)
    if total_exercises > 0:
        return _clamp(exercises_completed / total_exercises * 100)
    raise InsufficientData("nothing planned")


def _volume_factor(volume: float, previous: Optional[PreviousSessionStats], cfg: AnalyticsConfig) -> float:
    if previous is None or previous.total_volume_kg <= 0:
        raise InsufficientData("no previous comparable session")
    change = (volume - previous.total_volume_kg) / previous.total_volume_kg * 100
    return _clamp(cfg.neutral_score + cfg.volume_change_multiplier * change)


def consistency_score(sets: list[SetLog], config: Optional[AnalyticsConfig] = None) -> float:
    """Form quality blended with RPE stability, 0-100.

    Raises :class:`InsufficientData` without sets or form ratings.
    """
    cfg = config or DEFAULT_CONFIG
    if not sets:
        raise InsufficientData("no sets logged")
    forms = [s.form_quality for s in sets if s.form_quality is not None]
    if not forms:
        raise InsufficientData("no form ratings")
    form_score = sum(forms) / len(forms) / 5 * 100
    rpes = [s.rpe for s in sets if s.rpe is not None]
    if not rpes:
        return _clamp(form_score)
    stability = max(0.0, 100 - cfg.rpe_stddev_penalty * statistics.pstdev(rpes))
    return _clamp(cfg.form_weight * form_score + cfg.rpe_stability_weight * stability)


def _efficiency_factor(active_seconds: int, completion: float, cfg: AnalyticsConfig) -> float:
    ratio = active_seconds / cfg.ideal_duration_seconds
    duration_score = 100.0
    if ratio > cfg.efficiency_upper_ratio:
        duration_score = max(0.0, 100 - (ratio - cfg.efficiency_upper_ratio) * cfg.over_duration_penalty)
    elif ratio < cfg.efficiency_lower_ratio and completion < 100:
        duration_score = max(0.0, 100 - (cfg.efficiency_lower_ratio - ratio) * cfg.rushing_penalty)
    return _clamp(0.5 * duration_score + 0.5 * completion)


def compute_performance_score(*, sets: list[SetLog], sets_completed: int, total_sets: int, exercises_completed: int,
                              total_exercises: int, volume: float, active_seconds: int, intensity: float,
                              previous: Optional[PreviousSessionStats] = None,
                              config: Optional[AnalyticsConfig] = None, ) -> PerformanceScore:
    """Weighted six-factor performance score (integer 0-100)."""
    cfg = config or DEFAULT_CONFIG
    degraded: list[str] = []

    def factor(name: str, compute: Callable[[], float]) -> float:
        try:
            return compute()
        except InsufficientData as exc:
            logger.debug("Score factor '%s' neutral: %s", name, exc.message)
        except (ArithmeticError, ValueError, statistics.StatisticsError) as exc:
            logger.warning("Score factor '%s' failed, using neutral value: %s", name, exc)
        degraded.append(name)
        return cfg.neutral_score

    completion = factor("completion",
                        lambda: _completion_factor(sets_completed, total_sets, exercises_completed, total_exercises))
    breakdown = ScoreBreakdown(completion=round(completion, 2),
                               volume=round(factor("volume", lambda: _volume_factor(volume, previous, cfg)), 2),
                               intensity=round(factor("intensity", lambda: _clamp(intensity * 100)), 2),
                               consistency=round(factor("consistency", lambda: consistency_score(sets, cfg)), 2),
                               efficiency=round(
                                   factor("efficiency", lambda: _efficiency_factor(active_seconds, completion, cfg)),
                                   2), progression=cfg.neutral_score, )

    total = sum(getattr(breakdown, name) * weight for name, weight in cfg.weights.items())
    score = int(_clamp(round(total)))
    return PerformanceScore(score=score, breakdown=breakdown, degraded_factors=degraded)


# ======================================================================
# Live stats
# ======================================================================


def compute_live_stats(session: WorkoutSession, sets: list[SetLog], now: datetime.datetime,
                       previous: Optional[PreviousSessionStats] = None,
                       config: Optional[AnalyticsConfig] = None, ) -> LiveStats:
    """Recompute live statistics from the session row and its set logs."""
    cfg = config or DEFAULT_CONFIG
    elapsed, active, paused = session_durations(session, now)

    volume = round(sum(set_volume(s) for s in sets), 2)
    reps = sum(s.reps_completed for s in sets)
    avg_rpe = average_rpe(sets)
    intensity = compute_intensity(sets, cfg)
    completion_pct = percent(session.exercises_completed, session.total_exercises)
    sets_pct = percent(session.sets_completed, session.total_sets)
    progress_pct = sets_pct if session.total_sets else completion_pct

    performance = compute_performance_score(sets=sets, sets_completed=session.sets_completed,
                                            total_sets=session.total_sets,
                                            exercises_completed=session.exercises_completed,
                                            total_exercises=session.total_exercises, volume=volume,
                                            active_seconds=active, intensity=intensity, previous=previous,
                                            config=cfg, )

    return LiveStats(session_id=session.id, state=session.state, computed_at=now, elapsed_seconds=elapsed,
                     active_seconds=active, paused_seconds=paused, total_volume_kg=volume, total_reps=reps,
                     sets_completed=session.sets_completed, total_sets=session.total_sets,
                     exercises_completed=session.exercises_completed, total_exercises=session.total_exercises,
                     average_rpe=avg_rpe, average_intensity=round(intensity, 3),
                     estimated_calories=estimate_calories(active, reps, intensity, cfg),
                     completion_percentage=completion_pct, sets_completion_percentage=sets_pct,
                     estimated_remaining_seconds=estimate_remaining_seconds(active, progress_pct, cfg),
                     performance=performance,
                     vs_previous_session_percent=percent_change(volume,
                                                                previous.total_volume_kg if previous else None), )


# ======================================================================
# Completion summary
# ======================================================================


def estimate_recovery_hours(intensity: float, volume_kg: float, config: Optional[AnalyticsConfig] = None) -> int:
    """24h base, +24h at very high intensity or +12h at high, +12h at high volume."""
    cfg = config or DEFAULT_CONFIG
    hours = cfg.recovery_base_hours
    if intensity >= cfg.very_high_intensity:
        hours += 24
    elif intensity >= cfg.high_intensity:
        hours += 12
    if volume_kg > cfg.high_volume_kg:
        hours += 12
    return hours


def compare_sessions(volume: float, active_seconds: int, score: int,
                     previous: Optional[PreviousSessionStats]) -> SessionComparison:
    """Deltas versus the previous comparable session, zero-filled if none."""
    if previous is None:
        return SessionComparison()
    return SessionComparison(has_previous=True, previous_session_id=previous.session_id,
                             volume_change_percent=percent_change(volume, previous.total_volume_kg),
                             duration_change_percent=percent_change(active_seconds, previous.active_duration_seconds),
                             performance_change_percent=percent_change(score, previous.performance_score), )


def generate_insights(live: LiveStats, comparison: SessionComparison, poor_form: list[str], recovery_hours: int,
                      config: Optional[AnalyticsConfig] = None, ) -> SessionInsights:
    cfg = config or DEFAULT_CONFIG

    if comparison.volume_change_percent > 5:
        trend = "increasing"
    elif comparison.volume_change_percent < -5:
        trend = "decreasing"
    else:
        trend = "stable"

    rpe = live.average_rpe
    if rpe is not None and rpe >= 8:
        level = "high"
        advice = "Great effort! Consider progressive overload next time."
    elif rpe is not None and rpe < 5:
        level = "low"
        advice = "Room to push harder: aim for RPE 7-8 on working sets."
    else:
        level = "moderate"
        advice = "Solid session. Add a rep or a little weight where form allows."

    tips = [f"Lower the load on {exercise_id} and focus on technique" for exercise_id in poor_form]
    if live.sets_completion_percentage < 100:
        tips.append("Plan a shorter session if time is tight, rather than skipping sets")

    rest_day = live.average_intensity >= cfg.rest_day_intensity
    notes: list[str] = []
    if comparison.has_previous:
        if comparison.volume_change_percent > 0:
            notes.append(f"Volume up {comparison.volume_change_percent}% on your last session")
        if comparison.performance_change_percent > 0:
            notes.append(f"Performance score up {comparison.performance_change_percent}%")
    if live.sets_completion_percentage >= 100:
        notes.append("Every planned set completed")

    return SessionInsights(volume_trend=trend, intensity_level=level, intensity_recommendation=advice,
                           form_issues=poor_form, improvement_tips=tips,
                           next_workout_recommendation=(
                               f"Active recovery or lighter session within {recovery_hours}h" if rest_day else
                               f"Ready for a regular session in {recovery_hours}h"), rest_day_suggested=rest_day,
                           progress_notes=notes, )


def _exercise_breakdown(log: ExerciseLog, sets: list[SetLog]) -> ExerciseBreakdown:
    return ExerciseBreakdown(exercise_log_id=log.id, exercise_id=log.exercise_id, order_index=log.order_index,
                             status=log.status, target_sets=log.target_sets, completed_sets=log.completed_sets,
                             completion_ratio=round(log.completed_sets / log.target_sets, 3) if log.target_sets else 0.0,
                             total_volume_kg=round(log.total_volume_kg, 2), total_reps=log.total_reps,
                             average_rpe=log.average_rpe, form_quality_average=log.form_quality_average,
                             sets=[SetLogResponse.model_validate(s) for s in sorted(sets, key=lambda s: s.set_number)], )


def build_session_summary(session: WorkoutSession, logs: list[ExerciseLog], sets_by_log: dict[int, list[SetLog]],
                          now: datetime.datetime, previous: Optional[PreviousSessionStats] = None,
                          config: Optional[AnalyticsConfig] = None, ) -> SessionSummary:
    """Freeze live stats and derive the completion summary."""
    cfg = config or DEFAULT_CONFIG
    ordered_logs = sorted(logs, key=lambda log: log.order_index)
    sets = [s for log in ordered_logs for s in sets_by_log.get(log.id, [])]
    live = compute_live_stats(session, sets, now, previous, cfg)

    weights = [s.weight_kg for s in sets if s.weight_kg]
    rests = [s.rest_actual_seconds for s in sets if s.rest_actual_seconds is not None]
    forms = [s.form_quality for s in sets if s.form_quality is not None]
    tut = sum(set_time_under_tension(s) for s in sets)
    total_rest = sum(rests)

    poor_form = [log.exercise_id for log in ordered_logs if
                 log.form_quality_average is not None and log.form_quality_average < cfg.poor_form_threshold]
    comparison = compare_sessions(live.total_volume_kg, live.active_seconds, live.performance.score, previous)
    recovery = estimate_recovery_hours(live.average_intensity, live.total_volume_kg, cfg)

    return SessionSummary(session_id=session.id, user_id=session.user_id, workout_id=session.workout_id,
                          completed_at=session.completed_at, total_duration_seconds=live.elapsed_seconds,
                          active_duration_seconds=live.active_seconds, paused_seconds=live.paused_seconds,
                          total_volume_kg=live.total_volume_kg, total_reps=live.total_reps,
                          total_sets=len(sets),
                          average_reps_per_set=round(live.total_reps / len(sets), 2) if sets else None,
                          average_weight_kg=round(sum(weights) / len(weights), 2) if weights else None,
                          average_rpe=live.average_rpe, average_intensity=live.average_intensity,
                          time_under_tension_seconds=tut,
                          average_rest_seconds=round(total_rest / len(rests), 1) if rests else None,
                          work_to_rest_ratio=round(tut / total_rest, 2) if total_rest > 0 and tut > 0 else None,
                          calories_burned=live.estimated_calories,
                          completion_percentage=live.completion_percentage,
                          completion_rate=live.sets_completion_percentage,
                          exercises_skipped=sum(1 for log in logs if log.status == ExerciseStatus.SKIPPED.value),
                          sets_to_failure=sum(1 for s in sets if s.was_failure or s.set_type == "failure"),
                          average_form_quality=round(sum(forms) / len(forms), 2) if forms else None,
                          exercises_with_poor_form=poor_form, performance=live.performance, comparison=comparison,
                          recovery_estimate_hours=recovery,
                          insights=generate_insights(live, comparison, poor_form, recovery, cfg),
                          exercises=[_exercise_breakdown(log, sets_by_log.get(log.id, [])) for log in ordered_logs],
                          calculated_at=now, )


def summary_from_snapshot(session: WorkoutSession, snapshot: SessionAnalytics, logs: list[ExerciseLog],
                          sets_by_log: dict[int, list[SetLog]], ) -> SessionSummary:
    """Serve a completed session's summary from its frozen analytics row.

    Scores, comparison, recovery and insights come from *snapshot* as
    stored; only the per-exercise set lists are read from the logs.
    """
    ordered_logs = sorted(logs, key=lambda log: log.order_index)
    performance = PerformanceScore(score=snapshot.performance_score,
                                   breakdown=ScoreBreakdown.model_validate(snapshot.score_breakdown),
                                   degraded_factors=list(snapshot.degraded_factors or []), )
    return SessionSummary(session_id=session.id, user_id=snapshot.user_id, workout_id=snapshot.workout_id,
                          completed_at=session.completed_at, total_duration_seconds=snapshot.total_duration_seconds,
                          active_duration_seconds=snapshot.active_duration_seconds,
                          paused_seconds=max(0, snapshot.total_duration_seconds - snapshot.active_duration_seconds),
                          total_volume_kg=snapshot.total_volume_kg, total_reps=snapshot.total_reps,
                          total_sets=snapshot.total_sets, average_reps_per_set=snapshot.average_reps_per_set,
                          average_weight_kg=snapshot.average_weight_kg, average_rpe=snapshot.average_rpe,
                          average_intensity=snapshot.average_intensity,
                          time_under_tension_seconds=snapshot.time_under_tension_seconds,
                          average_rest_seconds=snapshot.average_rest_seconds,
                          work_to_rest_ratio=snapshot.work_to_rest_ratio, calories_burned=snapshot.calories_burned,
                          completion_percentage=session.completion_percentage,
                          completion_rate=snapshot.completion_rate, exercises_skipped=snapshot.exercises_skipped,
                          sets_to_failure=snapshot.sets_to_failure,
                          average_form_quality=snapshot.average_form_quality,
                          exercises_with_poor_form=list(snapshot.exercises_with_poor_form or []),
                          performance=performance,
                          comparison=SessionComparison.model_validate(snapshot.vs_previous_session),
                          recovery_estimate_hours=snapshot.recovery_estimate_hours,
                          insights=SessionInsights.model_validate(snapshot.insights),
                          exercises=[_exercise_breakdown(log, sets_by_log.get(log.id, [])) for log in ordered_logs],
                          calculated_at=snapshot.calculated_at, )

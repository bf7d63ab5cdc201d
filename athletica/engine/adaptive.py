"""
Adaptive engine: rest-time recommendation, exercise recommendations,
one-rep-max estimation and per-exercise metric learning.

Rest time
---------

::

    recommended = base × difficulty × fatigue × historical      → [30, 300] s

* ``base``: by training goal (strength 180, hypertrophy 90, endurance 45).
* ``difficulty``: RPE band ≤6 → 0.8, ≤8 → 1.0, ≤9 → 1.2, >9 → 1.4.
* ``fatigue``: ``1 + 0.05 × (set − 1)``, the increment ×1.15 at RPE ≥ 9,
  capped at 1.3.
* ``historical``: pulls towards the learned preferred rest, damped by
  the learned variance: ``1 + (preferred / base − 1) × max(0, 1 − var / 60)``.

Without history the historical factor is 1.0 and confidence is 0.5.

One-rep max
-----------

Epley (``w × (1 + r / 30)``) per set over the most recent ≤20 sets with
1-12 reps; the **median** estimate is reported.  No data gives
``(0, 0)``.

Metric learning
---------------

After a completed session every exercise it touched updates its
(user, exercise) row: lifetime counters are incremented and preferred
rest, RPE and form are smoothed 80 % old / 20 % new.
"""

from __future__ import annotations

import datetime
import logging
import statistics
from typing import Optional

from pydantic import BaseModel, Field

from athletica.catalog.exercise_profile import ExerciseProfile, compare_difficulty, muscle_overlap_ratio
from athletica.core.exceptions import InsufficientData
from athletica.engine.analytics import consistency_score
from athletica.engine.state_machine import ExerciseStatus
from athletica.models.adaptive_metric import AdaptiveUserMetric
from athletica.models.exercise_log import ExerciseLog
from athletica.models.set_log import SetLog
from athletica.schemas.adaptive import (ExerciseSuggestion, FeedbackStats, OneRepMaxEstimate, RestFactors,
                                        RestRecommendation, )

logger = logging.getLogger(__name__)

MODEL_VERSION = "v1"

# ======================================================================
# Configuration
# ======================================================================

_DEFAULT_BASE_REST: dict[str, int] = {
    "strength": 180,
    "hypertrophy": 90,
    "endurance": 45,
}

# (max RPE inclusive, factor), checked top-down; above the last band → high_rpe_factor
_DEFAULT_RPE_BANDS: list[tuple[float, float]] = [(6, 0.8), (8, 1.0), (9, 1.2)]


class AdaptiveConfig(BaseModel):
    """Constants of the adaptive engine, injectable for testing."""

    # Rest
    base_rest_seconds: dict[str, int] = Field(default_factory=lambda: dict(_DEFAULT_BASE_REST))
    default_goal: str = "hypertrophy"
    min_rest_seconds: int = 30
    max_rest_seconds: int = 300
    rpe_bands: list[tuple[float, float]] = Field(default_factory=lambda: list(_DEFAULT_RPE_BANDS))
    high_rpe_factor: float = 1.4
    fatigue_step: float = 0.05
    fatigue_rpe_threshold: int = 9
    fatigue_rpe_boost: float = 1.15
    fatigue_cap: float = 1.3
    variance_damping_seconds: float = Field(60.0, gt=0, description="Variance at which history is ignored")

    # Confidence
    neutral_confidence: float = 0.5
    full_history_sessions: int = 20
    default_consistency: float = 50.0

    # Recommendations
    recommendation_base_confidence: float = 0.5
    same_category_bonus: float = 0.3
    muscle_overlap_weight: float = 0.2
    min_recommendation_confidence: float = 0.6
    max_recommendations: int = 3
    candidate_limit: int = 10
    feedback_weight: float = 0.2
    feedback_full_weight_responses: int = 5

    # One-rep max
    one_rm_window: int = 20
    one_rm_max_reps: int = 12

    # Learning
    smoothing_old_weight: float = 0.8
    default_preferred_rest_seconds: int = 90


# Singleton default config
DEFAULT_CONFIG = AdaptiveConfig()


# ======================================================================
# Rest recommendation
# ======================================================================


def base_rest(goal: Optional[str], config: Optional[AdaptiveConfig] = None) -> int:
    cfg = config or DEFAULT_CONFIG
    return cfg.base_rest_seconds.get(goal or cfg.default_goal, cfg.base_rest_seconds[cfg.default_goal])


def difficulty_factor(rpe: Optional[float], config: Optional[AdaptiveConfig] = None) -> float:
    cfg = config or DEFAULT_CONFIG
    if rpe is None:
        return 1.0
    for upper, factor in cfg.rpe_bands:
        if rpe <= upper:
            return factor
    return cfg.high_rpe_factor


def fatigue_factor(set_number: int, rpe: Optional[float], config: Optional[AdaptiveConfig] = None) -> float:
    cfg = config or DEFAULT_CONFIG
    increment = cfg.fatigue_step * max(0, set_number - 1)
    if rpe is not None and rpe >= cfg.fatigue_rpe_threshold:
        increment *= cfg.fatigue_rpe_boost
    return min(1.0 + increment, cfg.fatigue_cap)


def historical_factor(metric: Optional[AdaptiveUserMetric], base_seconds: int,
                      config: Optional[AdaptiveConfig] = None) -> float:
    """Nudge towards the learned preferred rest; 1.0 without history."""
    cfg = config or DEFAULT_CONFIG
    if metric is None or metric.total_sessions <= 0 or base_seconds <= 0:
        return 1.0
    trust = max(0.0, 1 - metric.rest_seconds_variance / cfg.variance_damping_seconds)
    return 1 + (metric.preferred_rest_seconds / base_seconds - 1) * trust


def metric_confidence(metric: Optional[AdaptiveUserMetric], config: Optional[AdaptiveConfig] = None) -> float:
    cfg = config or DEFAULT_CONFIG
    if metric is None or metric.total_sessions <= 0:
        return cfg.neutral_confidence
    coverage = min(metric.total_sessions / cfg.full_history_sessions, 1.0)
    consistency = metric.consistency_score if metric.consistency_score is not None else cfg.default_consistency
    return round(min(1.0, 0.7 * coverage + 0.3 * consistency / 100), 3)


def _signed_percent(factor: float) -> str:
    pct = round((factor - 1) * 100)
    return f"+{pct}%" if pct > 0 else f"{pct}%"


def recommend_rest(exercise_id: str, set_number: int, rpe: Optional[float] = None, goal: Optional[str] = None,
                   metric: Optional[AdaptiveUserMetric] = None,
                   config: Optional[AdaptiveConfig] = None, ) -> RestRecommendation:
    """Recommended rest before *set_number* of *exercise_id*."""
    cfg = config or DEFAULT_CONFIG
    base = base_rest(goal, cfg)
    difficulty = difficulty_factor(rpe, cfg)
    fatigue = fatigue_factor(set_number, rpe, cfg)
    historical = historical_factor(metric, base, cfg)

    raw = base * difficulty * fatigue * historical
    recommended = max(cfg.min_rest_seconds, min(cfg.max_rest_seconds, round(raw)))

    reasons = [f"Base: {base}s"]
    if difficulty > 1:
        reasons.append(f"{_signed_percent(difficulty)} (RPE {rpe:g})")
    elif difficulty < 1:
        reasons.append(f"{_signed_percent(difficulty)} (easier effort)")
    if fatigue > 1:
        reasons.append(f"{_signed_percent(fatigue)} (set {set_number})")
    if round((historical - 1) * 100) != 0:
        reasons.append(f"{_signed_percent(historical)} (your pattern)")

    return RestRecommendation(exercise_id=exercise_id, set_number=set_number, recommended_seconds=recommended,
                              base_seconds=base,
                              factors=RestFactors(difficulty=difficulty, fatigue=round(fatigue, 4),
                                                  historical=round(historical, 4)),
                              confidence=metric_confidence(metric, cfg), reasoning=" • ".join(reasons), )


# ======================================================================
# Exercise recommendations
# ======================================================================

_REASONS: dict[str, str] = {
    "alternative": "Same muscle group • Similar difficulty",
    "regression": "Easier variation • Better for recovery",
    "progression": "More challenging • Next level up",
    "similar": "Similar movement pattern",
}


def classify_recommendation(original: ExerciseProfile, candidate: ExerciseProfile, trigger: str) -> str:
    """Regression / alternative / progression / similar by difficulty tier."""
    o, c = original.difficulty.rank, candidate.difficulty.rank
    if trigger in ("injury", "low_form") and c < o:
        return "regression"
    if c == o:
        return "alternative"
    if c > o:
        return "progression"
    return "similar"


def recommendation_confidence(original: ExerciseProfile, candidate: ExerciseProfile,
                              feedback: Optional[FeedbackStats] = None,
                              config: Optional[AdaptiveConfig] = None) -> float:
    """``0.5 + 0.3 (same category) + 0.2 × overlap``, tuned by past feedback, capped at 1."""
    cfg = config or DEFAULT_CONFIG
    confidence = cfg.recommendation_base_confidence
    if original.category == candidate.category:
        confidence += cfg.same_category_bonus
    confidence += cfg.muscle_overlap_weight * muscle_overlap_ratio(original, candidate)
    if feedback is not None and feedback.responses > 0:
        weight = min(feedback.responses / cfg.feedback_full_weight_responses, 1.0)
        confidence += cfg.feedback_weight * (feedback.accept_rate - 0.5) * weight
    return round(max(0.0, min(confidence, 1.0)), 3)


def describe_benefits(candidate: ExerciseProfile, recommendation_type: str) -> list[str]:
    benefits: list[str] = []
    if recommendation_type == "regression":
        benefits += ["Reduces injury risk", "Improves form"]
    elif recommendation_type == "progression":
        benefits += ["Increases strength", "Builds muscle"]
    benefits.append(f"Targets {candidate.category}")
    return benefits


def recommend_exercises(original: ExerciseProfile, candidates: list[ExerciseProfile], trigger: str,
                        feedback: Optional[dict[str, FeedbackStats]] = None,
                        config: Optional[AdaptiveConfig] = None, ) -> list[ExerciseSuggestion]:
    """Rank same-category candidates; keep confidence ≥ 0.6, top 3 descending."""
    cfg = config or DEFAULT_CONFIG
    feedback = feedback or {}
    suggestions: list[ExerciseSuggestion] = []
    for candidate in candidates:
        if candidate.exercise_id == original.exercise_id or candidate.category != original.category:
            continue
        confidence = recommendation_confidence(original, candidate, feedback.get(candidate.exercise_id), cfg)
        if confidence < cfg.min_recommendation_confidence:
            continue
        kind = classify_recommendation(original, candidate, trigger)
        suggestions.append(ExerciseSuggestion(exercise_id=candidate.exercise_id, display_name=candidate.display_name,
                                              recommendation_type=kind, confidence=confidence, reason=_REASONS[kind],
                                              benefits=describe_benefits(candidate, kind),
                                              difficulty_comparison=compare_difficulty(original, candidate), ))
    # Stable sort keeps catalog order among ties
    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    return suggestions[:cfg.max_recommendations]


# ======================================================================
# One-rep max
# ======================================================================


def epley(weight_kg: float, reps: int) -> float:
    return weight_kg * (1 + reps / 30)


def estimate_one_rep_max(exercise_id: str, recent_sets: list[SetLog],
                         config: Optional[AdaptiveConfig] = None) -> OneRepMaxEstimate:
    """Median Epley estimate over the most recent sets (newest first)."""
    cfg = config or DEFAULT_CONFIG
    window = recent_sets[:cfg.one_rm_window]
    estimates = [epley(s.weight_kg, s.reps_completed) for s in window if
                 s.weight_kg and s.weight_kg > 0 and 0 < s.reps_completed <= cfg.one_rm_max_reps]
    if not estimates:
        logger.debug("No usable sets for 1RM of %s", exercise_id)
        return OneRepMaxEstimate(exercise_id=exercise_id, estimated_1rm_kg=0.0, confidence=0.0, sample_size=0)

    median = statistics.median(estimates)
    spread = statistics.pstdev(estimates)
    coverage = min(len(estimates) / cfg.one_rm_window, 1.0)
    stability = 1 - spread / median if median > 0 else 0.0
    confidence = max(0.0, min(coverage * 0.7 + stability * 0.3, 1.0))
    return OneRepMaxEstimate(exercise_id=exercise_id, estimated_1rm_kg=round(median, 1),
                             confidence=round(confidence, 3), sample_size=len(estimates), )


# ======================================================================
# Metric learning
# ======================================================================


def _smooth(old: Optional[float], new: Optional[float], old_weight: float) -> Optional[float]:
    if new is None:
        return old
    if old is None:
        return new
    return old * old_weight + new * (1 - old_weight)


def _mean(values: list[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def update_metric(metric: Optional[AdaptiveUserMetric], user_id: str, log: ExerciseLog, sets: list[SetLog],
                  recent_sets: list[SetLog], now: datetime.datetime,
                  config: Optional[AdaptiveConfig] = None, ) -> AdaptiveUserMetric:
    """Fold one exercise of a completed session into the learned metric.

    *metric* is ``None`` for a first observation; a new row seeded from
    this session is returned.  *recent_sets* is the newest-first history
    used to re-estimate the one-rep max.
    """
    cfg = config or DEFAULT_CONFIG
    first_time = metric is None
    if metric is None:
        metric = AdaptiveUserMetric(user_id=user_id, exercise_id=log.exercise_id, total_sessions=0,
                                    preferred_rest_seconds=log.target_rest_seconds or cfg.default_preferred_rest_seconds,
                                    rest_seconds_variance=0.0, times_planned=0, times_skipped=0, created_at=now, )

    metric.times_planned += 1
    if log.status == ExerciseStatus.SKIPPED.value:
        metric.times_skipped += 1
    metric.skip_rate = round(metric.times_skipped / metric.times_planned, 3)

    if sets:
        w = cfg.smoothing_old_weight
        rests = [s.rest_actual_seconds for s in sets if s.rest_actual_seconds is not None]
        observed_rest = _mean(rests)
        if observed_rest is not None:
            if first_time or metric.total_sessions == 0:
                metric.preferred_rest_seconds = round(observed_rest)
                metric.rest_seconds_variance = round(statistics.pstdev(rests), 2)
            else:
                deviation = abs(observed_rest - metric.preferred_rest_seconds)
                metric.rest_seconds_variance = round(_smooth(metric.rest_seconds_variance, deviation, w), 2)
                metric.preferred_rest_seconds = round(_smooth(metric.preferred_rest_seconds, observed_rest, w))

        rpe = _mean([s.rpe for s in sets if s.rpe is not None])
        form = _mean([s.form_quality for s in sets if s.form_quality is not None])
        metric.average_rpe = _round(_smooth(metric.average_rpe, rpe, w))
        metric.average_form_quality = _round(_smooth(metric.average_form_quality, form, w))
        try:
            metric.consistency_score = _round(_smooth(metric.consistency_score, consistency_score(sets), w))
        except InsufficientData as exc:
            logger.debug("Consistency for %s unchanged: %s", log.exercise_id, exc.message)

        reps = [s.reps_completed for s in sets if s.reps_completed > 0]
        if reps:
            metric.optimal_rep_range_min = round(_smooth(metric.optimal_rep_range_min, min(reps), w))
            metric.optimal_rep_range_max = round(_smooth(metric.optimal_rep_range_max, max(reps), w))

        estimate = estimate_one_rep_max(log.exercise_id, recent_sets, cfg)
        if estimate.estimated_1rm_kg > 0:
            previous_1rm = metric.last_1rm_estimate_kg
            if previous_1rm:
                metric.strength_progression_rate = round(
                    (estimate.estimated_1rm_kg - previous_1rm) / previous_1rm * 100, 2)
            metric.last_1rm_estimate_kg = estimate.estimated_1rm_kg

        metric.total_sessions += 1
        metric.total_sets += len(sets)
        metric.total_reps += sum(s.reps_completed for s in sets)
        metric.total_volume_lifetime_kg = round(
            metric.total_volume_lifetime_kg + sum((s.weight_kg or 0.0) * s.reps_completed for s in sets), 2)

    metric.confidence_score = metric_confidence(metric, cfg)
    metric.model_version = MODEL_VERSION
    metric.last_calculated_at = now
    return metric


def _round(value: Optional[float], digits: int = 2) -> Optional[float]:
    return round(value, digits) if value is not None else None

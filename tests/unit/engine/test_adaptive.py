"""Tests for the adaptive engine: rest time, recommendations, 1RM and learning."""

import datetime

import pytest

from athletica.catalog.exercise_catalog import EXERCISE_CATALOG, get_exercise
from athletica.engine.adaptive import (AdaptiveConfig, MODEL_VERSION, base_rest, classify_recommendation,
                                       describe_benefits, difficulty_factor, epley, estimate_one_rep_max,
                                       fatigue_factor, historical_factor, metric_confidence,
                                       recommend_exercises, recommend_rest, recommendation_confidence,
                                       update_metric, )
from athletica.models.adaptive_metric import AdaptiveUserMetric
from athletica.models.exercise_log import ExerciseLog
from athletica.models.set_log import SetLog
from athletica.schemas.adaptive import FeedbackStats

T0 = datetime.datetime(2026, 3, 2, 10, 0, 0)


# ======================================================================
# Helpers
# ======================================================================


def _make_metric(**overrides) -> AdaptiveUserMetric:
    fields = dict(user_id="user-1", exercise_id="goblet_squat", total_sessions=5, preferred_rest_seconds=90,
                  rest_seconds_variance=0.0, times_planned=5, times_skipped=0, total_sets=15, total_reps=150,
                  total_volume_lifetime_kg=3000.0)
    fields.update(overrides)
    return AdaptiveUserMetric(**fields)


def _make_log(status: str = "completed", **overrides) -> ExerciseLog:
    fields = dict(id=1, session_id=1, exercise_id="goblet_squat", order_index=0, status=status, target_sets=3,
                  target_rest_seconds=90)
    fields.update(overrides)
    return ExerciseLog(**fields)


def _make_set(weight: float | None = 20.0, reps: int = 10, rpe: int | None = 7, form: int | None = 4,
              rest: int | None = None, set_number: int = 1) -> SetLog:
    return SetLog(exercise_log_id=1, set_number=set_number, reps_completed=reps, weight_kg=weight, rpe=rpe,
                  form_quality=form, rest_actual_seconds=rest, completed_at=T0)


def _lower_body() -> list:
    return [p for p in EXERCISE_CATALOG.values() if p.category == "lower_body"]


# ======================================================================
# Rest recommendation
# ======================================================================


class TestRestFactors:
    @pytest.mark.parametrize("goal, expected", [
        ("strength", 180),
        ("hypertrophy", 90),
        ("endurance", 45),
        (None, 90),
        ("power", 90),
    ])
    def test_base_rest_by_goal(self, goal, expected):
        assert base_rest(goal) == expected

    @pytest.mark.parametrize("rpe, expected", [
        (None, 1.0),
        (5, 0.8),
        (6, 0.8),
        (7, 1.0),
        (8, 1.0),
        (9, 1.2),
        (10, 1.4),
    ])
    def test_difficulty_bands(self, rpe, expected):
        assert difficulty_factor(rpe) == expected

    def test_fatigue_grows_per_set(self):
        assert fatigue_factor(1, 7) == 1.0
        assert fatigue_factor(3, 7) == pytest.approx(1.1)

    def test_fatigue_boost_at_high_rpe(self):
        assert fatigue_factor(3, 9) == pytest.approx(1 + 0.1 * 1.15)

    def test_fatigue_is_capped(self):
        assert fatigue_factor(20, 10) == 1.3


class TestHistoricalFactor:
    def test_neutral_without_history(self):
        assert historical_factor(None, 90) == 1.0
        assert historical_factor(_make_metric(total_sessions=0, preferred_rest_seconds=150), 90) == 1.0

    def test_pulls_towards_preferred_rest(self):
        assert historical_factor(_make_metric(preferred_rest_seconds=120), 90) == pytest.approx(120 / 90)

    def test_variance_damps_history(self):
        metric = _make_metric(preferred_rest_seconds=120, rest_seconds_variance=30.0)
        assert historical_factor(metric, 90) == pytest.approx(1 + (120 / 90 - 1) * 0.5)

    def test_high_variance_ignores_history(self):
        metric = _make_metric(preferred_rest_seconds=120, rest_seconds_variance=75.0)
        assert historical_factor(metric, 90) == 1.0


class TestMetricConfidence:
    def test_neutral_without_history(self):
        assert metric_confidence(None) == 0.5
        assert metric_confidence(_make_metric(total_sessions=0)) == 0.5

    def test_grows_with_history_and_consistency(self):
        # 0.7 × 10/20 + 0.3 × 0.8
        assert metric_confidence(_make_metric(total_sessions=10, consistency_score=80.0)) == 0.59

    def test_coverage_saturates(self):
        # 0.7 × 1 + 0.3 × 0.5 (default consistency)
        assert metric_confidence(_make_metric(total_sessions=40)) == 0.85


class TestRecommendRest:
    def test_third_set_at_rpe_nine_without_history(self):
        result = recommend_rest("goblet_squat", 3, rpe=9)
        # 90 × 1.2 × 1.115 × 1.0 = 120.4
        assert result.recommended_seconds == 120
        assert result.base_seconds == 90
        assert result.factors.difficulty == 1.2
        assert result.factors.fatigue == pytest.approx(1.115)
        assert result.factors.historical == 1.0
        assert result.confidence == 0.5
        assert result.reasoning.startswith("Base: 90s • +20% (RPE 9) • ")
        assert result.reasoning.endswith("(set 3)")

    def test_first_set_has_plain_reasoning(self):
        result = recommend_rest("goblet_squat", 1, rpe=7)
        assert result.recommended_seconds == 90
        assert result.reasoning == "Base: 90s"

    def test_clamped_to_maximum(self):
        result = recommend_rest("back_squat", 20, rpe=10, goal="strength")
        assert result.recommended_seconds == 300

    def test_clamped_to_minimum(self):
        metric = _make_metric(preferred_rest_seconds=10)
        result = recommend_rest("burpee", 1, rpe=5, goal="endurance", metric=metric)
        assert result.recommended_seconds == 30
        assert "(your pattern)" in result.reasoning

    def test_easier_effort_is_explained(self):
        result = recommend_rest("goblet_squat", 1, rpe=5)
        assert result.recommended_seconds == 72
        assert "-20% (easier effort)" in result.reasoning

    def test_custom_limits(self):
        cfg = AdaptiveConfig(max_rest_seconds=100)
        assert recommend_rest("back_squat", 1, goal="strength", config=cfg).recommended_seconds == 100


# ======================================================================
# Exercise recommendations
# ======================================================================


class TestClassification:
    def test_easier_candidate_on_injury_is_regression(self):
        assert classify_recommendation(get_exercise("back_squat"), get_exercise("goblet_squat"), "injury") == "regression"

    def test_easier_candidate_on_preference_is_similar(self):
        assert classify_recommendation(get_exercise("back_squat"), get_exercise("goblet_squat"),
                                       "preference") == "similar"

    def test_same_tier_is_alternative(self):
        assert classify_recommendation(get_exercise("back_squat"), get_exercise("bulgarian_split_squat"),
                                       "skipped") == "alternative"

    def test_harder_candidate_is_progression(self):
        assert classify_recommendation(get_exercise("back_squat"), get_exercise("front_squat"),
                                       "injury") == "progression"


class TestRecommendationConfidence:
    def test_category_and_overlap(self):
        # 0.5 + 0.3 + 0.2 × 3/4
        assert recommendation_confidence(get_exercise("back_squat"), get_exercise("goblet_squat")) == 0.95

    def test_other_category_scores_lower(self):
        # 0.5 + 0.2 × 2/4 (shared quadriceps and glutes)
        assert recommendation_confidence(get_exercise("back_squat"), get_exercise("jump_squat")) == 0.6

    def test_rejections_lower_confidence(self):
        feedback = FeedbackStats(responses=5, accepted=0)
        assert recommendation_confidence(get_exercise("back_squat"), get_exercise("goblet_squat"), feedback) == 0.85

    def test_capped_at_one(self):
        feedback = FeedbackStats(responses=10, accepted=10)
        assert recommendation_confidence(get_exercise("back_squat"), get_exercise("goblet_squat"), feedback) == 1.0


class TestRecommendExercises:
    def test_top_three_for_injury(self):
        result = recommend_exercises(get_exercise("back_squat"), _lower_body(), "injury")
        assert [s.exercise_id for s in result] == ["goblet_squat", "front_squat", "pistol_squat"]
        assert [s.recommendation_type for s in result] == ["regression", "progression", "progression"]
        assert [s.difficulty_comparison for s in result] == ["easier", "harder", "harder"]
        assert all(s.confidence == 0.95 for s in result)

    def test_only_same_category(self):
        candidates = _lower_body() + [get_exercise("jump_squat"), get_exercise("bench_press")]
        result = recommend_exercises(get_exercise("back_squat"), candidates, "skipped")
        assert all(EXERCISE_CATALOG[s.exercise_id].category == "lower_body" for s in result)
        assert all(s.exercise_id != "back_squat" for s in result)

    def test_sorted_and_above_minimum(self):
        result = recommend_exercises(get_exercise("push_up"), list(EXERCISE_CATALOG.values()), "preference")
        confidences = [s.confidence for s in result]
        assert confidences == sorted(confidences, reverse=True)
        assert all(c >= 0.6 for c in confidences)
        assert len(result) <= 3

    def test_feedback_reorders(self):
        feedback = {"goblet_squat": FeedbackStats(responses=5, accepted=0)}
        result = recommend_exercises(get_exercise("back_squat"), _lower_body(), "injury", feedback)
        assert [s.exercise_id for s in result] == ["front_squat", "pistol_squat", "walking_lunge"]

    def test_minimum_confidence_filters(self):
        cfg = AdaptiveConfig(min_recommendation_confidence=0.99)
        assert recommend_exercises(get_exercise("back_squat"), _lower_body(), "injury", config=cfg) == []

    def test_benefits(self):
        assert describe_benefits(get_exercise("goblet_squat"), "regression") == [
            "Reduces injury risk", "Improves form", "Targets lower_body"]
        assert describe_benefits(get_exercise("front_squat"), "alternative") == ["Targets lower_body"]


# ======================================================================
# One-rep max
# ======================================================================


class TestOneRepMax:
    def test_epley(self):
        assert epley(100.0, 5) == pytest.approx(116.667, abs=0.001)

    def test_single_set(self):
        result = estimate_one_rep_max("back_squat", [_make_set(weight=100.0, reps=5)])
        assert result.estimated_1rm_kg == 116.7
        # (1/20) × 0.7 + (1 − 0) × 0.3
        assert result.confidence == 0.335
        assert result.sample_size == 1

    def test_no_history(self):
        result = estimate_one_rep_max("back_squat", [])
        assert result.estimated_1rm_kg == 0.0
        assert result.confidence == 0.0
        assert result.sample_size == 0

    def test_ignores_unusable_sets(self):
        sets = [_make_set(weight=None, reps=10), _make_set(weight=60.0, reps=15), _make_set(weight=0.0, reps=5),
                _make_set(weight=60.0, reps=0)]
        assert estimate_one_rep_max("back_squat", sets).sample_size == 0

    def test_median_of_estimates(self):
        sets = [_make_set(weight=100.0, reps=5), _make_set(weight=100.0, reps=3), _make_set(weight=90.0, reps=10)]
        # 116.67, 110, 120 → median 116.67
        assert estimate_one_rep_max("back_squat", sets).estimated_1rm_kg == 116.7

    def test_window_uses_newest_sets(self):
        sets = [_make_set(weight=100.0, reps=5)] * 20 + [_make_set(weight=10.0, reps=5)] * 5
        result = estimate_one_rep_max("back_squat", sets)
        assert result.sample_size == 20
        assert result.estimated_1rm_kg == 116.7
        assert result.confidence == 1.0


# ======================================================================
# Metric learning
# ======================================================================


class TestUpdateMetric:
    def _first_session_sets(self) -> list[SetLog]:
        return [_make_set(reps=12, rpe=7, rest=None, set_number=1), _make_set(reps=10, rpe=8, rest=100, set_number=2),
                _make_set(reps=8, rpe=9, rest=120, set_number=3)]

    def test_first_observation_seeds_metric(self):
        sets = self._first_session_sets()
        metric = update_metric(None, "user-1", _make_log(), sets, list(reversed(sets)), T0)
        assert metric.user_id == "user-1"
        assert metric.exercise_id == "goblet_squat"
        assert metric.preferred_rest_seconds == 110
        assert metric.rest_seconds_variance == 10.0
        assert metric.average_rpe == 8.0
        assert metric.average_form_quality == 4.0
        assert metric.optimal_rep_range_min == 8
        assert metric.optimal_rep_range_max == 12
        assert metric.last_1rm_estimate_kg == 26.7
        assert metric.strength_progression_rate is None
        assert metric.total_sessions == 1
        assert metric.total_sets == 3
        assert metric.total_reps == 30
        assert metric.total_volume_lifetime_kg == 600.0
        assert metric.times_planned == 1
        assert metric.skip_rate == 0.0
        assert metric.model_version == MODEL_VERSION
        assert metric.last_calculated_at == T0

    def test_first_observation_confidence(self):
        sets = self._first_session_sets()
        metric = update_metric(None, "user-1", _make_log(), sets, sets, T0)
        assert metric.consistency_score is not None
        assert metric.confidence_score == pytest.approx(0.7 / 20 + 0.3 * metric.consistency_score / 100, abs=0.001)

    def test_skipped_exercise_only_updates_skip_rate(self):
        metric = update_metric(None, "user-1", _make_log(status="skipped"), [], [], T0)
        assert metric.times_planned == 1
        assert metric.times_skipped == 1
        assert metric.skip_rate == 1.0
        assert metric.total_sessions == 0
        assert metric.preferred_rest_seconds == 90
        assert metric.confidence_score == 0.5

    def test_existing_metric_is_smoothed(self):
        metric = _make_metric(preferred_rest_seconds=100, rest_seconds_variance=0.0, average_rpe=7.0,
                              total_sessions=4)
        sets = [_make_set(rpe=9, rest=150, set_number=1), _make_set(rpe=9, rest=150, set_number=2)]
        updated = update_metric(metric, "user-1", _make_log(), sets, sets, T0)
        assert updated is metric
        assert updated.preferred_rest_seconds == 110
        assert updated.rest_seconds_variance == 10.0
        assert updated.average_rpe == 7.4
        assert updated.total_sessions == 5
        assert updated.total_sets == 17
        assert updated.times_planned == 6

    def test_strength_progression_rate(self):
        metric = _make_metric(last_1rm_estimate_kg=100.0)
        sets = [_make_set(weight=100.0, reps=5)]
        updated = update_metric(metric, "user-1", _make_log(exercise_id="back_squat"), sets, sets, T0)
        assert updated.last_1rm_estimate_kg == 116.7
        assert updated.strength_progression_rate == 16.7

    def test_sets_without_ratings_keep_old_averages(self):
        metric = _make_metric(average_rpe=7.5, average_form_quality=4.2, consistency_score=70.0)
        sets = [_make_set(rpe=None, form=None)]
        updated = update_metric(metric, "user-1", _make_log(), sets, sets, T0)
        assert updated.average_rpe == 7.5
        assert updated.average_form_quality == 4.2
        assert updated.consistency_score == 70.0

"""Tests for the achievement rule table and evaluator."""

import datetime

import pytest

from athletica.engine.achievements import (ACHIEVEMENTS, Condition, ConditionKind, build_context,
                                           compute_current_streak, evaluate_achievements, total_points, )
from athletica.schemas.achievement import AchievementContext, LifetimeStats

NOW = datetime.datetime(2026, 3, 2, 11, 0, 0)
MORNING = datetime.datetime(2026, 3, 2, 10, 0, 0)


def _make_context(**overrides) -> AchievementContext:
    """A finished 9-set session by a user with a few workouts behind them."""
    fields = dict(sets_completed=9, sets_skipped=0, average_effort=7.5, rest_periods_skipped=0,
                  all_sets_good_form=False, duration=2700, estimated_duration=2700, lifetime_workout_count=3,
                  current_streak_days=2, lifetime_volume=500.0, lifetime_reps=300, start_time=MORNING)
    fields.update(overrides)
    return AchievementContext(**fields)


def _ids(ctx: AchievementContext) -> list[str]:
    return [a.achievement_id for a in evaluate_achievements(ctx, NOW)]


class TestRuleTable:
    def test_ids_are_unique(self):
        ids = [a.id for a in ACHIEVEMENTS]
        assert len(ids) == len(set(ids)) == 14

    def test_every_rule_has_conditions(self):
        assert all(a.conditions for a in ACHIEVEMENTS)

    def test_rarities_and_categories(self):
        assert {a.rarity for a in ACHIEVEMENTS} <= {"common", "rare", "epic", "legendary"}
        assert {a.category for a in ACHIEVEMENTS} == {"performance", "speed", "milestone", "streak", "volume",
                                                      "special"}


class TestPerformanceRules:
    def test_complete_moderate_session_is_consistent(self):
        assert _ids(_make_context(average_effort=6.0)) == ["consistent"]

    def test_all_sets_at_rpe_nine_is_beast_mode(self):
        ids = _ids(_make_context(average_effort=round((9 + 9 + 10) / 3, 2)))
        assert "beast_mode" in ids

    def test_beast_mode_boundary(self):
        assert "beast_mode" in _ids(_make_context(average_effort=9.0))
        assert "beast_mode" not in _ids(_make_context(average_effort=8.99))

    def test_perfect_form_needs_good_form_and_moderate_effort(self):
        assert "perfect_form" in _ids(_make_context(all_sets_good_form=True, average_effort=7.0))
        assert "perfect_form" not in _ids(_make_context(all_sets_good_form=True, average_effort=7.5))
        assert "perfect_form" not in _ids(_make_context(all_sets_good_form=False, average_effort=6.0))

    def test_missing_effort_never_satisfies(self):
        ids = _ids(_make_context(all_sets_good_form=True, average_effort=None))
        assert "perfect_form" not in ids
        assert "beast_mode" not in ids

    def test_skipped_set_breaks_consistency(self):
        assert "consistent" not in _ids(_make_context(sets_completed=8, sets_skipped=1))

    def test_empty_session_is_not_consistent(self):
        assert "consistent" not in _ids(_make_context(sets_completed=0, sets_skipped=0))

    def test_skipped_rest_is_no_rest_needed(self):
        assert "no_rest_needed" in _ids(_make_context(rest_periods_skipped=2))


class TestSpeedRule:
    def test_forty_five_minutes_against_sixty_is_speed_demon(self):
        assert "speed_demon" in _ids(_make_context(duration=2700, estimated_duration=3600))

    def test_exactly_twenty_percent_faster(self):
        assert "speed_demon" in _ids(_make_context(duration=2880, estimated_duration=3600))

    def test_slightly_slower_than_threshold(self):
        assert "speed_demon" not in _ids(_make_context(duration=2881, estimated_duration=3600))

    def test_no_estimate(self):
        assert "speed_demon" not in _ids(_make_context(duration=100, estimated_duration=0))


class TestMilestoneAndVolumeRules:
    @pytest.mark.parametrize("count, expected", [
        (1, "first_workout"),
        (10, "tenth_workout"),
        (100, "hundredth_workout"),
    ])
    def test_milestones_fire_on_exact_count(self, count, expected):
        assert expected in _ids(_make_context(lifetime_workout_count=count))

    def test_milestone_does_not_fire_again(self):
        ids = _ids(_make_context(lifetime_workout_count=11))
        assert "tenth_workout" not in ids
        assert "first_workout" not in ids

    @pytest.mark.parametrize("days, expected", [(7, "week_streak"), (30, "month_streak")])
    def test_streaks(self, days, expected):
        assert expected in _ids(_make_context(current_streak_days=days))

    def test_volume_thresholds(self):
        ids = _ids(_make_context(lifetime_volume=1000.0, lifetime_reps=10_000))
        assert "ton_lifted" in ids
        assert "ten_thousand_reps" in ids


class TestSpecialRules:
    def test_early_bird(self):
        assert "early_bird" in _ids(_make_context(start_time=datetime.datetime(2026, 3, 2, 5, 59)))
        assert "early_bird" not in _ids(_make_context(start_time=datetime.datetime(2026, 3, 2, 6, 0)))

    def test_night_owl(self):
        assert "night_owl" in _ids(_make_context(start_time=datetime.datetime(2026, 3, 2, 22, 0)))
        assert "night_owl" not in _ids(_make_context(start_time=datetime.datetime(2026, 3, 2, 21, 59)))

    def test_unknown_start_time(self):
        ids = _ids(_make_context(start_time=None))
        assert "early_bird" not in ids
        assert "night_owl" not in ids


class TestEvaluation:
    def test_single_timestamp_per_pass(self):
        unlocked = evaluate_achievements(_make_context(lifetime_workout_count=1, average_effort=9.5), NOW)
        assert len(unlocked) >= 3
        assert {a.unlocked_at for a in unlocked} == {NOW}

    def test_table_order(self):
        unlocked = evaluate_achievements(_make_context(lifetime_workout_count=1, average_effort=9.5), NOW)
        assert [a.achievement_id for a in unlocked] == ["beast_mode", "consistent", "first_workout"]

    def test_total_points(self):
        unlocked = evaluate_achievements(_make_context(lifetime_workout_count=1, average_effort=9.5), NOW)
        assert total_points(unlocked) == 100 + 75 + 25

    def test_custom_definitions(self):
        rule = ACHIEVEMENTS[0].model_copy(update={
            "id": "marathon", "conditions": (Condition(field="duration", kind=ConditionKind.AT_LEAST,
                                                       threshold=7200),)})
        assert evaluate_achievements(_make_context(duration=7200), NOW, [rule])[0].achievement_id == "marathon"
        assert evaluate_achievements(_make_context(duration=7199), NOW, [rule]) == []


class TestStreak:
    TODAY = datetime.date(2026, 3, 2)

    def _days(self, *offsets: int) -> list[datetime.date]:
        return [self.TODAY - datetime.timedelta(days=o) for o in offsets]

    def test_no_workouts(self):
        assert compute_current_streak([], self.TODAY) == 0

    def test_streak_ending_today(self):
        assert compute_current_streak(self._days(0, 1, 2), self.TODAY) == 3

    def test_streak_ending_yesterday_still_counts(self):
        assert compute_current_streak(self._days(1, 2, 3, 4), self.TODAY) == 4

    def test_broken_streak(self):
        assert compute_current_streak(self._days(2, 3, 4), self.TODAY) == 0

    def test_gap_stops_counting(self):
        assert compute_current_streak(self._days(0, 1, 3, 4, 5), self.TODAY) == 2

    def test_duplicate_dates(self):
        assert compute_current_streak(self._days(0, 0, 1), self.TODAY) == 2


class TestBuildContext:
    def test_flattens_session_and_lifetime(self):
        lifetime = LifetimeStats(workout_count=1, current_streak_days=1, total_volume_kg=320.0, total_reps=90)
        ctx = build_context(sets_completed=8, total_sets=9, rpes=[9, 9, 10], form_ratings=[4, 5, 4],
                            rest_periods_skipped=1, active_seconds=2400, estimated_seconds=2700, lifetime=lifetime,
                            start_time=MORNING)
        assert ctx.sets_skipped == 1
        assert ctx.average_effort == 9.33
        assert ctx.all_sets_good_form is True
        assert ctx.duration == 2400
        assert ctx.estimated_duration == 2700
        assert ctx.lifetime_workout_count == 1
        assert ctx.lifetime_volume == 320.0
        assert ctx.lifetime_reps == 90

    def test_no_ratings(self):
        ctx = build_context(sets_completed=0, total_sets=3, rpes=[], form_ratings=[], rest_periods_skipped=0,
                            active_seconds=0, estimated_seconds=2700, lifetime=LifetimeStats(), start_time=None)
        assert ctx.average_effort is None
        assert ctx.all_sets_good_form is False

    def test_one_poor_rating_breaks_good_form(self):
        ctx = build_context(sets_completed=3, total_sets=3, rpes=[7, 7, 7], form_ratings=[5, 5, 3],
                            rest_periods_skipped=0, active_seconds=1800, estimated_seconds=2700,
                            lifetime=LifetimeStats(), start_time=None)
        assert ctx.all_sets_good_form is False

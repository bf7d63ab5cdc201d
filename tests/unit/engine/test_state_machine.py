"""Tests for the session state machine.

Pure unit tests: the state machine only mutates in-memory rows, so the
session and its exercise logs are built without a database.
"""

import datetime

import pytest

from athletica.catalog.plans import PlannedExercise, WorkoutPlan
from athletica.core.exceptions import InvalidTransition, NotFound
from athletica.engine import state_machine as sm
from athletica.schemas.set_log import SetCreate

T0 = datetime.datetime(2026, 3, 2, 10, 0, 0)


# ======================================================================
# Helpers
# ======================================================================


def _at(seconds: int) -> datetime.datetime:
    return T0 + datetime.timedelta(seconds=seconds)


def _make_plan(exercises: int = 2, sets: int = 3, has_warmup: bool = True, rest: int = 90) -> WorkoutPlan:
    ids = ["goblet_squat", "push_up", "dumbbell_row", "plank"]
    return WorkoutPlan(workout_id="test_plan", display_name="Test Plan", has_warmup=has_warmup,
                       exercises=[PlannedExercise(exercise_id=ids[i], sets=sets, reps=10, weight_kg=20.0,
                                                  rest_seconds=rest) for i in range(exercises)], )


def _make_session(**plan_kwargs):
    plan = _make_plan(**plan_kwargs)
    session = sm.new_session("user-1", plan, T0)
    session.id = 1
    logs = sm.build_exercise_logs(session.id, plan)
    for index, log in enumerate(logs):
        log.id = index + 1
    return session, logs


def _set(reps: int = 10, weight: float = 20.0, rpe: int = 7, form: int = 4, **kwargs) -> SetCreate:
    return SetCreate(reps_completed=reps, weight_kg=weight, rpe=rpe, form_quality=form, **kwargs)


def _log_set(session, logs, sets_by_log, now, data=None, rest=None):
    """Log a set on the current exercise and keep the per-log history."""
    log = sm.current_exercise(session, logs)
    previous = sets_by_log.setdefault(log.id, [])
    set_log = sm.complete_set(session, logs, log, list(previous), data or _set(), now, rest)
    previous.append(set_log)
    return set_log


# ======================================================================
# Transition table
# ======================================================================

ALL_COMMANDS = [op for op in sm.ALLOWED_FROM if op != "record feedback"]


class TestTransitionTable:
    def test_start_only_from_idle(self):
        assert sm.can("idle", "start")
        for state in ("warmup", "exercise", "rest", "paused", "completed", "cancelled"):
            assert not sm.can(state, "start")

    def test_terminal_states_reject_lifecycle_commands(self):
        for state in sm.TERMINAL_STATES:
            for operation in ALL_COMMANDS:
                assert not sm.can(state, operation), f"{operation} allowed from {state}"

    def test_feedback_only_after_completion(self):
        assert sm.can("completed", "record feedback")
        assert not sm.can("cancelled", "record feedback")
        assert not sm.can("exercise", "record feedback")

    def test_ensure_allowed_names_allowed_states(self):
        session, _ = _make_session()
        with pytest.raises(InvalidTransition) as excinfo:
            sm.ensure_allowed(session, "pause")
        assert excinfo.value.state == "idle"
        assert "warmup" in excinfo.value.message


# ======================================================================
# Creation and start
# ======================================================================


class TestCreation:
    def test_new_session_is_idle_with_zeroed_counters(self):
        session, logs = _make_session(exercises=3, sets=4)
        assert session.state == "idle"
        assert session.total_exercises == 3
        assert session.total_sets == 12
        assert session.sets_completed == 0
        assert session.pause_intervals == []

    def test_exercise_logs_follow_plan_order(self):
        _, logs = _make_session(exercises=3)
        assert [log.order_index for log in logs] == [0, 1, 2]
        assert [log.exercise_id for log in logs] == ["goblet_squat", "push_up", "dumbbell_row"]
        assert all(log.status == "pending" for log in logs)
        assert logs[0].target_rest_seconds == 90


class TestStart:
    def test_start_with_warmup_enters_warmup(self):
        session, logs = _make_session(has_warmup=True)
        sm.start(session, logs, T0)
        assert session.state == "warmup"
        assert session.current_phase == "warmup"
        assert session.started_at == T0
        assert logs[0].status == "pending"

    def test_start_without_warmup_begins_first_exercise(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        assert session.state == "exercise"
        assert session.current_phase == "working_set"
        assert session.current_exercise_index == 0
        assert logs[0].status == "in_progress"
        assert logs[0].started_at == T0

    def test_start_twice_is_rejected(self):
        session, logs = _make_session()
        sm.start(session, logs, T0)
        with pytest.raises(InvalidTransition):
            sm.start(session, logs, _at(5))

    def test_start_bumps_realtime_version(self):
        session, logs = _make_session()
        sm.start(session, logs, T0)
        assert session.realtime["version"] == 1
        assert session.realtime["state"] == "warmup"


# ======================================================================
# Pause / resume
# ======================================================================


class TestPauseResume:
    def test_pause_and_resume_restore_state(self):
        session, logs = _make_session()
        sm.start(session, logs, T0)
        sm.start_exercise(session, logs, 0, _at(60))
        sm.pause(session, logs, _at(100))
        assert session.state == "paused"
        assert session.paused_from_state == "exercise"
        assert session.pause_intervals[-1]["resumed_at"] is None

        sm.resume(session, logs, _at(130))
        assert session.state == "exercise"
        assert session.paused_from_state is None
        assert session.total_paused_seconds == 30
        assert session.pause_intervals[0]["duration_seconds"] == 30
        assert session.pause_intervals[0]["resumed_at"] == _at(130).isoformat()

    def test_resume_shifts_phase_timer_past_the_pause(self):
        session, logs = _make_session()
        sm.start(session, logs, T0)
        sm.start_exercise(session, logs, 0, _at(60))
        sm.pause(session, logs, _at(100))
        sm.resume(session, logs, _at(130))
        assert session.phase_started_at == _at(90)

    def test_intervals_are_appended_in_order(self):
        session, logs = _make_session()
        sm.start(session, logs, T0)
        sm.pause(session, logs, _at(10))
        sm.resume(session, logs, _at(20))
        sm.pause(session, logs, _at(50))
        sm.resume(session, logs, _at(65))
        intervals = session.pause_intervals
        assert len(intervals) == 2
        assert intervals[0]["resumed_at"] <= intervals[1]["paused_at"]
        assert session.total_paused_seconds == 25
        assert session.state == "warmup"

    def test_pause_from_idle_is_rejected(self):
        session, logs = _make_session()
        with pytest.raises(InvalidTransition):
            sm.pause(session, logs, T0)

    def test_resume_when_not_paused_is_rejected(self):
        session, logs = _make_session()
        sm.start(session, logs, T0)
        with pytest.raises(InvalidTransition):
            sm.resume(session, logs, _at(5))


# ======================================================================
# Exercise and set flow
# ======================================================================


class TestCompleteSet:
    def test_set_moves_to_rest_with_planned_target(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        set_log = _log_set(session, logs, {}, _at(30))
        assert set_log.set_number == 1
        assert session.state == "rest"
        assert session.current_phase == "rest"
        assert session.rest_target_seconds == 90
        assert session.sets_completed == 1
        assert session.total_volume_kg == pytest.approx(200.0)
        assert logs[0].completed_sets == 1
        assert session.current_set_index == 1

    def test_explicit_rest_target_overrides_plan(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        _log_set(session, logs, {}, _at(30), rest=120)
        assert session.rest_target_seconds == 120

    def test_set_logged_from_rest_records_elapsed_rest(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        sets = {}
        _log_set(session, logs, sets, _at(30))
        second = _log_set(session, logs, sets, _at(120))
        assert second.set_number == 2
        assert second.rest_actual_seconds == 90
        assert second.rest_target_seconds == 90

    def test_last_set_of_exercise_advances(self):
        session, logs = _make_session(exercises=2, sets=2, has_warmup=False)
        sm.start(session, logs, T0)
        sets = {}
        _log_set(session, logs, sets, _at(10))
        _log_set(session, logs, sets, _at(20))
        assert logs[0].status == "completed"
        assert session.exercises_completed == 1
        assert session.current_exercise_index == 1
        assert logs[1].status == "in_progress"
        assert session.state == "exercise"
        assert session.completion_percentage == 50.0

    def test_finishing_an_earlier_exercise_keeps_the_current_one(self):
        session, logs = _make_session(exercises=3, sets=3, has_warmup=False)
        sm.start(session, logs, T0)
        sets = {}
        _log_set(session, logs, sets, _at(10))
        sm.start_exercise(session, logs, 1, _at(20))
        for offset in (30, 40):
            previous = sets.setdefault(logs[0].id, [])
            previous.append(sm.complete_set(session, logs, logs[0], list(previous), _set(), _at(offset)))

        assert [log.status for log in logs] == ["completed", "in_progress", "pending"]
        assert session.current_exercise_index == 1
        assert session.current_set_index == 0
        assert session.state == "exercise"
        assert session.rest_target_seconds is None
        assert session.exercises_completed == 1
        assert session.sets_completed == 3

    def test_last_planned_set_completes_session(self):
        session, logs = _make_session(exercises=2, sets=2, has_warmup=False)
        sm.start(session, logs, T0)
        sets = {}
        for offset in (10, 20, 30, 40):
            _log_set(session, logs, sets, _at(offset))
        assert session.state == "completed"
        assert session.completed_at == _at(40)
        assert session.current_exercise_index == session.total_exercises
        assert session.sets_completed == session.total_sets == 4
        assert session.completion_percentage == 100.0

    def test_cannot_log_more_sets_than_planned(self):
        session, logs = _make_session(exercises=2, sets=1, has_warmup=False)
        sm.start(session, logs, T0)
        _log_set(session, logs, {}, _at(10))
        with pytest.raises(InvalidTransition):
            sm.complete_set(session, logs, logs[0], [], _set(), _at(20))
        assert session.sets_completed <= session.total_sets

    def test_set_on_pending_exercise_is_rejected(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        with pytest.raises(InvalidTransition):
            sm.complete_set(session, logs, logs[1], [], _set(), _at(10))

    def test_set_during_warmup_is_rejected(self):
        session, logs = _make_session(has_warmup=True)
        sm.start(session, logs, T0)
        with pytest.raises(InvalidTransition):
            sm.complete_set(session, logs, logs[0], [], _set(), _at(10))

    def test_exercise_ratings_follow_logged_sets(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        sets = {}
        _log_set(session, logs, sets, _at(10), _set(rpe=6, form=5))
        _log_set(session, logs, sets, _at(100), _set(rpe=8, form=3))
        assert logs[0].average_rpe == 7.0
        assert logs[0].peak_rpe == 8
        assert logs[0].form_quality_average == 4.0


class TestExerciseCommands:
    def test_complete_exercise_early(self):
        session, logs = _make_session(exercises=2, sets=3, has_warmup=False)
        sm.start(session, logs, T0)
        _log_set(session, logs, {}, _at(10))
        sm.complete_exercise(session, logs, logs[0], _at(20))
        assert logs[0].status == "completed"
        assert logs[0].completed_sets == 1
        assert logs[0].duration_seconds == 20
        assert session.current_exercise_index == 1
        assert logs[1].status == "in_progress"

    def test_skip_current_exercise_moves_on(self):
        session, logs = _make_session(exercises=3, has_warmup=False)
        sm.start(session, logs, T0)
        sm.skip_exercise(session, logs, logs[0], _at(5), "equipment", notes="Rack taken",
                         alternative_exercise_id="leg_press")
        assert logs[0].status == "skipped"
        assert logs[0].skip_reason == "equipment"
        assert logs[0].alternative_exercise_id == "leg_press"
        assert session.exercises_completed == 0
        assert session.current_exercise_index == 1
        assert logs[1].status == "in_progress"

    def test_skip_during_warmup_only_moves_pointer(self):
        session, logs = _make_session(exercises=3, has_warmup=True)
        sm.start(session, logs, T0)
        sm.skip_exercise(session, logs, logs[0], _at(5), "injury")
        assert session.state == "warmup"
        assert session.current_exercise_index == 1
        assert logs[1].status == "pending"

    def test_skipping_every_exercise_completes_session(self):
        session, logs = _make_session(exercises=2, has_warmup=False)
        sm.start(session, logs, T0)
        sm.skip_exercise(session, logs, logs[0], _at(5), "time")
        sm.skip_exercise(session, logs, logs[1], _at(6), "time")
        assert session.state == "completed"
        assert session.completion_percentage == 0.0

    def test_skip_completed_exercise_is_rejected(self):
        session, logs = _make_session(exercises=2, sets=1, has_warmup=False)
        sm.start(session, logs, T0)
        _log_set(session, logs, {}, _at(10))
        with pytest.raises(InvalidTransition):
            sm.skip_exercise(session, logs, logs[0], _at(20), "other")

    def test_start_exercise_out_of_order_records_warmup(self):
        session, logs = _make_session(exercises=3, has_warmup=True)
        sm.start(session, logs, T0)
        sm.start_exercise(session, logs, 2, _at(300))
        assert session.current_exercise_index == 2
        assert logs[2].status == "in_progress"
        assert session.warmup_duration_seconds == 300

    def test_start_exercise_unknown_index(self):
        session, logs = _make_session(exercises=2)
        sm.start(session, logs, T0)
        with pytest.raises(NotFound):
            sm.start_exercise(session, logs, 5, _at(5))


class TestRest:
    def test_skip_rest_records_shortfall(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        sm.start_rest(session, logs, _at(10), 90)
        shortfall = sm.skip_rest(session, logs, _at(40))
        assert shortfall == 60
        assert session.rest_periods_skipped == 1
        assert session.rest_shortfall_seconds == 60
        assert session.state == "exercise"
        assert session.rest_target_seconds is None

    def test_full_rest_has_no_shortfall(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        sm.start_rest(session, logs, _at(10), 60)
        assert sm.skip_rest(session, logs, _at(80)) == 0
        assert session.rest_periods_skipped == 0

    def test_start_rest_defaults_to_planned_rest(self):
        session, logs = _make_session(has_warmup=False, rest=75)
        sm.start(session, logs, T0)
        sm.start_rest(session, logs, _at(10))
        assert session.rest_target_seconds == 75

    def test_skip_rest_outside_rest_is_rejected(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        with pytest.raises(InvalidTransition):
            sm.skip_rest(session, logs, _at(10))


# ======================================================================
# Terminal transitions
# ======================================================================


class TestCompletion:
    def test_complete_from_paused_excludes_pause(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        sm.pause(session, logs, _at(600))
        sm.complete(session, logs, _at(900))
        assert session.state == "completed"
        assert session.total_duration_seconds == 900
        assert session.total_paused_seconds == 300
        assert session.active_duration_seconds == 600
        assert session.pause_intervals[-1]["resumed_at"] is not None

    def test_open_exercises_are_closed_at_completion(self):
        session, logs = _make_session(exercises=3, sets=3, has_warmup=False)
        sm.start(session, logs, T0)
        _log_set(session, logs, {}, _at(10))
        sm.complete(session, logs, _at(60))
        assert logs[0].status == "completed"
        assert logs[1].status == "pending"
        assert session.exercises_completed == 1

    def test_untouched_current_exercise_fails(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        sm.complete(session, logs, _at(60))
        assert logs[0].status == "failed"
        assert session.exercises_completed == 0

    def test_cooldown_duration_is_recorded(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        sm.start_cooldown(session, logs, _at(600))
        assert session.current_phase == "cooldown"
        sm.complete(session, logs, _at(900))
        assert session.cooldown_duration_seconds == 300

    def test_cancel_from_paused(self):
        session, logs = _make_session()
        sm.start(session, logs, T0)
        sm.pause(session, logs, _at(100))
        sm.cancel(session, logs, _at(160))
        assert session.state == "cancelled"
        assert session.cancelled_at == _at(160)
        assert session.total_paused_seconds == 60
        assert session.active_duration_seconds == 100

    def test_terminal_session_rejects_commands(self):
        session, logs = _make_session()
        sm.cancel(session, logs, T0)
        with pytest.raises(InvalidTransition):
            sm.start(session, logs, _at(1))
        with pytest.raises(InvalidTransition):
            sm.complete(session, logs, _at(1))
        with pytest.raises(InvalidTransition):
            sm.cancel(session, logs, _at(1))

    def test_feedback_requires_completion(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        with pytest.raises(InvalidTransition):
            sm.record_feedback(session, logs, _at(10), difficulty_rating=3)
        sm.complete(session, logs, _at(20))
        sm.record_feedback(session, logs, _at(30), difficulty_rating=4, energy_level=2, notes="Tough day")
        assert session.difficulty_rating == 4
        assert session.energy_level == 2
        assert session.mood_rating is None
        assert session.notes == "Tough day"


# ======================================================================
# Realtime snapshot
# ======================================================================


class TestSnapshot:
    def test_every_operation_bumps_version(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        _log_set(session, logs, {}, _at(30))
        sm.pause(session, logs, _at(40))
        sm.resume(session, logs, _at(50))
        assert session.realtime["version"] == 4

    def test_snapshot_tracks_position(self):
        session, logs = _make_session(has_warmup=False)
        sm.start(session, logs, T0)
        _log_set(session, logs, {}, _at(30))
        snapshot = session.realtime
        assert snapshot["state"] == "rest"
        assert snapshot["current_exercise_id"] == "goblet_squat"
        assert snapshot["current_set_number"] == 2
        assert snapshot["rest_target_seconds"] == 90
        assert snapshot["total_reps_completed"] == 10

    def test_completion_percentage_without_exercises(self):
        session, _ = _make_session()
        session.total_exercises = 0
        assert sm.completion_percentage(session) == 0.0

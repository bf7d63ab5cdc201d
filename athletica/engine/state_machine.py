"""
Session state machine.

Owns the lifecycle and current position of a workout session::

    idle ──► warmup ──► exercise ⇄ rest ──► completed
                 │          │        │
                 └──────► paused ◄───┘        (any non-terminal) ──► cancelled

``paused`` is reachable from ``warmup``, ``exercise`` and ``rest`` and
resumes to the state it interrupted.  ``completed`` and ``cancelled``
are terminal.

Every operation checks the current state against :data:`ALLOWED_FROM`
before touching anything and raises :class:`InvalidTransition`
otherwise.  Operations mutate the passed-in rows in memory only; the
caller (:class:`~athletica.services.session_service.SessionService`)
owns the unit of work that persists them, and is also responsible for
triggering analytics recomputation.

Orthogonal to the lifecycle state is the *phase*
(``warmup``, ``working_set``, ``rest``, ``cooldown``), which only
records what the user is physically doing.

Invariants maintained here
--------------------------

* ``sets_completed <= total_sets``: a set can only be logged on an
  ``in_progress`` exercise that still has planned sets left.
* ``0 <= current_exercise_index <= total_exercises``; it equals
  ``total_exercises`` only once the last exercise is done.
* Pause intervals are appended closed-then-open and never overlap;
  ``resumed_at >= paused_at`` for every closed interval.
* ``active_duration = total_duration - total_paused_seconds``.
"""

from __future__ import annotations

import datetime
import logging
from enum import Enum
from typing import Optional

from athletica.catalog.plans import WorkoutPlan
from athletica.core.clock import seconds_between
from athletica.core.exceptions import InvalidTransition, NotFound
from athletica.models.exercise_log import ExerciseLog
from athletica.models.set_log import SetLog
from athletica.models.workout_session import WorkoutSession
from athletica.schemas.realtime import RealtimeSnapshot
from athletica.schemas.set_log import SetCreate

logger = logging.getLogger(__name__)


# ======================================================================
# States, phases and the transition table
# ======================================================================


class SessionState(str, Enum):
    IDLE = "idle"
    WARMUP = "warmup"
    EXERCISE = "exercise"
    REST = "rest"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionPhase(str, Enum):
    WARMUP = "warmup"
    WORKING_SET = "working_set"
    REST = "rest"
    COOLDOWN = "cooldown"


class ExerciseStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


TERMINAL_STATES: frozenset[str] = frozenset({SessionState.COMPLETED.value, SessionState.CANCELLED.value})
ACTIVE_STATES: frozenset[str] = frozenset(
    {SessionState.WARMUP.value, SessionState.EXERCISE.value, SessionState.REST.value})

_S = SessionState

ALLOWED_FROM: dict[str, tuple[SessionState, ...]] = {
    "start": (_S.IDLE,),
    "pause": (_S.WARMUP, _S.EXERCISE, _S.REST),
    "resume": (_S.PAUSED,),
    "start exercise": (_S.WARMUP, _S.EXERCISE, _S.REST),
    "complete a set": (_S.EXERCISE, _S.REST),
    "complete exercise": (_S.EXERCISE, _S.REST),
    "skip exercise": (_S.WARMUP, _S.EXERCISE, _S.REST),
    "start rest": (_S.EXERCISE,),
    "skip rest": (_S.REST,),
    "start cooldown": (_S.EXERCISE, _S.REST),
    "complete": (_S.WARMUP, _S.EXERCISE, _S.REST, _S.PAUSED),
    "cancel": (_S.IDLE, _S.WARMUP, _S.EXERCISE, _S.REST, _S.PAUSED),
    "record feedback": (_S.COMPLETED,),
}


def can(state: str, operation: str) -> bool:
    """Whether *operation* is permitted from *state*."""
    return state in {s.value for s in ALLOWED_FROM[operation]}


def ensure_allowed(session: WorkoutSession, operation: str) -> None:
    """Raise :class:`InvalidTransition` unless *operation* is allowed now."""
    if not can(session.state, operation):
        allowed = tuple(s.value for s in ALLOWED_FROM[operation])
        raise InvalidTransition(operation, session.state, allowed)


# ======================================================================
# Creation
# ======================================================================


def new_session(user_id: str, plan: WorkoutPlan, now: datetime.datetime,
                scheduled_at: Optional[datetime.datetime] = None, ) -> WorkoutSession:
    """Build an ``idle`` session with zeroed counters for *plan*."""
    session = WorkoutSession(user_id=user_id, workout_id=plan.workout_id, state=SessionState.IDLE.value,
                             has_warmup=plan.has_warmup, scheduled_at=scheduled_at,
                             total_exercises=len(plan.exercises), total_sets=plan.total_sets, pause_intervals=[],
                             realtime={}, created_at=now, updated_at=now, )
    return session


def build_exercise_logs(session_id: int, plan: WorkoutPlan) -> list[ExerciseLog]:
    """One ``pending`` log per planned exercise, in plan order."""
    return [ExerciseLog(session_id=session_id, exercise_id=planned.exercise_id, order_index=index,
                        status=ExerciseStatus.PENDING.value, target_sets=planned.sets, target_reps=planned.reps,
                        target_weight_kg=planned.weight_kg, target_duration_seconds=planned.duration_seconds,
                        target_rest_seconds=planned.rest_seconds, ) for index, planned in enumerate(plan.exercises)]


# ======================================================================
# Lifecycle
# ======================================================================


def start(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
    """``idle → warmup``, or straight into the first exercise without warmup."""
    ensure_allowed(session, "start")
    session.started_at = now
    if session.has_warmup:
        _enter(session, SessionState.WARMUP, SessionPhase.WARMUP, now)
    else:
        _begin_exercise(session, _ordered(logs)[0], now)
    _touch(session, logs, now)
    logger.info("Session %s started in '%s'", session.id, session.state)


def pause(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
    """Open a pause interval and remember the interrupted state."""
    ensure_allowed(session, "pause")
    session.paused_from_state = session.state
    session.paused_at = now
    # Reassign (never mutate) so the JSON column is flagged dirty
    session.pause_intervals = list(session.pause_intervals or []) + [
        {"paused_at": now.isoformat(), "resumed_at": None, "duration_seconds": 0}]
    session.state = SessionState.PAUSED.value
    _touch(session, logs, now)
    logger.info("Session %s paused from '%s'", session.id, session.paused_from_state)


def resume(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
    """Close the open pause interval and restore the interrupted state."""
    ensure_allowed(session, "resume")
    duration = _close_pause(session, now)
    session.state = session.paused_from_state or SessionState.EXERCISE.value
    session.paused_from_state = None
    # The current phase timer excludes the pause
    if session.phase_started_at is not None:
        session.phase_started_at = session.phase_started_at + datetime.timedelta(seconds=duration)
    _touch(session, logs, now)
    logger.info("Session %s resumed to '%s' after %ss", session.id, session.state, duration)


def complete(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
    """Terminal transition to ``completed``."""
    ensure_allowed(session, "complete")
    _finish_session(session, logs, now)
    _touch(session, logs, now)


def cancel(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
    """Terminal transition to ``cancelled``."""
    ensure_allowed(session, "cancel")
    if session.state == SessionState.PAUSED.value:
        _close_pause(session, now)
    _finalize_durations(session, now)
    session.state = SessionState.CANCELLED.value
    session.current_phase = None
    session.cancelled_at = now
    session.rest_target_seconds = None
    _touch(session, logs, now)
    logger.info("Session %s cancelled after %ss active", session.id, session.active_duration_seconds)


def record_feedback(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime,
                    difficulty_rating: Optional[int] = None, energy_level: Optional[int] = None,
                    mood_rating: Optional[int] = None, notes: Optional[str] = None, ) -> None:
    """Store post-session ratings (only once the session is completed)."""
    ensure_allowed(session, "record feedback")
    if difficulty_rating is not None:
        session.difficulty_rating = difficulty_rating
    if energy_level is not None:
        session.energy_level = energy_level
    if mood_rating is not None:
        session.mood_rating = mood_rating
    if notes is not None:
        session.notes = notes
    _touch(session, logs, now)


# ======================================================================
# Exercise and set flow
# ======================================================================


def start_exercise(session: WorkoutSession, logs: list[ExerciseLog], index: int,
                   now: datetime.datetime) -> ExerciseLog:
    """Mark the exercise at *index* ``in_progress`` and make it current."""
    ensure_allowed(session, "start exercise")
    log = exercise_at(logs, index)
    if log.status not in (ExerciseStatus.PENDING.value, ExerciseStatus.IN_PROGRESS.value):
        raise InvalidTransition("start exercise", log.status, subject=f"exercise {index}")
    _begin_exercise(session, log, now)
    _touch(session, logs, now)
    return log


def complete_set(session: WorkoutSession, logs: list[ExerciseLog], log: ExerciseLog, previous_sets: list[SetLog],
                 data: SetCreate, now: datetime.datetime, rest_target_seconds: Optional[int] = None, ) -> SetLog:
    """Append a set, update running totals and move to rest or onwards.

    Allowed from ``exercise`` and from ``rest``; logging a set straight
    from rest records the elapsed rest on the new set.  *rest_target_seconds*
    is the rest that follows this set when more sets remain (the planned
    rest of the exercise if omitted).
    """
    ensure_allowed(session, "complete a set")
    if log.status != ExerciseStatus.IN_PROGRESS.value:
        raise InvalidTransition("complete a set", log.status, subject=f"exercise {log.order_index}")
    if log.completed_sets >= log.target_sets or session.sets_completed >= session.total_sets:
        raise InvalidTransition("complete a set", "all planned sets logged", subject=f"exercise {log.order_index}")
    was_current = log.order_index == session.current_exercise_index

    rest_actual = data.rest_actual_seconds
    rest_target = data.rest_target_seconds
    if session.state == SessionState.REST.value:
        if rest_actual is None:
            rest_actual = seconds_between(session.phase_started_at, now)
        if rest_target is None:
            rest_target = session.rest_target_seconds

    weight = data.weight_kg or 0.0
    set_log = SetLog(exercise_log_id=log.id, set_number=log.completed_sets + 1, set_type=data.set_type,
                     reps_target=data.reps_target if data.reps_target is not None else log.target_reps,
                     reps_completed=data.reps_completed, weight_kg=data.weight_kg,
                     duration_target_seconds=data.duration_target_seconds or log.target_duration_seconds,
                     duration_actual_seconds=data.duration_actual_seconds, rest_target_seconds=rest_target,
                     rest_actual_seconds=rest_actual, rest_quality=data.rest_quality, rpe=data.rpe,
                     form_quality=data.form_quality, was_failure=data.was_failure, tempo=data.tempo,
                     time_under_tension_seconds=data.time_under_tension_seconds, notes=data.notes,
                     started_at=data.started_at, completed_at=now, )

    # Exercise totals
    volume = weight * data.reps_completed
    log.completed_sets += 1
    log.total_volume_kg += volume
    log.total_reps += data.reps_completed
    _refresh_exercise_ratings(log, previous_sets + [set_log])

    # Session totals
    session.sets_completed += 1
    session.total_volume_kg += volume
    session.total_reps += data.reps_completed
    if was_current:
        session.current_set_index = log.completed_sets
    logger.debug("Session %s: set %s of exercise %s logged (%s x %s kg)", session.id, set_log.set_number,
                 log.exercise_id, data.reps_completed, weight)

    if log.completed_sets < log.target_sets:
        target = rest_target_seconds if rest_target_seconds is not None else log.target_rest_seconds
        _enter_rest(session, target, now)
    else:
        _finish_exercise(session, log, ExerciseStatus.COMPLETED, now)
        if was_current:
            _advance(session, logs, now)
        else:
            # The pointer already sits on another exercise; carry on with it
            session.rest_target_seconds = None
            _enter(session, SessionState.EXERCISE, SessionPhase.WORKING_SET, now)
    _touch(session, logs, now)
    return set_log


def complete_exercise(session: WorkoutSession, logs: list[ExerciseLog], log: ExerciseLog,
                      now: datetime.datetime) -> None:
    """End an exercise early (fewer sets than planned) as completed."""
    ensure_allowed(session, "complete exercise")
    if log.status != ExerciseStatus.IN_PROGRESS.value:
        raise InvalidTransition("complete exercise", log.status, subject=f"exercise {log.order_index}")
    was_current = log.order_index == session.current_exercise_index
    _finish_exercise(session, log, ExerciseStatus.COMPLETED, now)
    if was_current:
        _advance(session, logs, now)
    _touch(session, logs, now)


def skip_exercise(session: WorkoutSession, logs: list[ExerciseLog], log: ExerciseLog, now: datetime.datetime,
                  reason: str, notes: Optional[str] = None, alternative_exercise_id: Optional[str] = None, ) -> None:
    """Mark an exercise ``skipped`` and keep the reason for later learning."""
    ensure_allowed(session, "skip exercise")
    if log.status not in (ExerciseStatus.PENDING.value, ExerciseStatus.IN_PROGRESS.value):
        raise InvalidTransition("skip exercise", log.status, subject=f"exercise {log.order_index}")
    was_current = log.order_index == session.current_exercise_index
    log.skip_reason = reason
    log.skip_notes = notes
    log.alternative_exercise_id = alternative_exercise_id
    _finish_exercise(session, log, ExerciseStatus.SKIPPED, now)
    logger.info("Session %s: exercise %s skipped (%s)", session.id, log.exercise_id, reason)
    if was_current:
        # During warmup only the pointer moves; the next exercise starts explicitly
        _advance(session, logs, now, auto_start=session.state != SessionState.WARMUP.value)
    _touch(session, logs, now)


def start_rest(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime,
               target_seconds: Optional[int] = None, ) -> None:
    """Enter ``rest`` with an optional target."""
    ensure_allowed(session, "start rest")
    if target_seconds is None:
        target_seconds = current_exercise(session, logs).target_rest_seconds if _has_current(session) else None
    _enter_rest(session, target_seconds, now)
    _touch(session, logs, now)


def skip_rest(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> int:
    """Leave ``rest`` early.  Returns the shortfall against the rest target."""
    ensure_allowed(session, "skip rest")
    elapsed = seconds_between(session.phase_started_at, now)
    shortfall = max(0, (session.rest_target_seconds or 0) - elapsed)
    if shortfall > 0:
        session.rest_periods_skipped += 1
        session.rest_shortfall_seconds += shortfall
    session.rest_target_seconds = None
    _enter(session, SessionState.EXERCISE, SessionPhase.WORKING_SET, now)
    _touch(session, logs, now)
    logger.debug("Session %s: rest skipped with %ss shortfall", session.id, shortfall)
    return shortfall


def start_cooldown(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
    """Switch the phase to ``cooldown``; its duration is recorded at completion."""
    ensure_allowed(session, "start cooldown")
    session.rest_target_seconds = None
    _enter(session, SessionState.EXERCISE, SessionPhase.COOLDOWN, now)
    _touch(session, logs, now)


# ======================================================================
# Queries
# ======================================================================


def exercise_at(logs: list[ExerciseLog], index: int) -> ExerciseLog:
    for log in logs:
        if log.order_index == index:
            return log
    raise NotFound("Exercise", index)


def current_exercise(session: WorkoutSession, logs: list[ExerciseLog]) -> ExerciseLog:
    """The exercise at ``current_exercise_index`` (:class:`NotFound` past the end)."""
    return exercise_at(logs, session.current_exercise_index)


def completion_percentage(session: WorkoutSession) -> float:
    """Exercises completed over planned, 0-100, one decimal."""
    if session.total_exercises <= 0:
        return 0.0
    return round(session.exercises_completed / session.total_exercises * 100, 1)


def build_snapshot(session: WorkoutSession, logs: list[ExerciseLog], version: int,
                   now: datetime.datetime) -> RealtimeSnapshot:
    current_id = None
    current_set = 0
    if _has_current(session):
        log = current_exercise(session, logs)
        current_id = log.exercise_id
        current_set = log.completed_sets + 1 if log.completed_sets < log.target_sets else log.completed_sets
    return RealtimeSnapshot(version=version, state=session.state, phase=session.current_phase,
                            current_exercise_index=session.current_exercise_index, current_exercise_id=current_id,
                            current_set_number=current_set, phase_started_at=session.phase_started_at,
                            rest_target_seconds=session.rest_target_seconds,
                            exercises_completed=session.exercises_completed, sets_completed=session.sets_completed,
                            total_reps_completed=session.total_reps, total_volume_kg=round(session.total_volume_kg, 2),
                            estimated_calories=session.calories_burned, last_updated_at=now, )


# ======================================================================
# Internals
# ======================================================================


def _ordered(logs: list[ExerciseLog]) -> list[ExerciseLog]:
    return sorted(logs, key=lambda log: log.order_index)


def _has_current(session: WorkoutSession) -> bool:
    return 0 <= session.current_exercise_index < session.total_exercises


def _enter(session: WorkoutSession, state: SessionState, phase: Optional[SessionPhase],
           now: datetime.datetime) -> None:
    if session.state == SessionState.WARMUP.value and state != SessionState.WARMUP:
        session.warmup_duration_seconds = seconds_between(session.phase_started_at, now)
    session.state = state.value
    session.current_phase = phase.value if phase else None
    session.phase_started_at = now


def _enter_rest(session: WorkoutSession, target_seconds: Optional[int], now: datetime.datetime) -> None:
    _enter(session, SessionState.REST, SessionPhase.REST, now)
    session.rest_target_seconds = target_seconds


def _begin_exercise(session: WorkoutSession, log: ExerciseLog, now: datetime.datetime) -> None:
    log.status = ExerciseStatus.IN_PROGRESS.value
    if log.started_at is None:
        log.started_at = now
    session.current_exercise_index = log.order_index
    session.current_set_index = log.completed_sets
    session.rest_target_seconds = None
    _enter(session, SessionState.EXERCISE, SessionPhase.WORKING_SET, now)


def _finish_exercise(session: WorkoutSession, log: ExerciseLog, status: ExerciseStatus,
                     now: datetime.datetime) -> None:
    log.status = status.value
    log.completed_at = now
    log.duration_seconds = seconds_between(log.started_at, now) if log.started_at else 0
    if status == ExerciseStatus.COMPLETED:
        session.exercises_completed += 1
    session.completion_percentage = completion_percentage(session)


def _advance(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime,
             auto_start: bool = True) -> None:
    """Move to the next open exercise, or complete the session if none is left."""
    open_logs = [log for log in _ordered(logs) if
                 log.status in (ExerciseStatus.PENDING.value, ExerciseStatus.IN_PROGRESS.value)]
    if not open_logs:
        session.current_exercise_index = session.total_exercises
        session.current_set_index = 0
        _finish_session(session, logs, now)
        return
    after = [log for log in open_logs if log.order_index > session.current_exercise_index]
    nxt = after[0] if after else open_logs[0]
    if auto_start:
        _begin_exercise(session, nxt, now)
    else:
        session.current_exercise_index = nxt.order_index
        session.current_set_index = nxt.completed_sets


def _close_pause(session: WorkoutSession, now: datetime.datetime) -> int:
    intervals = [dict(i) for i in session.pause_intervals or []]
    duration = seconds_between(session.paused_at, now)
    if intervals and intervals[-1].get("resumed_at") is None:
        intervals[-1]["resumed_at"] = now.isoformat()
        intervals[-1]["duration_seconds"] = duration
    session.pause_intervals = intervals
    session.total_paused_seconds += duration
    session.resumed_at = now
    session.paused_at = None
    return duration


def _finalize_durations(session: WorkoutSession, now: datetime.datetime) -> None:
    session.total_duration_seconds = seconds_between(session.started_at, now)
    session.active_duration_seconds = max(0, session.total_duration_seconds - session.total_paused_seconds)
    if session.current_phase == SessionPhase.COOLDOWN.value:
        session.cooldown_duration_seconds = seconds_between(session.phase_started_at, now)
    if session.state == SessionState.WARMUP.value:
        session.warmup_duration_seconds = seconds_between(session.phase_started_at, now)


def _finish_session(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
    if session.state == SessionState.PAUSED.value:
        duration = _close_pause(session, now)
        session.state = session.paused_from_state or SessionState.EXERCISE.value
        session.paused_from_state = None
        if session.phase_started_at is not None:
            session.phase_started_at = session.phase_started_at + datetime.timedelta(seconds=duration)
    _finalize_durations(session, now)
    # Partially performed exercises count as completed; untouched ones as failed
    for log in logs:
        if log.status == ExerciseStatus.IN_PROGRESS.value:
            status = ExerciseStatus.COMPLETED if log.completed_sets > 0 else ExerciseStatus.FAILED
            _finish_exercise(session, log, status, now)
    session.state = SessionState.COMPLETED.value
    session.current_phase = None
    session.completed_at = now
    session.rest_target_seconds = None
    session.completion_percentage = completion_percentage(session)
    logger.info("Session %s completed: %s/%s sets, %.1f kg, %ss active", session.id, session.sets_completed,
                session.total_sets, session.total_volume_kg, session.active_duration_seconds)


def _refresh_exercise_ratings(log: ExerciseLog, sets: list[SetLog]) -> None:
    rpes = [s.rpe for s in sets if s.rpe is not None]
    forms = [s.form_quality for s in sets if s.form_quality is not None]
    log.average_rpe = round(sum(rpes) / len(rpes), 2) if rpes else None
    log.peak_rpe = max(rpes) if rpes else None
    log.form_quality_average = round(sum(forms) / len(forms), 2) if forms else None


def _touch(session: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
    """Stamp the row and bump the realtime snapshot version."""
    version = int((session.realtime or {}).get("version", 0)) + 1
    session.realtime = build_snapshot(session, logs, version, now).model_dump(mode="json")
    session.updated_at = now

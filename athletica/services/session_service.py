"""
Workout session service.

Every command follows the same path:

1. load the owned session and its exercise logs,
2. apply the state-machine operation to the in-memory rows,
3. commit everything in one unit of work.

When a command moves the session to ``completed`` (explicitly, or by
logging the last planned set) the completion pipeline runs inside the
same unit of work: the analytics summary is frozen, adaptive metrics are
learned and achievements are evaluated.  A failed commit rolls all of it
back and raises :class:`PersistenceFailure`.
"""

import datetime
import logging
from typing import Callable, Optional

from sqlmodel import Session

from athletica.catalog.base import WorkoutPlanProvider
from athletica.catalog.providers import RegisteredPlanProvider
from athletica.core.clock import Clock, utcnow
from athletica.core.exceptions import NotFound
from athletica.db.repositories.exercise_log import ExerciseLogRepository
from athletica.db.repositories.set_log import SetLogRepository
from athletica.db.repositories.workout_session import WorkoutSessionRepository
from athletica.db.unit_of_work import unit_of_work
from athletica.engine import state_machine as sm
from athletica.models.exercise_log import ExerciseLog
from athletica.models.workout_session import WorkoutSession
from athletica.schemas.realtime import RealtimeSnapshot
from athletica.schemas.session import (CompleteExerciseRequest, CompletionResult, ExerciseLogResponse,
                                       SessionCreate, SessionFeedback, SessionResponse, SkipExerciseRequest,
                                       StartRestRequest, )
from athletica.schemas.set_log import SetCreate, SetLogResponse
from athletica.services.achievement_service import AchievementService
from athletica.services.adaptive_service import AdaptiveService
from athletica.services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

Command = Callable[[WorkoutSession, list[ExerciseLog], datetime.datetime], object]


class SessionService:
    """Service for the workout session lifecycle and the exercise/set flow."""

    def __init__(self, session: Session, clock: Clock = utcnow, plans: Optional[WorkoutPlanProvider] = None):
        self.db = session
        self.repository = WorkoutSessionRepository(session)
        self.exercise_logs = ExerciseLogRepository(session)
        self.set_logs = SetLogRepository(session)
        self.clock = clock
        self.plans = plans or RegisteredPlanProvider()
        self.analytics = AnalyticsService(session, clock)
        self.adaptive = AdaptiveService(session, clock, plans=self.plans)
        self.achievements = AchievementService(session, clock, plans=self.plans)

    # ------------------------------------------------------------------
    # Creation and queries
    # ------------------------------------------------------------------

    def create(self, user_id: str, data: SessionCreate) -> SessionResponse:
        plan = self.plans.get_plan(data.workout_id)
        if plan is None:
            raise NotFound("Workout", data.workout_id)
        now = self.clock()
        entry = sm.new_session(user_id, plan, now, data.scheduled_at)
        with unit_of_work(self.db, "create session"):
            self.repository.add(entry)
            self.db.flush()
            logs = self.exercise_logs.add_all(sm.build_exercise_logs(entry.id, plan))
            entry.realtime = sm.build_snapshot(entry, logs, 1, now).model_dump(mode="json")
        logger.info("Session %s created for user %s from '%s'", entry.id, user_id, plan.workout_id)
        return self._to_response(entry)

    def get(self, user_id: str, session_id: int) -> SessionResponse:
        return self._to_response(self._get_owned_session(user_id, session_id))

    def list_sessions(self, user_id: str, state: Optional[str] = None, limit: int = 50,
                      offset: int = 0, ) -> list[SessionResponse]:
        entries = self.repository.list_by_user(user_id, state, limit, offset)
        return [self._to_response(e, include_exercises=False) for e in entries]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, user_id: str, session_id: int) -> SessionResponse:
        return self._run(user_id, session_id, "start", sm.start)

    def pause(self, user_id: str, session_id: int) -> SessionResponse:
        return self._run(user_id, session_id, "pause", sm.pause)

    def resume(self, user_id: str, session_id: int) -> SessionResponse:
        return self._run(user_id, session_id, "resume", sm.resume)

    def complete(self, user_id: str, session_id: int) -> SessionResponse:
        return self._run(user_id, session_id, "complete", sm.complete)

    def cancel(self, user_id: str, session_id: int) -> SessionResponse:
        return self._run(user_id, session_id, "cancel", sm.cancel)

    def submit_feedback(self, user_id: str, session_id: int, data: SessionFeedback) -> SessionResponse:
        return self._run(user_id, session_id, "record feedback",
                         lambda entry, logs, now: sm.record_feedback(entry, logs, now, data.difficulty_rating,
                                                                     data.energy_level, data.mood_rating,
                                                                     data.notes))

    # ------------------------------------------------------------------
    # Exercise and set flow
    # ------------------------------------------------------------------

    def start_exercise(self, user_id: str, session_id: int, index: int) -> SessionResponse:
        return self._run(user_id, session_id, "start exercise",
                         lambda entry, logs, now: sm.start_exercise(entry, logs, index, now))

    def complete_set(self, user_id: str, session_id: int, data: SetCreate) -> SessionResponse:
        def command(entry: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
            log = self._resolve_log(entry, logs, data.exercise_log_id, "complete a set")
            previous = self.set_logs.list_by_exercise_log(log.id)
            rest = data.next_rest_seconds
            next_set = log.completed_sets + 2
            if rest is None and next_set <= log.target_sets:
                rest = self.adaptive.rest_before_set(entry, log, next_set, data.rpe)
            set_log = sm.complete_set(entry, logs, log, previous, data, now, rest)
            self.set_logs.add(set_log)

        return self._run(user_id, session_id, "complete a set", command)

    def complete_exercise(self, user_id: str, session_id: int, data: CompleteExerciseRequest) -> SessionResponse:
        def command(entry: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
            log = self._resolve_log(entry, logs, data.exercise_log_id, "complete exercise")
            sm.complete_exercise(entry, logs, log, now)

        return self._run(user_id, session_id, "complete exercise", command)

    def skip_exercise(self, user_id: str, session_id: int, data: SkipExerciseRequest) -> SessionResponse:
        def command(entry: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
            log = self._resolve_log(entry, logs, data.exercise_log_id, "skip exercise")
            sm.skip_exercise(entry, logs, log, now, data.reason, data.notes, data.alternative_exercise_id)

        return self._run(user_id, session_id, "skip exercise", command)

    def start_rest(self, user_id: str, session_id: int, data: StartRestRequest) -> SessionResponse:
        def command(entry: WorkoutSession, logs: list[ExerciseLog], now: datetime.datetime) -> None:
            target = data.target_seconds
            if target is None and sm.can(entry.state, "start rest"):
                log = sm.current_exercise(entry, logs)
                last = self.set_logs.list_by_exercise_log(log.id)
                target = self.adaptive.rest_before_set(entry, log, log.completed_sets + 1,
                                                       last[-1].rpe if last else None)
            sm.start_rest(entry, logs, now, target)

        return self._run(user_id, session_id, "start rest", command)

    def skip_rest(self, user_id: str, session_id: int) -> SessionResponse:
        return self._run(user_id, session_id, "skip rest", sm.skip_rest)

    def start_cooldown(self, user_id: str, session_id: int) -> SessionResponse:
        return self._run(user_id, session_id, "start cooldown", sm.start_cooldown)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _run(self, user_id: str, session_id: int, operation: str, command: Command) -> SessionResponse:
        """Apply *command* and commit it (plus the completion pipeline) atomically."""
        entry = self._get_owned_session(user_id, session_id)
        logs = self.exercise_logs.list_by_session(entry.id)
        was_completed = entry.state == sm.SessionState.COMPLETED.value
        now = self.clock()
        completion: Optional[CompletionResult] = None
        with unit_of_work(self.db, operation):
            command(entry, logs, now)
            self.repository.add(entry)
            self.exercise_logs.add_all(logs)
            if entry.state == sm.SessionState.COMPLETED.value and not was_completed:
                completion = self._on_completed(entry, logs, now)
        return self._to_response(entry, completion=completion)

    def _on_completed(self, entry: WorkoutSession, logs: list[ExerciseLog],
                      now: datetime.datetime) -> CompletionResult:
        sets_by_log = self.set_logs.list_by_session(entry.id)
        summary = self.analytics.finalize(entry, logs, sets_by_log, now)
        self.adaptive.learn_from_session(entry, logs, sets_by_log, now)
        unlocked = self.achievements.evaluate_session(entry, logs, sets_by_log, now)
        return CompletionResult(summary=summary, new_achievements=unlocked)

    def _get_owned_session(self, user_id: str, session_id: int) -> WorkoutSession:
        entry = self.repository.get_by_id(session_id)
        if not entry or entry.user_id != user_id:
            raise NotFound("Session", session_id)
        return entry

    @staticmethod
    def _resolve_log(entry: WorkoutSession, logs: list[ExerciseLog], exercise_log_id: Optional[int],
                     operation: str) -> ExerciseLog:
        """The addressed exercise log, or the current exercise when none is given."""
        sm.ensure_allowed(entry, operation)
        if exercise_log_id is None:
            return sm.current_exercise(entry, logs)
        for log in logs:
            if log.id == exercise_log_id:
                return log
        raise NotFound("Exercise log", exercise_log_id)

    def _to_response(self, entry: WorkoutSession, completion: Optional[CompletionResult] = None,
                     include_exercises: bool = True, ) -> SessionResponse:
        exercises: list[ExerciseLogResponse] = []
        if include_exercises:
            sets_by_log = self.set_logs.list_by_session(entry.id)
            for log in self.exercise_logs.list_by_session(entry.id):
                response = ExerciseLogResponse.model_validate(log)
                response.sets = [SetLogResponse.model_validate(s) for s in sets_by_log.get(log.id, [])]
                exercises.append(response)
        return SessionResponse(id=entry.id, user_id=entry.user_id, workout_id=entry.workout_id, state=entry.state,
                               current_phase=entry.current_phase, current_exercise_index=entry.current_exercise_index,
                               current_set_index=entry.current_set_index, scheduled_at=entry.scheduled_at,
                               started_at=entry.started_at, completed_at=entry.completed_at,
                               cancelled_at=entry.cancelled_at, paused_at=entry.paused_at,
                               resumed_at=entry.resumed_at, total_paused_seconds=entry.total_paused_seconds,
                               pause_intervals=entry.pause_intervals or [],
                               total_duration_seconds=entry.total_duration_seconds,
                               active_duration_seconds=entry.active_duration_seconds,
                               warmup_duration_seconds=entry.warmup_duration_seconds,
                               cooldown_duration_seconds=entry.cooldown_duration_seconds,
                               total_exercises=entry.total_exercises, total_sets=entry.total_sets,
                               exercises_completed=entry.exercises_completed, sets_completed=entry.sets_completed,
                               total_volume_kg=round(entry.total_volume_kg, 2), total_reps=entry.total_reps,
                               calories_burned=entry.calories_burned,
                               completion_percentage=entry.completion_percentage,
                               performance_score=entry.performance_score,
                               rest_target_seconds=entry.rest_target_seconds,
                               rest_periods_skipped=entry.rest_periods_skipped,
                               rest_shortfall_seconds=entry.rest_shortfall_seconds,
                               difficulty_rating=entry.difficulty_rating, energy_level=entry.energy_level,
                               mood_rating=entry.mood_rating, notes=entry.notes,
                               realtime=RealtimeSnapshot.model_validate(entry.realtime or {}), exercises=exercises,
                               completion=completion, created_at=entry.created_at, updated_at=entry.updated_at, )

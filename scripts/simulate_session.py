"""Replay a scripted Full Body Foundation workout through the engine.

Runs against a throwaway in-memory database with a simulated clock and
prints what a user would see along the way: adaptive rest targets,
live stats, the frozen summary and the achievements unlocked.

Usage:
    python scripts/simulate_session.py
"""

import datetime
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from athletica.db.init_db import init_db
from athletica.schemas.session import SessionCreate
from athletica.schemas.set_log import SetCreate
from athletica.services.analytics_service import AnalyticsService
from athletica.services.session_service import SessionService

USER_ID = "demo-user"
START = datetime.datetime(2026, 3, 2, 18, 30)

# (exercise_id, reps, weight_kg, rpe, form, seconds since previous event)
SCRIPT = [
    ("goblet_squat", 12, 20.0, 6, 5, 60),
    ("goblet_squat", 12, 20.0, 7, 5, 110),
    ("goblet_squat", 10, 20.0, 9, 4, 125),
    ("push_up", 10, None, 7, 4, 90),
    ("push_up", 9, None, 8, 4, 100),
    ("push_up", 8, None, 9, 3, 120),
    ("dumbbell_row", 12, 18.0, 6, 5, 80),
    ("dumbbell_row", 12, 18.0, 7, 5, 95),
    ("dumbbell_row", 11, 18.0, 8, 4, 100),
]


class ScriptedClock:
    def __init__(self, start: datetime.datetime):
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += datetime.timedelta(seconds=seconds)


def main() -> None:
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    clock = ScriptedClock(START)

    with Session(engine) as db:
        sessions = SessionService(db, clock=clock)
        analytics = AnalyticsService(db, clock=clock)

        session = sessions.create(USER_ID, SessionCreate(workout_id="full_body_foundation"))
        sessions.start(USER_ID, session.id)
        clock.advance(5 * 60)
        sessions.start_exercise(USER_ID, session.id, 0)

        print("=" * 66)
        print(f"  Session {session.id}: Full Body Foundation, started {START:%Y-%m-%d %H:%M}")
        print("=" * 66)
        print(f"  {'Exercise':<14} {'Set':>3} {'Reps':>5} {'kg':>6} {'RPE':>4}  {'Rest next':>9}  {'Volume':>8}")
        print("  " + "-" * 62)

        response = session
        for exercise_id, reps, weight, rpe, form, elapsed in SCRIPT:
            clock.advance(elapsed)
            response = sessions.complete_set(USER_ID, session.id, SetCreate(reps_completed=reps, weight_kg=weight,
                                                                            rpe=rpe, form_quality=form))
            log = next(e for e in response.exercises if e.exercise_id == exercise_id)
            rest = f"{response.rest_target_seconds}s" if response.state == "rest" else "-"
            print(f"  {exercise_id:<14} {log.completed_sets:>3} {reps:>5} {weight or 0:>6.1f} {rpe:>4}  {rest:>9}"
                  f"  {response.total_volume_kg:>8.1f}")
            if response.state == "rest" and log.completed_sets == 1:
                stats = analytics.get_live_stats(USER_ID, session.id)
                print(f"      live: {stats.sets_completed}/{stats.total_sets} sets, "
                      f"~{stats.estimated_calories} kcal, score {stats.performance.score}, "
                      f"~{stats.estimated_remaining_seconds // 60} min left")

        print()
        if response.completion is None:
            print("  Session did not complete.")
            return

        summary = response.completion.summary
        print("  " + "-" * 62)
        print("  SUMMARY")
        print("  " + "-" * 62)
        print(f"  State:              {response.state}")
        print(f"  Active duration:    {summary.active_duration_seconds // 60} min")
        print(f"  Volume:             {summary.total_volume_kg:.1f} kg in {summary.total_reps} reps")
        print(f"  Average RPE:        {summary.average_rpe}")
        print(f"  Calories:           {summary.calories_burned} kcal")
        print(f"  Performance score:  {summary.performance.score}/100")
        for factor, value in summary.performance.breakdown.model_dump().items():
            print(f"      {factor:<12} {value:>6.1f}")
        print(f"  Recovery:           {summary.recovery_estimate_hours} h")
        print(f"  Next workout:       {summary.insights.next_workout_recommendation}")
        for tip in summary.insights.improvement_tips:
            print(f"  Tip:                {tip}")

        print()
        print("  ACHIEVEMENTS")
        print("  " + "-" * 62)
        if not response.completion.new_achievements:
            print("  (none)")
        for achievement in response.completion.new_achievements:
            print(f"  {achievement.icon}  {achievement.title:<18} {achievement.rarity:<9} +{achievement.points}")
        print()


if __name__ == "__main__":
    main()

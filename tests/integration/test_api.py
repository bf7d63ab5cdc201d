"""HTTP-level tests for the v1 API."""

from fastapi.testclient import TestClient

from athletica.core.config import settings
from athletica.main import app

API = "/api/v1"


def _create_session(client, workout_id: str = "full_body_foundation") -> dict:
    response = client.post(f"{API}/sessions", json={"workout_id": workout_id})
    assert response.status_code == 201, response.text
    return response.json()


def _log_set(client, session_id: int, **fields):
    body = {"reps_completed": 10, "weight_kg": 20.0, "rpe": 7, "form_quality": 4}
    body.update(fields)
    return client.post(f"{API}/sessions/{session_id}/sets", json=body)


class TestHealth:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["status"] == "healthy"
        assert body["version"] == settings.VERSION

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_info(self, client):
        body = client.get("/info").json()
        assert body["project name"] == settings.PROJECT_NAME
        assert body["version"] == settings.VERSION


class TestIdentity:
    def test_missing_user_header(self, client):
        with TestClient(app) as anonymous:
            response = anonymous.post(f"{API}/sessions", json={"workout_id": "full_body_foundation"})
        assert response.status_code == 401

    def test_other_user_gets_not_found(self, client):
        session = _create_session(client)
        response = client.get(f"{API}/sessions/{session['id']}", headers={"X-User-Id": "user-2"})
        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"


class TestSessionRoutes:
    def test_create_and_get(self, client):
        session = _create_session(client)
        assert session["state"] == "idle"
        assert len(session["exercises"]) == 3
        fetched = client.get(f"{API}/sessions/{session['id']}").json()
        assert fetched["id"] == session["id"]

    def test_unknown_workout(self, client):
        response = client.post(f"{API}/sessions", json={"workout_id": "nope"})
        assert response.status_code == 404

    def test_list(self, client):
        _create_session(client)
        _create_session(client, "conditioning_circuit")
        sessions = client.get(f"{API}/sessions").json()
        assert len(sessions) == 2
        assert all(s["exercises"] == [] for s in sessions)

    def test_invalid_transition_is_conflict(self, client):
        session = _create_session(client)
        response = client.post(f"{API}/sessions/{session['id']}/pause")
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "InvalidTransition"
        assert "idle" in body["detail"]

    def test_rating_out_of_range_is_rejected(self, client):
        session = _create_session(client)
        client.post(f"{API}/sessions/{session['id']}/start")
        client.post(f"{API}/sessions/{session['id']}/exercises/0/start")
        assert _log_set(client, session["id"], rpe=11).status_code == 422
        assert _log_set(client, session["id"], form_quality=0).status_code == 422

    def test_pause_resume(self, client):
        session = _create_session(client)
        sid = session["id"]
        assert client.post(f"{API}/sessions/{sid}/start").json()["state"] == "warmup"
        assert client.post(f"{API}/sessions/{sid}/pause").json()["state"] == "paused"
        assert client.post(f"{API}/sessions/{sid}/resume").json()["state"] == "warmup"

    def test_full_flow(self, client):
        sid = _create_session(client)["id"]
        client.post(f"{API}/sessions/{sid}/start")
        client.post(f"{API}/sessions/{sid}/exercises/0/start")

        first = _log_set(client, sid)
        assert first.status_code == 201
        assert first.json()["state"] == "rest"

        stats = client.get(f"{API}/sessions/{sid}/stats")
        assert stats.status_code == 200
        assert stats.json()["sets_completed"] == 1

        assert client.get(f"{API}/sessions/{sid}/summary").status_code == 409

        for _ in range(8):
            last = _log_set(client, sid)
            assert last.status_code == 201, last.text
        done = last.json()
        assert done["state"] == "completed"
        assert done["completion"]["summary"]["completion_rate"] == 100.0
        unlocked = {a["achievement_id"] for a in done["completion"]["new_achievements"]}
        assert {"consistent", "first_workout"} <= unlocked

        summary = client.get(f"{API}/sessions/{sid}/summary")
        assert summary.status_code == 200
        assert summary.json()["total_sets"] == 9

        feedback = client.post(f"{API}/sessions/{sid}/feedback", json={"difficulty_rating": 3})
        assert feedback.json()["difficulty_rating"] == 3

    def test_skip_rest_and_exercise(self, client):
        sid = _create_session(client)["id"]
        client.post(f"{API}/sessions/{sid}/start")
        client.post(f"{API}/sessions/{sid}/exercises/0/start")
        resting = client.post(f"{API}/sessions/{sid}/rest/start", json={"target_seconds": 60}).json()
        assert resting["state"] == "rest"
        assert client.post(f"{API}/sessions/{sid}/rest/skip").json()["rest_periods_skipped"] == 1
        skipped = client.post(f"{API}/sessions/{sid}/exercises/skip", json={"reason": "equipment"}).json()
        assert skipped["exercises"][0]["status"] == "skipped"
        completed = client.post(f"{API}/sessions/{sid}/exercises/complete").json()
        assert completed["exercises"][1]["status"] == "completed"

    def test_cooldown_and_cancel(self, client):
        sid = _create_session(client, "conditioning_circuit")["id"]
        client.post(f"{API}/sessions/{sid}/start")
        assert client.post(f"{API}/sessions/{sid}/cooldown").json()["current_phase"] == "cooldown"
        assert client.post(f"{API}/sessions/{sid}/cancel").json()["state"] == "cancelled"


class TestAdaptiveRoutes:
    def test_rest(self, client):
        response = client.get(f"{API}/adaptive/rest",
                              params={"exercise_id": "goblet_squat", "set_number": 3, "rpe": 9})
        assert response.status_code == 200
        assert response.json()["recommended_seconds"] == 120

    def test_rest_validates_goal(self, client):
        response = client.get(f"{API}/adaptive/rest",
                              params={"exercise_id": "goblet_squat", "set_number": 1, "goal": "power"})
        assert response.status_code == 422

    def test_recommendations_and_feedback(self, client):
        response = client.post(f"{API}/adaptive/recommendations",
                               json={"exercise_id": "back_squat", "trigger": "injury"})
        assert response.status_code == 200
        recommendations = response.json()
        assert [r["exercise_id"] for r in recommendations] == ["goblet_squat", "front_squat", "pistol_squat"]

        rid = recommendations[0]["id"]
        answered = client.post(f"{API}/adaptive/recommendations/{rid}/feedback", json={"accepted": True})
        assert answered.status_code == 200
        assert answered.json()["was_accepted"] is True
        again = client.post(f"{API}/adaptive/recommendations/{rid}/feedback", json={"accepted": False})
        assert again.status_code == 409

    def test_one_rep_max_without_history(self, client):
        body = client.get(f"{API}/adaptive/one-rep-max/back_squat").json()
        assert body["estimated_1rm_kg"] == 0.0
        assert body["sample_size"] == 0

    def test_metrics(self, client):
        assert client.get(f"{API}/adaptive/metrics").json() == []
        assert client.get(f"{API}/adaptive/metrics/goblet_squat").status_code == 404


class TestAchievementRoutes:
    def test_definitions(self, client):
        assert len(client.get(f"{API}/achievements/definitions").json()) == 14

    def test_empty_user(self, client):
        assert client.get(f"{API}/achievements").json() == []
        stats = client.get(f"{API}/achievements/stats").json()
        assert stats["total_unlocked"] == 0
        assert stats["total_available"] == 14

    def test_evaluate_unfinished_session(self, client):
        sid = _create_session(client)["id"]
        response = client.post(f"{API}/achievements/evaluate", json={"session_id": sid})
        assert response.status_code == 409


class TestCatalogRoutes:
    def test_exercises(self, client):
        exercises = client.get(f"{API}/catalog/exercises", params={"category": "core"}).json()
        assert {e["category"] for e in exercises} == {"core"}
        assert "plank" in {e["exercise_id"] for e in exercises}

    def test_workouts(self, client):
        workouts = client.get(f"{API}/catalog/workouts").json()
        assert [w["workout_id"] for w in workouts] == ["conditioning_circuit", "full_body_foundation",
                                                       "strength_upper_lower"]

    def test_workout(self, client):
        plan = client.get(f"{API}/catalog/workouts/full_body_foundation").json()
        assert plan["total_sets"] == 9
        assert plan["estimated_duration_seconds"] == 2700

    def test_unknown_workout(self, client):
        assert client.get(f"{API}/catalog/workouts/nope").status_code == 404

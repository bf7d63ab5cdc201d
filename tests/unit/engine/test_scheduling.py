"""Tests for the live-stats refresh cadence and poller."""

import asyncio

import pytest

from athletica.engine.scheduling import LiveStatsPoller, RefreshIntervals, refresh_interval


class FakeSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _refresher(states: list, failures: tuple = ()):
    """Yield successive states; indexes listed in *failures* raise instead."""
    calls = {"n": 0}

    async def refresh() -> str:
        index = calls["n"]
        calls["n"] += 1
        if index in failures:
            raise RuntimeError("stats backend unavailable")
        return states[min(index, len(states) - 1)]

    return refresh


class TestRefreshInterval:
    @pytest.mark.parametrize("state, expected", [
        ("exercise", 3),
        ("rest", 10),
        ("warmup", 10),
        ("paused", 30),
    ])
    def test_active_states(self, state, expected):
        assert refresh_interval(state) == expected

    @pytest.mark.parametrize("state", ["idle", "cooldown", "completed", "cancelled"])
    def test_states_without_polling(self, state):
        assert refresh_interval(state) is None

    def test_custom_intervals(self):
        assert refresh_interval("exercise", RefreshIntervals(exercise=1.5)) == 1.5

    def test_intervals_must_be_positive(self):
        with pytest.raises(ValueError):
            RefreshIntervals(rest=0)


class TestLiveStatsPoller:
    def test_follows_state_cadence_until_terminal(self):
        sleep = FakeSleep()
        poller = LiveStatsPoller(_refresher(["exercise", "rest", "completed"]), "exercise", sleep=sleep)
        assert asyncio.run(poller.run()) == 3
        assert sleep.calls == [3, 3, 10]
        assert poller.state == "completed"

    def test_does_not_poll_idle_session(self):
        sleep = FakeSleep()
        poller = LiveStatsPoller(_refresher(["exercise"]), "idle", sleep=sleep)
        assert asyncio.run(poller.run()) == 0
        assert sleep.calls == []

    def test_failures_are_counted_and_retried(self):
        sleep = FakeSleep()
        poller = LiveStatsPoller(_refresher(["paused", "paused", "completed"], failures=(0,)), "paused", sleep=sleep)
        asyncio.run(poller.run())
        assert poller.failure_count == 1
        assert poller.refresh_count == 2
        assert sleep.calls == [30, 30, 30]

    def test_max_iterations(self):
        sleep = FakeSleep()
        poller = LiveStatsPoller(_refresher(["exercise"]), "exercise", sleep=sleep)
        assert asyncio.run(poller.run(max_iterations=4)) == 4
        assert len(sleep.calls) == 4

    def test_stop(self):
        sleep = FakeSleep()
        poller = LiveStatsPoller(_refresher(["rest"]), "rest", sleep=sleep)
        poller.stop()
        assert asyncio.run(poller.run()) == 0

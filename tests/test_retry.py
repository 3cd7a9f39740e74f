"""Tests for the startup retry policy."""

from __future__ import annotations

import pytest

from guestbook.core.retry import RetryExhausted, RetryPolicy


class Recorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)


def flaky(failures: int, result: str = "ok"):
    calls = {"n": 0}

    async def _operation() -> str:
        calls["n"] += 1
        if calls["n"] <= failures:
            raise ConnectionError(f"boom {calls['n']}")
        return result

    return _operation, calls


class TestDelays:
    def test_fixed(self):
        policy = RetryPolicy(max_attempts=5, backoff_s=2.0)
        assert [policy.delay_for(a) for a in range(1, 5)] == [2.0, 2.0, 2.0, 2.0]

    def test_exponential(self):
        policy = RetryPolicy(max_attempts=4, backoff_s=0.5, exponential=True)
        assert [policy.delay_for(a) for a in range(1, 4)] == [0.5, 1.0, 2.0]

    @pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"backoff_s": -1.0}])
    def test_invalid_policy(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_attempt_is_one_based(self):
        with pytest.raises(ValueError):
            RetryPolicy().delay_for(0)


class TestRun:
    @pytest.mark.asyncio
    async def test_first_try_success_never_sleeps(self):
        recorder = Recorder()
        operation, calls = flaky(0)
        assert await RetryPolicy().run(operation, sleep=recorder.sleep) == "ok"
        assert calls["n"] == 1
        assert recorder.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_failures(self):
        recorder = Recorder()
        reported = []
        operation, calls = flaky(2)

        result = await RetryPolicy(max_attempts=5, backoff_s=2.0).run(
            operation,
            sleep=recorder.sleep,
            on_failure=lambda attempt, exc: reported.append((attempt, str(exc))),
        )

        assert result == "ok"
        assert calls["n"] == 3
        assert recorder.delays == [2.0, 2.0]
        assert reported == [(1, "boom 1"), (2, "boom 2")]

    @pytest.mark.asyncio
    async def test_exhaustion(self):
        recorder = Recorder()
        operation, calls = flaky(10)

        with pytest.raises(RetryExhausted) as excinfo:
            await RetryPolicy(max_attempts=5, backoff_s=2.0).run(operation, sleep=recorder.sleep)

        assert calls["n"] == 5
        assert recorder.delays == [2.0, 2.0, 2.0, 2.0]
        assert excinfo.value.attempts == 5
        assert str(excinfo.value.last_error) == "boom 5"
        assert excinfo.value.__cause__ is excinfo.value.last_error

    @pytest.mark.asyncio
    async def test_single_attempt_never_sleeps(self, caplog):
        recorder = Recorder()
        operation, calls = flaky(10)

        with pytest.raises(RetryExhausted) as excinfo:
            await RetryPolicy(max_attempts=1).run(operation, sleep=recorder.sleep)

        assert calls["n"] == 1
        assert recorder.delays == []
        assert excinfo.value.attempts == 1
        assert "attempt_failed attempt=1 max_attempts=1" in caplog.text

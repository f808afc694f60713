"""Tests for the bounded retry controller."""

import asyncio

import pytest

from src.core.http_retry import RetryExhaustedError, request_with_retry


TRANSIENT = "transient"


def _sequence(*results):
    """Return a send() coroutine factory replaying results, plus its call log."""
    calls = []
    pending = list(results)

    async def send():
        calls.append(len(calls) + 1)
        return pending.pop(0)

    return send, calls


def _is_transient(result):
    return result == TRANSIENT


class TestRequestWithRetry:
    @pytest.mark.asyncio
    async def test_success_first_try(self):
        send, calls = _sequence("ok")

        result = await request_with_retry(send, retries=3, is_retryable=_is_transient)

        assert result == "ok"
        assert calls == [1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("faults, retries", [(1, 1), (2, 2), (2, 5), (0, 0)])
    async def test_n_faults_then_success_within_budget(self, faults, retries):
        send, calls = _sequence(*([TRANSIENT] * faults), "ok")

        result = await request_with_retry(send, retries=retries, is_retryable=_is_transient)

        assert result == "ok"
        assert len(calls) == faults + 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("retries", [0, 1, 3])
    async def test_retries_plus_one_faults_raise(self, retries):
        send, calls = _sequence(*([TRANSIENT] * (retries + 1)), "never reached")

        with pytest.raises(RetryExhaustedError) as exc_info:
            await request_with_retry(send, retries=retries, is_retryable=_is_transient)

        assert exc_info.value.result == TRANSIENT
        assert exc_info.value.attempts == retries + 1
        assert len(calls) == retries + 1

    @pytest.mark.asyncio
    async def test_other_errors_return_immediately(self):
        send, calls = _sequence("not found", "ok")

        result = await request_with_retry(send, retries=3, is_retryable=_is_transient)

        assert result == "not found"
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_no_sleep_by_default(self, monkeypatch: pytest.MonkeyPatch):
        sleeps: list[float] = []

        async def _fake_sleep(seconds: float):
            sleeps.append(seconds)

        monkeypatch.setattr(asyncio, "sleep", _fake_sleep)
        send, _ = _sequence(TRANSIENT, "ok")

        await request_with_retry(send, retries=1, is_retryable=_is_transient)

        assert sleeps == []

    @pytest.mark.asyncio
    async def test_optional_delay_between_attempts(self, monkeypatch: pytest.MonkeyPatch):
        sleeps: list[float] = []

        async def _fake_sleep(seconds: float):
            sleeps.append(seconds)

        monkeypatch.setattr(asyncio, "sleep", _fake_sleep)
        send, _ = _sequence(TRANSIENT, TRANSIENT, "ok")

        await request_with_retry(send, retries=2, is_retryable=_is_transient, delay=0.5)

        assert sleeps == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_negative_retries_rejected(self):
        send, calls = _sequence("ok")

        with pytest.raises(ValueError):
            await request_with_retry(send, retries=-1, is_retryable=_is_transient)

        assert calls == []

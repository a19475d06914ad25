"""Backoff delays and the bounded retry helper."""

from __future__ import annotations

import random

import pytest

from mip_vote.exceptions import NetworkError, TransactionRejected
from mip_vote.pipeline.retry import full_jitter_delay, retry_transient
from tests.mocks import RecordingSleep


def test_delay_cap_doubles_until_max(monkeypatch):
    monkeypatch.setattr(random, "uniform", lambda low, high: high)
    caps = [full_jitter_delay(a, base_delay=1.0, max_delay=8.0) for a in range(1, 7)]
    assert caps == [1.0, 2.0, 4.0, 8.0, 8.0, 8.0]


def test_delay_is_within_cap():
    for attempt in range(1, 6):
        delay = full_jitter_delay(attempt, base_delay=0.5, max_delay=3.0)
        assert 0 <= delay <= 3.0


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(attempt=0, base_delay=1.0, max_delay=1.0),
        dict(attempt=1, base_delay=-1.0, max_delay=1.0),
        dict(attempt=1, base_delay=1.0, max_delay=-1.0),
    ],
)
def test_delay_rejects_bad_input(kwargs):
    attempt = kwargs.pop("attempt")
    with pytest.raises(ValueError):
        full_jitter_delay(attempt, **kwargs)


async def test_retry_until_success():
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise NetworkError("blip")
        return "ok"

    sleep = RecordingSleep()
    result = await retry_transient(flaky, max_attempts=3, base_delay=0.1, max_delay=1.0, sleep=sleep)
    assert result == "ok"
    assert len(calls) == 3
    assert len(sleep.delays) <= 2


async def test_retry_gives_up():
    calls = []

    async def down():
        calls.append(1)
        raise NetworkError("down")

    with pytest.raises(NetworkError):
        await retry_transient(down, max_attempts=2, base_delay=0.0, max_delay=0.0)
    assert len(calls) == 2


async def test_rejection_is_not_retried():
    calls = []

    async def refuse():
        calls.append(1)
        raise TransactionRejected("insufficient fee")

    with pytest.raises(TransactionRejected):
        await retry_transient(refuse, max_attempts=5, base_delay=0.0, max_delay=0.0)
    assert len(calls) == 1


async def test_retry_requires_an_attempt():
    async def never():
        raise AssertionError("should not run")

    with pytest.raises(ValueError):
        await retry_transient(never, max_attempts=0, base_delay=0.0, max_delay=0.0)

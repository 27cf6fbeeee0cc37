"""Tests for the tenacity-backed transient-failure retry."""

from __future__ import annotations

import pytest

from shared.application.retry import retry_transient, transient_retrying


class Flaky(Exception):
    pass


def _failing(times: int):
    calls = {"count": 0}

    def func():
        calls["count"] += 1
        if calls["count"] <= times:
            raise Flaky()
        return "ok"

    return func, calls


def test_retries_with_exponential_backoff() -> None:
    delays: list[float] = []
    func, calls = _failing(2)

    wrapped = retry_transient((Flaky,), attempts=3, backoff=0.05, sleep=delays.append)(func)

    assert wrapped() == "ok"
    assert calls["count"] == 3
    assert delays == [0.05, 0.1]


def test_reraises_once_retries_are_exhausted() -> None:
    delays: list[float] = []
    func, calls = _failing(10)

    wrapped = retry_transient((Flaky,), attempts=2, backoff=1, sleep=delays.append)(func)

    with pytest.raises(Flaky):
        wrapped()
    assert calls["count"] == 3
    assert delays == [1, 2]


def test_other_errors_are_not_retried() -> None:
    calls = {"count": 0}

    def func():
        calls["count"] += 1
        raise KeyError("x")

    wrapped = retry_transient((Flaky,), attempts=5, backoff=0, sleep=lambda _: None)(func)

    with pytest.raises(KeyError):
        wrapped()
    assert calls["count"] == 1


def test_settings_are_read_at_call_time() -> None:
    limits = {"attempts": 0}
    func, calls = _failing(1)

    wrapped = retry_transient(
        (Flaky,),
        attempts=lambda: limits["attempts"],
        backoff=lambda: 0,
        sleep=lambda _: None,
    )(func)

    with pytest.raises(Flaky):
        wrapped()

    limits["attempts"] = 1
    assert wrapped() == "ok"
    assert calls["count"] == 2


def test_transient_retrying_stops_after_configured_attempts() -> None:
    delays: list[float] = []
    func, calls = _failing(10)

    retrying = transient_retrying((Flaky,), retries=3, backoff=0.5, sleep=delays.append)

    with pytest.raises(Flaky):
        retrying(func)
    assert calls["count"] == 4
    assert delays == [0.5, 1.0, 2.0]

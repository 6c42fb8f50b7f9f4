"""
Tests for the fixed-window quota limiter.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from vulnsweep.core.quota import QuotaDecision, QuotaLimiter, QuotaLimits


class _Clock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> _Clock:
    return _Clock()


@pytest.fixture()
def limiter(clock: _Clock) -> QuotaLimiter:
    return QuotaLimiter(clock=clock)


def test_requests_within_limit_are_allowed(limiter: QuotaLimiter) -> None:
    limits = QuotaLimits(max_requests=3, window_seconds=60)

    decisions = [limiter.check("scan:198.51.100.1", limits) for _ in range(3)]

    assert all(decision.allowed for decision in decisions)
    assert [decision.remaining for decision in decisions] == [2, 1, 0]
    assert decisions[0].limit == 3


def test_request_over_limit_is_rejected_with_reset_time(
    limiter: QuotaLimiter, clock: _Clock
) -> None:
    limits = QuotaLimits(max_requests=2, window_seconds=60)
    for _ in range(2):
        limiter.check("scan:198.51.100.1", limits)

    decision = limiter.check("scan:198.51.100.1", limits)

    assert decision.allowed is False
    assert decision.remaining == 0
    assert decision.resets_at == datetime.fromtimestamp(clock.now + 60, tz=timezone.utc)


def test_window_resets_after_expiry(limiter: QuotaLimiter, clock: _Clock) -> None:
    limits = QuotaLimits(max_requests=1, window_seconds=60)
    assert limiter.check("crawl:a", limits).allowed is True
    assert limiter.check("crawl:a", limits).allowed is False

    clock.now += 60

    assert limiter.check("crawl:a", limits).allowed is True


def test_keys_are_independent(limiter: QuotaLimiter) -> None:
    limits = QuotaLimits(max_requests=1, window_seconds=60)
    assert limiter.check("scan:a", limits).allowed is True
    assert limiter.check("scan:b", limits).allowed is True
    assert limiter.check("crawl:a", limits).allowed is True
    assert limiter.check("scan:a", limits).allowed is False


def test_reset_clears_one_or_all_keys(limiter: QuotaLimiter) -> None:
    limits = QuotaLimits(max_requests=1, window_seconds=60)
    limiter.check("a", limits)
    limiter.check("b", limits)

    limiter.reset("a")
    assert limiter.check("a", limits).allowed is True
    assert limiter.check("b", limits).allowed is False

    limiter.reset()
    assert limiter.check("b", limits).allowed is True


@pytest.mark.parametrize(("max_requests", "window"), [(0, 60), (5, 0), (-1, 10)])
def test_limits_must_be_positive(max_requests: int, window: int) -> None:
    with pytest.raises(ValueError):
        QuotaLimits(max_requests=max_requests, window_seconds=window)


def test_retry_after_rounds_up_and_never_negative() -> None:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    decision = QuotaDecision(
        allowed=False, limit=1, remaining=0, resets_at=now + timedelta(seconds=12.2)
    )

    assert decision.retry_after_seconds(now) == 13
    assert decision.retry_after_seconds(now + timedelta(minutes=5)) == 0


def test_expired_windows_are_evicted(clock: _Clock) -> None:
    limiter = QuotaLimiter(clock=clock, sweep_interval=30)
    limits = QuotaLimits(max_requests=5, window_seconds=60)
    for index in range(10):
        limiter.check(f"scan:198.51.100.{index}", limits)
    assert limiter.tracked_keys() == 10

    clock.now += 60
    limiter.check("scan:203.0.113.7", limits)

    assert limiter.tracked_keys() == 1


def test_live_windows_survive_a_sweep(clock: _Clock) -> None:
    limiter = QuotaLimiter(clock=clock, sweep_interval=30)
    limits = QuotaLimits(max_requests=1, window_seconds=120)
    limiter.check("scan:a", limits)

    clock.now += 60
    limiter.check("scan:b", limits)

    assert limiter.tracked_keys() == 2
    assert limiter.check("scan:a", limits).allowed is False

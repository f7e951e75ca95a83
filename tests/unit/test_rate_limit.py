from datetime import UTC, datetime, timedelta

import pytest

from itr_console.app_shell.rate_limit import RateLimiter
from itr_console.rules.models import RateLimitRules, WindowLimit


class FakeTime:
    def __init__(self, start: datetime):
        self.now = start

    def now_utc(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeTime(datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def limiter(clock):
    rules = RateLimitRules(magic_link=WindowLimit(window_seconds=60, max_requests=3))
    return RateLimiter(rules, time_port=clock)


def test_allow_request_basic(limiter):
    key = "test_key"
    assert limiter.allow_request(key, 60, 2) is True
    assert limiter.allow_request(key, 60, 2) is True
    assert limiter.allow_request(key, 60, 2) is False  # Limit reached


def test_window_expires(limiter, clock):
    assert limiter.allow_request("k", 60, 1) is True
    assert limiter.allow_request("k", 60, 1) is False

    # Move forward 61 seconds
    clock.now += timedelta(seconds=61)

    assert limiter.allow_request("k", 60, 1) is True


def test_zero_limit_always_denies(limiter):
    assert limiter.allow_request("k", 60, 0) is False


def test_check_magic_link(limiter):
    # Configured max=3
    email = "ada@acme.test"
    assert limiter.check_magic_link(email) is True
    assert limiter.check_magic_link(email) is True
    assert limiter.check_magic_link(email) is True
    assert limiter.check_magic_link(email) is False


def test_magic_link_key_ignores_case_and_spaces(limiter):
    for _ in range(3):
        assert limiter.check_magic_link("Ada@Acme.test") is True
    assert limiter.check_magic_link("  ada@acme.test ") is False


def test_magic_link_keys_are_per_email(limiter):
    for _ in range(3):
        limiter.check_magic_link("one@acme.test")
    assert limiter.check_magic_link("two@acme.test") is True

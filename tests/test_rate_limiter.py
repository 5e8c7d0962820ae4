"""Tests for the per-client rate limiter"""

import asyncio

from starlette.requests import Request

from talent_analyzer.services.cache import (
    RateLimiter,
    get_client_identifier,
    sweep_rate_limiter,
)


def make_request(headers=None, client=("9.9.9.9", 4321)):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/analyze",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_allows_up_to_limit_then_denies(limiter_clock):
    limiter = RateLimiter(max_requests=3, window_seconds=60)

    results = [limiter.check("1.2.3.4") for _ in range(3)]
    assert [r.allowed for r in results] == [True, True, True]
    assert [r.remaining for r in results] == [2, 1, 0]

    denied = limiter.check("1.2.3.4")
    assert denied.allowed is False
    assert denied.remaining == 0
    assert denied.reset_at == results[0].reset_at


def test_window_resets_after_expiry(limiter_clock):
    limiter = RateLimiter(max_requests=2, window_seconds=60)
    limiter.check("client")
    limiter.check("client")
    assert limiter.check("client").allowed is False

    limiter_clock.advance(61)

    result = limiter.check("client")
    assert result.allowed is True
    assert result.remaining == 1
    assert result.reset_at == limiter_clock.now + 60


def test_counts_are_kept_in_limits_storage(limiter_clock):
    limiter = RateLimiter(max_requests=5, window_seconds=60)
    limiter.check("Client")
    limiter.check("client")

    key = limiter.item.key_for("client")
    assert limiter.storage.get(key) == 2
    assert limiter.storage.get_expiry(key) == limiter_clock.now + 60


def test_denied_requests_do_not_extend_window(limiter_clock):
    limiter = RateLimiter(max_requests=1, window_seconds=60)
    first = limiter.check("client")
    limiter_clock.advance(30)
    assert limiter.check("client").reset_at == first.reset_at


def test_identifiers_are_case_insensitive(limiter_clock):
    limiter = RateLimiter(max_requests=1, window_seconds=60)
    assert limiter.check("ABCD::1").allowed is True
    assert limiter.check("abcd::1").allowed is False


def test_clients_are_independent(limiter_clock):
    limiter = RateLimiter(max_requests=1, window_seconds=60)
    assert limiter.check("a").allowed is True
    assert limiter.check("b").allowed is True


def test_reset_clears_client(limiter_clock):
    limiter = RateLimiter(max_requests=1, window_seconds=60)
    limiter.check("a")
    limiter.reset("A")
    assert limiter.check("a").allowed is True


def test_cleanup_removes_only_expired_windows(limiter_clock):
    limiter = RateLimiter(max_requests=5, window_seconds=60)
    limiter.check("old")
    limiter_clock.advance(45)
    limiter.check("new")
    limiter_clock.advance(20)

    limiter.cleanup()
    assert len(limiter) == 1

    result = limiter.check("new")
    assert result.remaining == 3


async def test_sweep_task_runs_cleanup(limiter_clock):
    limiter = RateLimiter(max_requests=5, window_seconds=60)
    limiter.check("old")
    limiter_clock.advance(120)

    task = asyncio.create_task(sweep_rate_limiter(limiter, 0))
    for _ in range(5):
        await asyncio.sleep(0)
    task.cancel()

    assert len(limiter) == 0


def test_client_identifier_prefers_forwarded_for():
    request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "X-Real-IP": "198.51.100.1"})
    assert get_client_identifier(request) == "203.0.113.7"


def test_client_identifier_falls_back_to_real_ip_headers():
    assert get_client_identifier(make_request({"X-Real-IP": "198.51.100.1"})) == "198.51.100.1"
    assert get_client_identifier(make_request({"CF-Connecting-IP": "2001:DB8::1"})) == "2001:db8::1"


def test_client_identifier_uses_peer_address():
    assert get_client_identifier(make_request()) == "9.9.9.9"

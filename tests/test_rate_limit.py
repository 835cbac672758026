"""Tests for the fixed-window rate limiter."""

import asyncio

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from backoffice.app.middleware.rate_limit import (
    FixedWindowRateLimiter,
    RateLimitSweeper,
    RateWindow,
    get_client_address,
    get_client_identifier,
)


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestFixedWindowRateLimiter:
    """Tests for window accounting."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def limiter(self, clock):
        return FixedWindowRateLimiter(default_window_seconds=1, clock=clock)

    def test_window_allows_quota_then_denies_until_reset(self, limiter, clock):
        """Quota 3 in a 1s window: t=0, 0.1, 0.2 allowed, 0.3 denied, 1.1 allowed."""
        for t in (0.0, 0.1, 0.2):
            clock.now = t
            assert limiter.allow("a", 3, 1) is True

        clock.now = 0.3
        assert limiter.allow("a", 3, 1) is False

        clock.now = 1.1
        assert limiter.allow("a", 3, 1) is True

    def test_identifiers_are_isolated(self, limiter):
        for _ in range(3):
            assert limiter.allow("a", 3) is True
        assert limiter.allow("a", 3) is False

        assert limiter.allow("b", 3) is True

    def test_window_boundary_is_inclusive(self, limiter, clock):
        """A window only expires once now is strictly past reset_at."""
        assert limiter.allow("a", 1) is True
        clock.now = 1.0
        assert limiter.allow("a", 1) is False
        clock.now = 1.0001
        assert limiter.allow("a", 1) is True

    def test_check_reports_quota_metadata(self, limiter, clock):
        first = limiter.check("a", 2, 60)
        assert first.allowed is True
        assert first.limit == 2
        assert first.remaining == 1
        assert first.reset_time == 60

        second = limiter.check("a", 2, 60)
        assert second.remaining == 0

        denied = limiter.check("a", 2, 60)
        assert denied.allowed is False
        assert denied.retry_after == 60
        assert denied.remaining == 0

    def test_denied_requests_do_not_extend_window(self, limiter, clock):
        assert limiter.allow("a", 1) is True
        clock.now = 0.9
        assert limiter.allow("a", 1) is False
        clock.now = 1.01
        assert limiter.allow("a", 1) is True

    def test_sweep_removes_only_expired_windows(self, limiter, clock):
        limiter.allow("old", 5)
        clock.now = 0.5
        limiter.allow("new", 5)

        clock.now = 1.2
        assert limiter.sweep() == 1
        assert len(limiter) == 1

    def test_max_entries_evicts_least_recently_seen(self, clock):
        limiter = FixedWindowRateLimiter(default_window_seconds=60, max_entries=2, clock=clock)
        limiter.allow("a", 1)
        limiter.allow("b", 1)
        limiter.allow("a", 5)  # touch "a"
        limiter.allow("c", 1)

        assert len(limiter) == 2
        # "c" is tracked and has used its quota
        assert limiter.allow("c", 1) is False
        # "b" was evicted, so it starts a fresh window
        assert limiter.allow("b", 1) is True

    def test_reset_forgets_every_window(self, limiter):
        limiter.allow("a", 1)
        limiter.reset()
        assert len(limiter) == 0
        assert limiter.allow("a", 1) is True


def test_rate_window_expiry():
    window = RateWindow(count=1, reset_at=10.0)
    assert window.is_expired(10.0) is False
    assert window.is_expired(10.5) is True


@pytest.mark.asyncio
async def test_sweeper_runs_periodically():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(default_window_seconds=1, clock=clock)
    limiter.allow("a", 1)
    clock.now = 5.0

    sweeper = RateLimitSweeper(limiter, interval=0.01)
    await sweeper.start()
    assert sweeper.running
    await asyncio.sleep(0.05)
    await sweeper.stop()

    assert not sweeper.running
    assert len(limiter) == 0


class TestClientIdentifier:
    @pytest.fixture
    def client(self):
        app = FastAPI()

        @app.get("/api/faculties")
        async def whoami(request: Request):
            return {
                "address": get_client_address(request),
                "identifier": get_client_identifier(request),
            }

        return TestClient(app)

    def test_uses_first_forwarded_for_entry(self, client):
        resp = client.get("/api/faculties", headers={"X-Forwarded-For": "10.0.0.1, 10.0.0.2"})
        assert resp.json()["identifier"] == "10.0.0.1:/api/faculties"

    def test_falls_back_to_real_ip(self, client):
        resp = client.get("/api/faculties", headers={"X-Real-IP": "192.168.1.9"})
        assert resp.json()["address"] == "192.168.1.9"

    def test_without_headers_clients_share_unknown_bucket(self, client):
        resp = client.get("/api/faculties")
        assert resp.json()["identifier"] == "unknown:/api/faculties"

    def test_empty_first_forwarded_entry_falls_back(self, client):
        resp = client.get(
            "/api/faculties",
            headers={"X-Forwarded-For": ", 10.0.0.2", "X-Real-IP": "192.168.1.9"},
        )
        assert resp.json()["address"] == "192.168.1.9"

from __future__ import annotations

import re

import pytest
from fastapi.testclient import TestClient

import app.main as app_main
from app.middleware import InMemoryRateLimiter, reset_rate_limiter, resolve_trace_context


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setenv("SESSION_REFRESHER_UPSTREAM_BASE_URL", "https://session.test")
    monkeypatch.setenv("SESSION_REFRESHER_RATE_LIMIT_ENABLED", "0")
    reset_rate_limiter()
    with TestClient(app_main.app) as test_client:
        yield test_client


def test_health_response_includes_generated_trace_headers(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200

    trace_id = response.headers.get("X-Trace-ID")
    traceparent = response.headers.get("traceparent")
    assert re.fullmatch(r"[0-9a-f]{32}", trace_id or "")
    assert re.fullmatch(r"00-[0-9a-f]{32}-[0-9a-f]{16}-[0-9a-f]{2}", traceparent or "")
    assert traceparent.split("-")[1] == trace_id
    assert re.fullmatch(r"[0-9a-f]{32}", response.headers["X-Request-ID"])


def test_incoming_request_id_and_trace_are_reused(client: TestClient) -> None:
    incoming = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"
    response = client.get("/health", headers={"traceparent": incoming, "X-Request-ID": "req-123"})

    parts = response.headers["traceparent"].split("-")
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Trace-ID"] == "4bf92f3577b34da6a3ce929d0e0e4736"
    assert parts[1] == "4bf92f3577b34da6a3ce929d0e0e4736"
    assert parts[2] != "00f067aa0ba902b7"
    assert parts[3] == "01"


@pytest.mark.parametrize(
    "header",
    [
        None,
        "invalid-header",
        "01-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01",
        "00-00000000000000000000000000000000-00f067aa0ba902b7-01",
        "00-4bf92f3577b34da6a3ce929d0e0e4736-0000000000000000-01",
        "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-zz",
    ],
)
def test_invalid_traceparent_starts_new_trace(header: str | None) -> None:
    context = resolve_trace_context(header)
    assert context.trace_id != "4bf92f3577b34da6a3ce929d0e0e4736"
    assert re.fullmatch(r"[0-9a-f]{32}", context.trace_id)
    assert context.trace_flags == "01"


def test_rate_limiter_blocks_after_budget_and_recovers() -> None:
    limiter = InMemoryRateLimiter(requests_per_minute=2)

    assert limiter.check("ip:1", now=100.0).allowed
    assert limiter.check("ip:1", now=101.0).allowed
    blocked = limiter.check("ip:1", now=102.0)
    assert not blocked.allowed
    assert blocked.retry_after_sec == 58
    assert limiter.check("ip:2", now=102.0).allowed
    assert limiter.check("ip:1", now=161.0).allowed


def test_rate_limiter_forgets_idle_clients() -> None:
    limiter = InMemoryRateLimiter(requests_per_minute=5)

    limiter.check("ip:1", now=100.0)
    limiter.check("ip:2", now=130.0)
    assert limiter.tracked_keys() == {"ip:1", "ip:2"}

    limiter.check("ip:3", now=170.0)
    assert limiter.tracked_keys() == {"ip:2", "ip:3"}

    limiter.check("ip:3", now=300.0)
    assert limiter.tracked_keys() == {"ip:3"}


def test_rate_limit_applies_to_refresh_posts(monkeypatch: pytest.MonkeyPatch, client: TestClient) -> None:
    monkeypatch.setenv("SESSION_REFRESHER_RATE_LIMIT_ENABLED", "1")
    monkeypatch.setenv("SESSION_REFRESHER_RATE_LIMIT_REQUESTS_PER_MINUTE", "1")
    reset_rate_limiter()

    first = client.post("/api/refresh-cookie", json={})
    second = client.post("/api/refresh-cookie", json={})
    health = client.get("/health")

    assert first.status_code == 400
    assert second.status_code == 429
    assert second.json() == {"detail": "Rate limit exceeded"}
    assert int(second.headers["Retry-After"]) >= 1
    assert "X-Request-ID" in second.headers
    assert health.status_code == 200

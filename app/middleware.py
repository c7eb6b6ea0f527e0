from __future__ import annotations

import ipaddress
import logging
import secrets
import string
import time
import uuid
from collections import deque
from dataclasses import dataclass
from threading import Lock

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings

logger = logging.getLogger("session_refresher.http")

_HEX_CHARS = set(string.hexdigits)
_TRACEPARENT_VERSION = "00"
_RATE_LIMITED_METHODS = {"POST", "PATCH", "PUT", "DELETE"}


@dataclass(frozen=True)
class TraceContext:
    trace_id: str
    span_id: str
    trace_flags: str

    @property
    def traceparent(self) -> str:
        return f"{_TRACEPARENT_VERSION}-{self.trace_id}-{self.span_id}-{self.trace_flags}"


def resolve_trace_context(traceparent_header: str | None) -> TraceContext:
    """Continue an incoming W3C trace with a fresh span, or start a new trace."""
    span_id = secrets.token_hex(8)
    raw = (traceparent_header or "").strip().lower()
    parts = raw.split("-")
    if len(parts) == 4:
        version, trace_id, parent_id, trace_flags = parts
        if (
            version == _TRACEPARENT_VERSION
            and _is_nonzero_hex(trace_id, length=32)
            and _is_nonzero_hex(parent_id, length=16)
            and _is_hex(trace_flags, length=2)
        ):
            return TraceContext(trace_id=trace_id, span_id=span_id, trace_flags=trace_flags)

    return TraceContext(trace_id=secrets.token_hex(16), span_id=span_id, trace_flags="01")


def _is_hex(value: str, *, length: int) -> bool:
    return len(value) == length and all(char in _HEX_CHARS for char in value)


def _is_nonzero_hex(value: str, *, length: int) -> bool:
    return _is_hex(value, length=length) and set(value) != {"0"}


@dataclass(slots=True)
class RateLimitResult:
    allowed: bool
    retry_after_sec: int


class InMemoryRateLimiter:
    """Sliding one-minute window keyed by client."""

    def __init__(self, *, requests_per_minute: int) -> None:
        self.requests_per_minute = requests_per_minute
        self.window_sec = 60.0
        self._events: dict[str, deque[float]] = {}
        self._lock = Lock()

    def check(self, key: str, *, now: float | None = None) -> RateLimitResult:
        current = time.time() if now is None else now
        with self._lock:
            cutoff = current - self.window_sec
            stale_keys = [name for name, events in self._events.items() if not events or events[-1] <= cutoff]
            for name in stale_keys:
                del self._events[name]

            queue = self._events.setdefault(key, deque())
            while queue and queue[0] <= cutoff:
                queue.popleft()

            if len(queue) >= self.requests_per_minute:
                retry_after = max(1, int(queue[0] + self.window_sec - current))
                return RateLimitResult(allowed=False, retry_after_sec=retry_after)

            queue.append(current)
            return RateLimitResult(allowed=True, retry_after_sec=0)

    def tracked_keys(self) -> set[str]:
        with self._lock:
            return set(self._events)


_rate_limiter: InMemoryRateLimiter | None = None


def reset_rate_limiter() -> None:
    global _rate_limiter
    _rate_limiter = None


def _get_rate_limiter(settings: Settings) -> InMemoryRateLimiter:
    global _rate_limiter
    rpm = settings.rate_limit_requests_per_minute
    if _rate_limiter is None or _rate_limiter.requests_per_minute != rpm:
        _rate_limiter = InMemoryRateLimiter(requests_per_minute=rpm)
    return _rate_limiter


def client_ip_for_request(request: Request, settings: Settings) -> str:
    direct_client_ip = request.client.host if request.client else "unknown"
    if not settings.rate_limit_trust_proxy_headers:
        return direct_client_ip
    if direct_client_ip not in settings.parsed_trusted_proxy_ips():
        return direct_client_ip

    candidates = (
        ("X-Forwarded-For", request.headers.get("X-Forwarded-For", "").split(",")[0].strip()),
        ("X-Real-IP", request.headers.get("X-Real-IP", "").strip()),
    )
    for header, candidate in candidates:
        if not candidate:
            continue
        try:
            ipaddress.ip_address(candidate)
        except ValueError:
            logger.warning("Ignoring invalid %s value: %s", header, candidate)
            continue
        return candidate

    return direct_client_ip


def install_request_context(app: FastAPI) -> None:
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", "").strip() or uuid.uuid4().hex
        trace = resolve_trace_context(request.headers.get("traceparent"))
        context_headers = {
            "X-Request-ID": request_id,
            "X-Trace-ID": trace.trace_id,
            "traceparent": trace.traceparent,
        }
        start = time.perf_counter()
        settings = get_settings()

        if settings.rate_limit_enabled and request.method.upper() in _RATE_LIMITED_METHODS:
            client_ip = client_ip_for_request(request, settings)
            decision = _get_rate_limiter(settings).check(f"ip:{client_ip}")
            if not decision.allowed:
                logger.warning(
                    "rate_limited path=%s client_ip=%s request_id=%s",
                    request.url.path,
                    client_ip,
                    request_id,
                )
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Rate limit exceeded"},
                    headers={"Retry-After": str(decision.retry_after_sec), **context_headers},
                )

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000.0
            logger.exception(
                "request_failed method=%s path=%s request_id=%s trace_id=%s duration_ms=%.2f",
                request.method,
                request.url.path,
                request_id,
                trace.trace_id,
                duration_ms,
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000.0
        response.headers.update(context_headers)
        logger.info(
            "request_completed method=%s path=%s status=%s request_id=%s trace_id=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            request_id,
            trace.trace_id,
            duration_ms,
        )
        return response

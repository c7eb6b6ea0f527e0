from __future__ import annotations

from typing import Any

import httpx

from app.config import Settings


class UpstreamError(RuntimeError):
    """Base error for session API adapter failures."""


class UpstreamAPIError(UpstreamError):
    """Raised when the session API returns a non-success status code."""

    def __init__(self, *, method: str, url: str, status_code: int, detail: str) -> None:
        self.method = method.upper()
        self.url = url
        self.status_code = status_code
        self.detail = detail
        super().__init__(
            f"Session API request failed [{self.status_code}] {self.method} {self.url}: {self.detail}"
        )


class UpstreamResponseError(UpstreamError):
    """Raised when a successful response does not carry the expected payload."""


class SessionAPIClient:
    """Small async httpx adapter for the session refresh, profile and games calls."""

    def __init__(
        self,
        *,
        base_url: str,
        refresh_path: str = "/v2/refresh",
        profile_path: str = "/v2/cookie",
        games_path: str = "/v2/games/list",
        user_agent: str = "session-refresher/0.1",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        resolved_base_url = base_url.strip()
        if not resolved_base_url:
            raise ValueError("Session API base URL cannot be empty")
        if not resolved_base_url.endswith("/"):
            resolved_base_url = f"{resolved_base_url}/"

        self.refresh_path = refresh_path.lstrip("/")
        self.profile_path = profile_path.lstrip("/")
        self.games_path = games_path.lstrip("/")
        self._client = httpx.AsyncClient(
            base_url=resolved_base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/json",
                "User-Agent": user_agent,
            },
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SessionAPIClient":
        return cls(
            base_url=settings.upstream_base_url,
            refresh_path=settings.upstream_refresh_path,
            profile_path=settings.upstream_profile_path,
            games_path=settings.upstream_games_path,
            user_agent=settings.upstream_user_agent,
            timeout=settings.upstream_timeout_sec,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SessionAPIClient":
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self.aclose()

    async def refresh_credential(self, credential: str) -> str:
        payload = await self._post_json(self.refresh_path, {"useCookie": credential})
        refreshed = payload.get("cookie")
        if not isinstance(refreshed, str) or not refreshed.strip():
            raise UpstreamResponseError("No refreshed cookie returned")
        return refreshed

    async def fetch_profile(self, credential: str) -> dict[str, Any]:
        return await self._post_json(self.profile_path, {"useCookie": credential})

    async def fetch_games(self, credential: str) -> dict[str, Any]:
        return await self._post_json(self.games_path, {"useCookie": credential})

    async def _post_json(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(endpoint, json=payload)
        if not response.is_success:
            raise UpstreamAPIError(
                method="POST",
                url=str(response.request.url),
                status_code=response.status_code,
                detail=_extract_error_detail(response),
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamResponseError(f"Response from {endpoint} is not valid JSON") from exc
        if not isinstance(body, dict):
            raise UpstreamResponseError(f"Response from {endpoint} is not a JSON object")
        return body


def _extract_error_detail(response: httpx.Response) -> str:
    if not response.content:
        return "empty response body"

    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return text or "empty response body"

    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            message = str(payload.get(key, "")).strip()
            if message:
                return message

    return str(payload)

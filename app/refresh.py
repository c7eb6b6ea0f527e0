from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.upstream import SessionAPIClient, UpstreamError

logger = logging.getLogger("session_refresher.refresh")


class RefreshError(RuntimeError):
    """Base error for refresh orchestration failures."""


class MissingCredentialError(RefreshError):
    """Raised when no usable credential was supplied."""


class RefreshFailedError(RefreshError):
    """Raised when the upstream refresh call does not yield a new credential."""


@dataclass(frozen=True)
class ProfileSummary:
    user_id: str
    user_name: str
    display_name: str

    @classmethod
    def from_profile(cls, profile: dict[str, Any]) -> "ProfileSummary":
        settings = profile.get("userSettings")
        if not isinstance(settings, dict):
            settings = {}
        return cls(
            user_id=str(settings.get("userId", "")),
            user_name=str(settings.get("userName", "")),
            display_name=str(settings.get("displayName", "")),
        )


@dataclass(slots=True)
class RefreshResult:
    cookie: str
    user_data: dict[str, Any] | None = None
    game_data: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"cookie": self.cookie}
        if self.user_data is not None:
            payload["userData"] = self.user_data
        if self.game_data is not None:
            payload["gameData"] = self.game_data
        return payload


async def refresh_session(
    client: SessionAPIClient,
    credential: str | None,
    *,
    include_user_info: bool,
) -> RefreshResult:
    """
    Refresh a session credential and optionally attach profile and games data.

    Profile and games lookups run only when the caller asked for them. Their
    failures are logged and leave the matching field empty; only a missing
    credential or a failed refresh is raised.
    """

    if credential is None or not credential.strip():
        raise MissingCredentialError("Cookie is required")

    try:
        refreshed = await client.refresh_credential(credential)
    except (UpstreamError, httpx.HTTPError) as exc:
        logger.warning("refresh_failed error_type=%s error=%s", type(exc).__name__, exc)
        raise RefreshFailedError("Failed to refresh cookie") from exc

    result = RefreshResult(cookie=refreshed)
    if not include_user_info:
        logger.info("refresh_completed enrichment=skipped")
        return result

    profile_outcome, games_outcome = await asyncio.gather(
        client.fetch_profile(refreshed),
        client.fetch_games(refreshed),
        return_exceptions=True,
    )

    if isinstance(profile_outcome, BaseException):
        _log_enrichment_failure("profile", profile_outcome)
    else:
        result.user_data = profile_outcome
        summary = ProfileSummary.from_profile(profile_outcome)
        logger.info(
            "enrichment_profile_loaded user_id=%s user_name=%s",
            summary.user_id,
            summary.user_name,
        )

    if isinstance(games_outcome, BaseException):
        _log_enrichment_failure("games", games_outcome)
    else:
        result.game_data = games_outcome

    logger.info(
        "refresh_completed enrichment=requested profile=%s games=%s",
        "ok" if result.user_data is not None else "missing",
        "ok" if result.game_data is not None else "missing",
    )
    return result


def _log_enrichment_failure(kind: str, exc: BaseException) -> None:
    if not isinstance(exc, Exception):
        raise exc
    logger.warning("enrichment_%s_failed error_type=%s error=%s", kind, type(exc).__name__, exc)

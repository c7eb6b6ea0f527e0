from __future__ import annotations

from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SESSION_REFRESHER_", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    upstream_base_url: str = Field(default="")
    upstream_refresh_path: str = Field(default="/v2/refresh")
    upstream_profile_path: str = Field(default="/v2/cookie")
    upstream_games_path: str = Field(default="/v2/games/list")
    upstream_timeout_sec: float = Field(default=15.0, ge=1.0, le=120.0)
    upstream_user_agent: str = Field(default="session-refresher/0.1")

    require_api_key: bool = Field(default=False)
    api_keys: str = Field(default="")

    rate_limit_enabled: bool = Field(default=False)
    rate_limit_requests_per_minute: int = Field(default=30, ge=1, le=10000)
    rate_limit_trust_proxy_headers: bool = Field(default=False)
    trusted_proxy_ips: str = Field(default="")

    def parsed_api_keys(self) -> set[str]:
        return {key.strip() for key in self.api_keys.split(",") if key.strip()}

    def parsed_trusted_proxy_ips(self) -> set[str]:
        return {value.strip() for value in self.trusted_proxy_ips.split(",") if value.strip()}

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def upstream_configured(self) -> bool:
        return bool(self.upstream_base_url.strip())

    @staticmethod
    def _contains_placeholder(value: str) -> bool:
        return "replace-with" in value.strip().lower()

    def production_safety_errors(self) -> list[str]:
        if not self.is_production():
            return []

        errors: list[str] = []

        if not self.upstream_configured():
            errors.append("SESSION_REFRESHER_UPSTREAM_BASE_URL must be configured in production")
        elif urlparse(self.upstream_base_url.strip()).scheme != "https":
            errors.append("SESSION_REFRESHER_UPSTREAM_BASE_URL must use https in production")

        if self._contains_placeholder(self.upstream_base_url):
            errors.append("SESSION_REFRESHER_UPSTREAM_BASE_URL must not use placeholder values in production")

        if not self.rate_limit_enabled:
            errors.append("SESSION_REFRESHER_RATE_LIMIT_ENABLED must be enabled in production")

        if self.require_api_key and not self.parsed_api_keys():
            errors.append("SESSION_REFRESHER_API_KEYS must be configured when API keys are required")

        if self._contains_placeholder(self.api_keys):
            errors.append("SESSION_REFRESHER_API_KEYS must not use placeholder values in production")

        if self.rate_limit_trust_proxy_headers and not self.parsed_trusted_proxy_ips():
            errors.append("SESSION_REFRESHER_TRUSTED_PROXY_IPS must be configured when trusting proxy headers")

        return errors


def get_settings() -> Settings:
    return Settings()

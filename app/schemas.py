from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RefreshCookieRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    use_cookie: str | None = Field(default=None, alias="useCookie", max_length=16384)
    include_user_info: bool | None = Field(default=False, alias="includeUserInfo")


class RefreshCookieResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cookie: str
    user_data: dict[str, Any] | None = Field(default=None, alias="userData")
    game_data: dict[str, Any] | None = Field(default=None, alias="gameData")


class ErrorResponse(BaseModel):
    detail: str

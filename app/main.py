from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse

from app import schemas
from app.config import get_settings
from app.middleware import install_request_context
from app.refresh import RefreshFailedError, refresh_session
from app.security import require_refresh_access
from app.ui import REFRESH_UI_HTML
from app.upstream import SessionAPIClient

logger = logging.getLogger("session_refresher.api")

SessionAPIClientFactory = Callable[[], SessionAPIClient]


def _validate_runtime_configuration(settings) -> None:
    safety_errors = settings.production_safety_errors()
    if not safety_errors:
        return

    for error in safety_errors:
        logger.error("unsafe_production_config error=%s", error)
    raise RuntimeError("Unsafe production configuration; see logs for details")


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    _validate_runtime_configuration(settings)
    if not settings.upstream_configured():
        logger.warning("upstream_not_configured setting=SESSION_REFRESHER_UPSTREAM_BASE_URL")

    logger.info("Session Refresher startup complete")
    yield


app = FastAPI(
    title="Session Refresher",
    version="0.1.0",
    description="Refreshes a session cookie against a configured session API.",
    lifespan=lifespan,
)
install_request_context(app)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_invalid path=%s errors=%s", request.url.path, len(exc.errors()))
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})


def _build_session_api_client() -> SessionAPIClient:
    settings = get_settings()
    if not settings.upstream_configured():
        raise HTTPException(status_code=503, detail="Session API is not configured")
    return SessionAPIClient.from_settings(settings)


def get_session_api_client_factory() -> SessionAPIClientFactory:
    return _build_session_api_client


@app.get("/", response_class=HTMLResponse)
def refresh_ui() -> str:
    return REFRESH_UI_HTML


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health/live")
def health_live() -> dict[str, str]:
    return {"status": "live"}


@app.get("/health/ready")
def health_ready() -> dict[str, str]:
    if not get_settings().upstream_configured():
        raise HTTPException(status_code=503, detail="Session API not configured")
    return {"status": "ready"}


@app.post(
    "/api/refresh-cookie",
    response_model=schemas.RefreshCookieResponse,
    response_model_exclude_none=True,
    responses={400: {"model": schemas.ErrorResponse}, 500: {"model": schemas.ErrorResponse}},
)
async def refresh_cookie(
    payload: schemas.RefreshCookieRequest,
    _: None = Depends(require_refresh_access),
    client_factory: SessionAPIClientFactory = Depends(get_session_api_client_factory),
) -> schemas.RefreshCookieResponse:
    if payload.use_cookie is None or not payload.use_cookie.strip():
        raise HTTPException(status_code=400, detail="Cookie is required")

    async with client_factory() as client:
        try:
            result = await refresh_session(
                client,
                payload.use_cookie,
                include_user_info=bool(payload.include_user_info),
            )
        except RefreshFailedError as exc:
            raise HTTPException(status_code=500, detail="Failed to refresh cookie") from exc

    return schemas.RefreshCookieResponse.model_validate(result.to_payload())

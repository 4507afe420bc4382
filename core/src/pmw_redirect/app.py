from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from pmw_redirect import __version__
from pmw_redirect.config import RedirectConfig, load_redirect_config
from pmw_redirect.handler import RedirectHandler, internal_error_response
from pmw_redirect.logsink import RedirectLog

logger = logging.getLogger(__name__)


def _mount_variant(app: FastAPI, handler: RedirectHandler) -> None:
    async def endpoint(request: Request) -> Response:
        return handler.handle(request)

    app.add_api_route(
        handler.variant.path,
        endpoint,
        methods=["GET", "OPTIONS"],
        name=f"reset-redirect-{handler.variant.name}",
        response_model=None,
        include_in_schema=True,
    )


def create_app(config: RedirectConfig | None = None, log: RedirectLog | None = None) -> FastAPI:
    if config is None:
        config = load_redirect_config()

    app = FastAPI(title="ParkMyWhip Reset Redirect", version=__version__)
    app.state.redirect_config = config

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        # Path only; the query string carries reset tokens.
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> Response:
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return PlainTextResponse(message, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> Response:
        # Never leak internals to the client.
        logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
        return internal_error_response()

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    for variant in config.variants:
        _mount_variant(app, RedirectHandler(variant, config.deep_link, log=log))
        logger.info("Mounted %s variant at %s", variant.name, variant.path)

    return app

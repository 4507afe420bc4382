from __future__ import annotations

import logging
from typing import Any, Final

from fastapi import Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from starlette.responses import Response

from pmw_redirect.config import DeepLinkConfig, VariantConfig
from pmw_redirect.cors import preflight_response, with_cors
from pmw_redirect.deeplink import build_deep_link, redact_query, resolve_reset_request
from pmw_redirect.logsink import RedirectLog, StdlibRedirectLog
from pmw_redirect.ui.page import render_redirect_page

MISSING_TOKEN_BODY: Final[str] = "Missing token"
INTERNAL_ERROR_BODY: Final[str] = "Internal Server Error"

logger = logging.getLogger(__name__)


def internal_error_response() -> Response:
    return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=500)


def _loggable_url(request: Request) -> str:
    query = redact_query(request.url.query)
    return f"{request.url.path}?{query}" if query else request.url.path


class RedirectHandler:
    """Turns a password-reset link into a jump into the mobile app.

    One instance serves one configured variant. Redirect variants answer
    with a 302 to the deep link (or 400 when the query has no token); HTML
    variants always answer 200 with a page whose script finds the token,
    because a hash fragment is only visible in the browser.
    """

    def __init__(
        self,
        variant: VariantConfig,
        deep_link: DeepLinkConfig,
        log: RedirectLog | None = None,
    ) -> None:
        self.variant = variant
        self.deep_link = deep_link
        self.log = log or StdlibRedirectLog()

    def _log(self, level: int, message: str, context: dict[str, Any]) -> None:
        # A broken sink must never change the response.
        try:
            self.log.log(level, message, context)
        except Exception:
            logger.debug("Redirect log sink failed", exc_info=True)

    def handle(self, request: Request) -> Response:
        self._log(
            logging.INFO,
            "Incoming reset redirect request",
            {
                "variant": self.variant.name,
                "method": request.method,
                "url": _loggable_url(request),
            },
        )

        if request.method == "OPTIONS":
            return preflight_response()

        try:
            if self.variant.response_mode == "redirect":
                return self._redirect(request)
            return self._html(request)
        except Exception as exc:
            self._log(
                logging.ERROR,
                "Failed to build reset redirect response",
                {"variant": self.variant.name, "error": type(exc).__name__},
            )
            return internal_error_response()

    def _redirect(self, request: Request) -> Response:
        # Server side only ever sees the query string.
        reset = resolve_reset_request("", request.url.query, self.variant.token_source)
        if reset is None:
            self._log(
                logging.WARNING, "Reset token missing from query", {"variant": self.variant.name}
            )
            return PlainTextResponse(MISSING_TOKEN_BODY, status_code=400)

        target = build_deep_link(self.deep_link, self.variant.route_segment, reset)
        self._log(
            logging.INFO,
            "Redirecting to app",
            {
                "variant": self.variant.name,
                "source": reset.source,
                "type": reset.type,
                "route": target.route_segment,
            },
        )
        return RedirectResponse(url=target.uri, status_code=302)

    def _html(self, request: Request) -> Response:
        self._log(
            logging.INFO,
            "Serving redirect page",
            {
                "variant": self.variant.name,
                "token_source": self.variant.token_source,
                "has_query_token": "token" in request.query_params,
            },
        )
        return with_cors(render_redirect_page(request, self.variant, self.deep_link))

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from pmw_redirect.config import DeepLinkConfig, VariantConfig
from pmw_redirect.deeplink import app_home_link

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def client_config(variant: VariantConfig, deep_link: DeepLinkConfig) -> dict[str, Any]:
    """Values the browser script needs; embedded in the page as JSON."""

    return {
        "scheme": deep_link.scheme,
        "host": deep_link.host,
        "route": variant.route_segment,
        "tokenSource": variant.token_source,
        "fallbackDelayMs": variant.fallback_delay_ms,
    }


def render_redirect_page(
    request: Request, variant: VariantConfig, deep_link: DeepLinkConfig
) -> Response:
    return templates.TemplateResponse(
        request,
        "reset_redirect.html",
        {
            "title": f"Redirecting - {deep_link.app_name}",
            "app_name": deep_link.app_name,
            "app_link": app_home_link(deep_link),
            "client_config": client_config(variant, deep_link),
        },
        media_type="text/html; charset=utf-8",
    )

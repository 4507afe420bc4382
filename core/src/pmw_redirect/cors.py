from __future__ import annotations

from typing import Final

from starlette.responses import Response

CORS_HEADERS: Final[dict[str, str]] = {
    "access-control-allow-origin": "*",
    "access-control-allow-headers": "authorization, x-client-info, apikey, content-type",
    "access-control-allow-methods": "GET, OPTIONS",
    "access-control-max-age": "86400",
}


def with_cors(response: Response) -> Response:
    response.headers.update(CORS_HEADERS)
    return response


def preflight_response() -> Response:
    return Response(status_code=200, headers=dict(CORS_HEADERS))

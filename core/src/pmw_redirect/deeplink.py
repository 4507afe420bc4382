from __future__ import annotations

from dataclasses import dataclass
from typing import Final
from urllib.parse import parse_qsl, quote

from pmw_redirect.config import DeepLinkConfig, TokenSource

DEFAULT_RESET_TYPE: Final[str] = "recovery"

# Same unreserved set as JavaScript's encodeURIComponent.
_COMPONENT_SAFE: Final[str] = "-_.!~*'()"

_SECRET_PARAMS: Final[frozenset[str]] = frozenset({"token", "access_token", "refresh_token"})


@dataclass(frozen=True)
class ResetRequest:
    """Token material pulled from one incoming reset link.

    Query-flow links carry ``token``; hash-flow links carry an
    ``access_token``/``refresh_token`` pair. Only one shape is set.
    """

    type: str = DEFAULT_RESET_TYPE
    token: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None

    @property
    def source(self) -> str:
        return "hash" if self.access_token else "query"

    def link_params(self) -> list[tuple[str, str]]:
        if self.access_token:
            return [
                ("access_token", self.access_token),
                ("refresh_token", self.refresh_token or ""),
                ("type", self.type),
            ]
        return [("token", self.token or ""), ("type", self.type)]


@dataclass(frozen=True)
class DeepLinkTarget:
    scheme: str
    host: str
    route_segment: str
    params: tuple[tuple[str, str], ...] = ()

    @property
    def uri(self) -> str:
        base = f"{self.scheme}://{self.host}/{self.route_segment}"
        if not self.params:
            return base
        query = "&".join(f"{key}={encode_component(value)}" for key, value in self.params)
        return f"{base}?{query}"


def encode_component(value: str) -> str:
    return quote(value, safe=_COMPONENT_SAFE)


def parse_params(raw: str) -> dict[str, str]:
    """Parse a query string or fragment the way URLSearchParams does.

    A leading ``?`` or ``#`` is ignored, ``+`` decodes to a space, and the
    first occurrence of a repeated key wins.
    """

    text = raw or ""
    if text[:1] in ("?", "#"):
        text = text[1:]

    out: dict[str, str] = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        out.setdefault(key, value)
    return out


def resolve_query_token(query: str) -> ResetRequest | None:
    params = parse_params(query)
    token = params.get("token")
    if not token:
        return None
    return ResetRequest(token=token, type=params.get("type") or DEFAULT_RESET_TYPE)


def resolve_fragment_token(fragment: str) -> ResetRequest | None:
    params = parse_params(fragment)
    access_token = params.get("access_token")
    if not access_token:
        return None
    return ResetRequest(
        access_token=access_token,
        refresh_token=params.get("refresh_token") or "",
        type=params.get("type") or DEFAULT_RESET_TYPE,
    )


def resolve_reset_request(
    fragment: str, query: str, token_source: TokenSource = "both"
) -> ResetRequest | None:
    """Find the reset token, checking the fragment before the query string.

    The browser script in ``ui/templates/reset_redirect.js`` runs this same
    algorithm against ``window.location``. On the server the fragment is
    always empty.
    """

    if token_source in ("hash", "both"):
        found = resolve_fragment_token(fragment)
        if found is not None:
            return found
    if token_source in ("query", "both"):
        return resolve_query_token(query)
    return None


def build_deep_link(
    deep_link: DeepLinkConfig, route_segment: str, reset: ResetRequest
) -> DeepLinkTarget:
    return DeepLinkTarget(
        scheme=deep_link.scheme,
        host=deep_link.host,
        route_segment=route_segment,
        params=tuple(reset.link_params()),
    )


def app_home_link(deep_link: DeepLinkConfig) -> str:
    return f"{deep_link.scheme}://{deep_link.host}"


def redact_query(query: str) -> str:
    """Return ``query`` with token values masked, for logging."""

    pairs = parse_qsl(query or "", keep_blank_values=True)
    return "&".join(
        f"{encode_component(key)}={'***' if key in _SECRET_PARAMS else encode_component(value)}"
        for key, value in pairs
    )

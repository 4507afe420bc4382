from __future__ import annotations

import json
import re

from fastapi.testclient import TestClient

from pmw_redirect.app import create_app
from pmw_redirect.config import DeepLinkConfig, RedirectConfig, VariantConfig
from pmw_redirect.cors import CORS_HEADERS

_CONFIG_RE = re.compile(
    r'<script type="application/json" id="redirect-config">(.*?)</script>', re.DOTALL
)


def _embedded_config(html: str) -> dict:
    match = _CONFIG_RE.search(html)
    assert match is not None
    return json.loads(match.group(1))


def test_browser_variant_serves_page_with_cors(client: TestClient) -> None:
    r = client.get("/password-reset-redirect")
    assert r.status_code == 200
    assert r.headers["content-type"] == "text/html; charset=utf-8"
    for name, value in CORS_HEADERS.items():
        assert r.headers[name] == value

    assert "Opening ParkMyWhip..." in r.text
    assert 'id="fallback-link"' in r.text
    assert _embedded_config(r.text) == {
        "scheme": "parkmywhip",
        "host": "parkmywhip.com",
        "route": "reset-password",
        "tokenSource": "both",
        "fallbackDelayMs": None,
    }


def test_page_is_served_even_with_query_token(client: TestClient) -> None:
    r = client.get("/password-reset-redirect", params={"token": "T"}, follow_redirects=False)
    assert r.status_code == 200
    assert "location" not in r.headers
    # The token is read by the script, never written into the page.
    assert "token=T" not in r.text


def test_page_without_token_carries_error_and_manual_link(client: TestClient) -> None:
    r = client.get("/password-reset-redirect")
    assert "Missing reset token. Please request a new password reset link." in r.text
    assert 'href="parkmywhip://parkmywhip.com"' in r.text
    assert "Open ParkMyWhip App" in r.text


def test_script_checks_hash_before_query(client: TestClient) -> None:
    html = client.get("/password-reset-redirect").text
    assert "encodeURIComponent" in html
    assert html.index("fromHash(location.hash)") < html.index("fromQuery(location.search)")
    assert "window.location.href = deepLink" in html


def test_hash_variant_arms_fallback_timer(client: TestClient) -> None:
    r = client.get("/password-reset-redirect/hash")
    assert r.status_code == 200
    cfg = _embedded_config(r.text)
    assert cfg["tokenSource"] == "hash"
    assert cfg["fallbackDelayMs"] == 3000
    assert "setTimeout" in r.text
    assert 'id="fallback-button"' in r.text


def test_custom_deep_link_and_route_are_embedded() -> None:
    config = RedirectConfig(
        deep_link=DeepLinkConfig(scheme="pmwdev", host="dev.example.com", app_name="PMW Dev"),
        variants=[
            VariantConfig(name="only", path="/reset", route_segment="resetPassword"),
        ],
    )
    with TestClient(create_app(config)) as client:
        r = client.get("/reset")
        assert r.status_code == 200
        assert "<title>Redirecting - PMW Dev</title>" in r.text
        cfg = _embedded_config(r.text)
        assert cfg["scheme"] == "pmwdev"
        assert cfg["host"] == "dev.example.com"
        assert cfg["route"] == "resetPassword"


def test_app_name_is_html_escaped() -> None:
    config = RedirectConfig(
        deep_link=DeepLinkConfig(app_name="<b>Evil</b>"),
        variants=[VariantConfig(name="only", path="/reset")],
    )
    with TestClient(create_app(config)) as client:
        html = client.get("/reset").text
        assert "<b>Evil</b>" not in html
        assert "&lt;b&gt;Evil&lt;/b&gt;" in html

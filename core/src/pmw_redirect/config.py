from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

CONFIG_ENV_VAR = "PMW_REDIRECT_CONFIG"

TokenSource = Literal["query", "hash", "both"]
ResponseMode = Literal["redirect", "html"]


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=8790, ge=1, le=65535)


class DeepLinkConfig(BaseModel):
    """Custom URI scheme registered by the mobile app."""

    scheme: str = Field(default="parkmywhip", min_length=1)
    host: str = Field(default="parkmywhip.com", min_length=1)
    app_name: str = Field(default="ParkMyWhip", description="Shown on the redirect page")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    file: str | None = Field(
        default=None,
        description="Optional log file path; if omitted, logs only go to stderr.",
    )
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class VariantConfig(BaseModel):
    """One mounted flavor of the redirect handler."""

    name: str = Field(min_length=1)
    path: str = Field(description="Mount path, e.g. /password-reset-redirect")
    token_source: TokenSource = Field(default="both")
    response_mode: ResponseMode = Field(default="html")
    route_segment: str = Field(default="reset-password", min_length=1)
    fallback_delay_ms: int | None = Field(
        default=None,
        ge=0,
        description="If set, reveal a manual 'open app' button after this many milliseconds.",
    )

    @model_validator(mode="after")
    def _check_mode(self) -> VariantConfig:
        if not self.path.startswith("/"):
            raise ValueError("path must start with '/'")
        # The fragment never reaches the server, so a redirect can't use it.
        if self.response_mode == "redirect" and self.token_source == "hash":
            raise ValueError("redirect mode cannot read tokens from the hash fragment")
        return self


def default_variants() -> list[VariantConfig]:
    return [
        VariantConfig(
            name="browser",
            path="/password-reset-redirect",
            token_source="both",
            response_mode="html",
            route_segment="reset-password",
        ),
        VariantConfig(
            name="hash",
            path="/password-reset-redirect/hash",
            token_source="hash",
            response_mode="html",
            route_segment="reset-password",
            fallback_delay_ms=3000,
        ),
        VariantConfig(
            name="query",
            path="/password-reset-redirect/query",
            token_source="query",
            response_mode="redirect",
            route_segment="resetPassword",
        ),
    ]


class RedirectConfig(BaseModel):
    version: str = Field(default="1")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    deep_link: DeepLinkConfig = Field(default_factory=DeepLinkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    variants: list[VariantConfig] = Field(default_factory=default_variants)

    @model_validator(mode="after")
    def _check_variants(self) -> RedirectConfig:
        names = [v.name for v in self.variants]
        if len(set(names)) != len(names):
            raise ValueError("variant names must be unique")
        paths = [v.path for v in self.variants]
        if len(set(paths)) != len(paths):
            raise ValueError("variant paths must be unique")
        return self


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def resolve_config_path(environ: dict[str, str] | None = None) -> Path | None:
    env = os.environ if environ is None else environ

    raw = (env.get(CONFIG_ENV_VAR) or "").strip()
    if not raw:
        return None
    return Path(raw).expanduser().resolve()


def load_redirect_config(path: Path | None = None) -> RedirectConfig:
    """Load config from the JSON file named by $PMW_REDIRECT_CONFIG.

    - If unset or missing: returns defaults.
    - Validation is performed by Pydantic.
    """

    config_path = path if path is not None else resolve_config_path()
    if config_path is None or not config_path.exists():
        return RedirectConfig()

    raw = _read_json(config_path)
    return RedirectConfig.model_validate(raw)

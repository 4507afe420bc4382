from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import Any, Protocol


class RedirectLog(Protocol):
    """Diagnostic side channel for the redirect handler.

    Nothing the handler returns depends on what is logged.
    """

    def log(self, level: int, message: str, context: dict[str, Any] | None = None) -> None: ...


class StdlibRedirectLog:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("pmw_redirect.handler")

    def log(self, level: int, message: str, context: dict[str, Any] | None = None) -> None:
        exc_info = level >= logging.ERROR
        if context:
            rendered = " ".join(f"{k}={v}" for k, v in context.items())
            self._logger.log(level, "%s (%s)", message, rendered, exc_info=exc_info)
        else:
            self._logger.log(level, "%s", message, exc_info=exc_info)


def configure_logging(
    *,
    level: str = "INFO",
    log_file: str | None = None,
    max_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(
            RotatingFileHandler(
                log_file,
                maxBytes=max_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )

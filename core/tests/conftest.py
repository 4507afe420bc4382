from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from pmw_redirect.app import create_app
from pmw_redirect.config import RedirectConfig


class RecordingLog:
    def __init__(self) -> None:
        self.entries: list[tuple[int, str, dict[str, Any]]] = []

    def log(self, level: int, message: str, context: dict[str, Any] | None = None) -> None:
        self.entries.append((level, message, dict(context or {})))

    def messages(self, level: int | None = None) -> list[str]:
        return [m for lvl, m, _ in self.entries if level is None or lvl == level]


@pytest.fixture
def recording_log() -> RecordingLog:
    return RecordingLog()


@pytest.fixture
def client(recording_log: RecordingLog) -> TestClient:
    with TestClient(create_app(RedirectConfig(), log=recording_log)) as c:
        yield c

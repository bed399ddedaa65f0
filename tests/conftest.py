"""
Shared pytest fixtures for suitectl tests.

This module provides:
- Settings isolation (no user config file, no ``SUITECTL_*`` leakage)
- Logging bound to the test's captured stderr
- A thread-safe fake API client and an ``InvocationContext`` built on it
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from suitectl.api.client import ApiRequest
from suitectl.core.config import SuiteSettings, clear_settings_cache
from suitectl.core.logging import configure_logging
from suitectl.execution.context import InvocationContext


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """No config file, no ``.env`` and no ``SUITECTL_*`` variables from the host."""
    for key in list(os.environ):
        if key.startswith("SUITECTL_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("suitectl.core.config.settings.DEFAULT_CONFIG_FILE", tmp_path / "no-config.toml")
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    """Route structlog to the stderr pytest is capturing for this test."""
    configure_logging(level="WARNING", json_format=False, force=True)


# =============================================================================
# Fake API client
# =============================================================================


class FakeClient:
    """Stands in for :class:`ApiClient`; records every request it executes.

    ``handler(request)`` returns the response or raises; the default
    handler answers ``True`` for action requests and ``{"id": <url>}``
    otherwise.
    """

    def __init__(self, handler: Callable[[ApiRequest], Any] | None = None):
        self.handler = handler or self._default
        self.requests: list[ApiRequest] = []
        self.closed = False
        self._lock = threading.Lock()

    @staticmethod
    def _default(request: ApiRequest) -> Any:
        if request.action:
            return True
        return {"id": request.url.rsplit("/", 1)[-1]}

    def execute(self, request: ApiRequest) -> Any:
        with self._lock:
            self.requests.append(request)
        return self.handler(request)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def settings() -> SuiteSettings:
    return SuiteSettings(
        access_token="test-token",
        standard_delay_ms=0,
        retry_base_delay=0.0,
        retry_max_delay=0.0,
    )


@pytest.fixture
def invocation(settings: SuiteSettings, fake_client: FakeClient) -> InvocationContext:
    return InvocationContext(settings=settings, client_factory=lambda _: fake_client)


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write ``content`` to ``tmp_path / name`` and return the path."""

    def _write(content: str, name: str = "rows.csv") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write

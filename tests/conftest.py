"""Shared test fixtures for postfetch.

Provides an isolated config environment, a fake upstream served through
:class:`httpx.MockTransport`, sample posts, and a CLI runner. These
fixtures are discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx
import pytest

from postfetch.models import UpstreamConfig
from postfetch.output import OutputFormat, OutputManager, reset_output, set_output


BASE_URL = "https://upstream.test"


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the package logger after every test.

    Both cache references to the streams that Typer's CliRunner swaps in
    during a test; once the test ends those streams are closed.
    """
    yield
    reset_output()
    logger = logging.getLogger("postfetch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Fake upstream
# ---------------------------------------------------------------------------


class FakeUpstream:
    """Route table behind an :class:`httpx.MockTransport`.

    Routes are keyed by path plus query string (``/posts?userId=1``).
    Unknown routes answer 404. Every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Any]] = {}
        self.errors: set[str] = set()
        self.requests: list[httpx.Request] = []

    def add(self, path: str, body: Any = None, status: int = 200) -> None:
        """Serve *body* (JSON-encoded unless ``bytes``) at *path*."""
        self.routes[path] = (status, body)

    def fail(self, path: str) -> None:
        """Make *path* raise a connection error."""
        self.errors.add(path)

    def calls(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.raw_path.decode() == path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.raw_path.decode()
        if key in self.errors:
            raise httpx.ConnectError("connection refused", request=request)
        if key not in self.routes:
            return httpx.Response(404, json={})
        status, body = self.routes[key]
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def upstream() -> FakeUpstream:
    """An empty fake upstream; tests add the routes they need."""
    return FakeUpstream()


@pytest.fixture
def upstream_config() -> UpstreamConfig:
    return UpstreamConfig(base_url=BASE_URL, timeout=5)


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_posts() -> list[dict[str, Any]]:
    """Three posts in wire shape, two owned by user 1 and one by user 2."""
    return [
        {"id": 1, "userId": 1, "title": "First post", "body": "Hello world"},
        {"id": 2, "userId": 1, "title": "Second post", "body": "More text"},
        {"id": 3, "userId": 2, "title": "Third post", "body": "Another owner"},
    ]


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path, forces the XDG layout, clears all
    POSTFETCH_* environment variables, and changes the working directory
    to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("postfetch.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "POSTFETCH_BASE_URL",
        "POSTFETCH_CACHE_BACKEND",
        "POSTFETCH_CACHE_TTL",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()

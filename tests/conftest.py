"""
Pytest configuration for the demo MCP server tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from mcp_demo.config import AppConfig
from mcp_demo.context import RequestContext, ServerState
from mcp_demo.server import build_state

# Configure pytest-asyncio mode
pytest_plugins = ["pytest_asyncio"]


class RecordingSink:
    """Notification sink that records instead of writing."""

    def __init__(self) -> None:
        self.notifications: list[tuple[str, dict[str, Any]]] = []
        self.scheduled: list[tuple[float, Callable[[], None]]] = []

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        self.notifications.append((method, params or {}))

    def schedule(self, delay: float, callback: Callable[[], None]) -> None:
        self.scheduled.append((delay, callback))

    def fire_scheduled(self) -> None:
        """Run every scheduled callback now."""
        scheduled, self.scheduled = self.scheduled, []
        for _delay, callback in scheduled:
            callback()


@pytest.fixture(autouse=True)
def _cleanup_loggers() -> Iterator[None]:
    """Remove handlers installed by setup_logging after each test."""
    yield
    logger = logging.getLogger("mcp_demo")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def demo_root(tmp_path: Path) -> Path:
    """A resource root holding two text files and a subdirectory."""
    root = tmp_path / "demo-root"
    root.mkdir()
    (root / "hello.txt").write_text("Hello from the demo root.\n", encoding="utf-8")
    (root / "notes.md").write_text("# Notes\n", encoding="utf-8")
    (root / "nested").mkdir()
    (root / "nested" / "deep.txt").write_text("not listed", encoding="utf-8")
    return root


@pytest.fixture
def app_config(demo_root: Path) -> AppConfig:
    """Configuration pointing at the demo root, with immediate notifications."""
    return AppConfig(
        resources={"roots": [str(demo_root)]},
        notifications={"list_changed_delay_seconds": 0},
    )


@pytest.fixture
def state(app_config: AppConfig) -> ServerState:
    """ServerState built from app_config."""
    return build_state(app_config)


@pytest.fixture
def sink() -> RecordingSink:
    """A fresh RecordingSink."""
    return RecordingSink()


@pytest.fixture
def make_ctx(
    state: ServerState, sink: RecordingSink
) -> Callable[[str], RequestContext]:
    """Factory for RequestContext objects bound to the shared state."""

    def factory(method: str, request_id: Any = 1) -> RequestContext:
        return RequestContext(
            method=method,
            request_id=request_id,
            state=state,
            sink=sink,
        )

    return factory

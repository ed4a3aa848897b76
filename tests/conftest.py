"""Shared pytest fixtures for the rescaffold test suite.

Provides reusable fixtures for:
- Temporary application roots and configs
- A recording log sink and an attached log queue
- A fully wired ResourceGenerator
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from rescaffold.config import Config, LogConfig
from rescaffold.logger import LogLevel, LogQueue
from rescaffold.registry import ResourceRegistry
from rescaffold.scaffolder import ResourceGenerator


# ---------------------------------------------------------------------------
# Recording sink
# ---------------------------------------------------------------------------


class RecordingSink:
    """In-memory stand-in for ``LogSink`` that remembers every emit."""

    def __init__(self) -> None:
        self.records: list[tuple[str, LogLevel]] = []
        self.with_stack: list[str] = []

    def is_ready(self) -> bool:
        return True

    def emit(self, message: str, level: LogLevel | str = LogLevel.INFO, *, show_stack: bool = False) -> None:
        self.records.append((message, LogLevel.parse(level)))
        if show_stack:
            self.with_stack.append(message)

    def messages(self, level: Optional[LogLevel] = None) -> list[str]:
        return [m for m, lvl in self.records if level is None or lvl is level]


# ---------------------------------------------------------------------------
# Paths & config
# ---------------------------------------------------------------------------

@pytest.fixture
def app_root(tmp_path: Path) -> Path:
    """Temporary application root (auto-cleanup)."""
    root = tmp_path / "app"
    root.mkdir()
    yield root


@pytest.fixture
def config(app_root: Path) -> Config:
    """Config rooted in the temporary application folder."""
    return Config(app_root=app_root, logging=LogConfig(output_length=2_000))


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def sink_factory() -> type[RecordingSink]:
    """The recording sink class, for tests that need several sinks."""
    return RecordingSink


@pytest.fixture
def log_queue(config: Config, sink: RecordingSink) -> LogQueue:
    """A live log queue that records into ``sink``."""
    queue = LogQueue(config.logging.output_length)
    queue.attach(sink)
    return queue


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

@pytest.fixture
def registry(config: Config) -> ResourceRegistry:
    return ResourceRegistry(config)


@pytest.fixture
def generator(config: Config, log_queue: LogQueue, registry: ResourceRegistry) -> ResourceGenerator:
    """A ResourceGenerator writing into the temporary application root."""
    return ResourceGenerator(config, log=log_queue, registry=registry)


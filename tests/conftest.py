"""Pytest fixtures for MindGraph tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from mindgraph.config import Config, reset_config
from mindgraph.container import Container, reset_container
from mindgraph.domain.models import CONVERSATION_ID_KEY, MemoryRecord, MemoryType

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeScheduler:
    """Collects delayed callbacks so tests can fire them by hand."""

    def __init__(self) -> None:
        self.calls: list[tuple[float, Callable[[], None]]] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> object:
        self.calls.append((delay, callback))
        return object()

    def fire_all(self) -> None:
        """Fire every collected callback, including ones scheduled meanwhile."""
        while self.calls:
            _, callback = self.calls.pop(0)
            callback()


@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary data directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_data_dir: Path) -> Generator[Config, None, None]:
    """Create a test configuration backed by in-process stores."""
    config = Config(
        data_dir=temp_data_dir,
        store_backend="memory",
        max_graph_nodes=100,
        min_link_strength=0.2,
    )
    yield config


@pytest.fixture
def json_config(temp_data_dir: Path) -> Generator[Config, None, None]:
    """Create a test configuration backed by JSON files."""
    yield Config(data_dir=temp_data_dir, store_backend="json")


@pytest.fixture
def container(test_config: Config) -> Generator[Container, None, None]:
    """Create a test container with isolated dependencies."""
    # Reset any global state
    reset_config()
    reset_container()

    container = Container.create(test_config)
    yield container

    # Cleanup
    container.close()
    reset_container()
    reset_config()


@pytest.fixture
def fake_scheduler() -> FakeScheduler:
    """A scheduler that never fires on its own."""
    return FakeScheduler()


@pytest.fixture
def make_memory() -> Callable[..., MemoryRecord]:
    """Factory for memory records with sensible defaults."""
    counter = {"n": 0}

    def _make(
        content: str = "A memory",
        *,
        memory_id: str | None = None,
        agent_id: str = "agent-1",
        memory_type: MemoryType = MemoryType.CONVERSATION,
        keywords: list[str] | None = None,
        importance: int = 5,
        minutes: float = 0.0,
        conversation_id: str | None = None,
        **extra: Any,
    ) -> MemoryRecord:
        counter["n"] += 1
        metadata = {CONVERSATION_ID_KEY: conversation_id} if conversation_id else {}
        return MemoryRecord(
            id=memory_id or f"mem_{counter['n']:03d}",
            agent_id=agent_id,
            memory_type=memory_type,
            content=content,
            keywords=keywords or [],
            importance=importance,
            timestamp=BASE_TIME + timedelta(minutes=minutes),
            metadata=metadata,
            **extra,
        )

    return _make


@pytest.fixture(autouse=True)
def set_test_env(temp_data_dir: Path) -> Generator[None, None, None]:
    """Set environment variables for tests."""
    old_env = os.environ.get("MINDGRAPH_DATA_DIR")
    os.environ["MINDGRAPH_DATA_DIR"] = str(temp_data_dir)
    yield
    if old_env:
        os.environ["MINDGRAPH_DATA_DIR"] = old_env
    else:
        os.environ.pop("MINDGRAPH_DATA_DIR", None)

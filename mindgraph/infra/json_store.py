"""JSON-file store adapters.

One file per agent under ``data_dir/memories`` and ``data_dir/graphs``.
Writers take a ``filelock.FileLock`` beside the target file and replace
it atomically (temp file + ``os.replace``), so a crash mid-write leaves
the previous version intact and concurrent processes never interleave.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from urllib.parse import quote

from filelock import FileLock, Timeout
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..domain.exceptions import MemoryNotFoundError, StoreError
from ..domain.models import MemoryGraph, MemoryRecord
from .store import apply_memory_update

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10.0  # seconds

_memory_list = TypeAdapter(list[MemoryRecord])


def agent_filename(agent_id: str) -> str:
    """Filesystem-safe file name for an agent id."""
    return f"{quote(agent_id, safe='')}.json"


def atomic_write(path: Path, payload: str) -> None:
    """Write ``payload`` to ``path`` through a temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class _FileLocks:
    """One FileLock per target file, reused so acquisition is re-entrant."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self._locks: dict[Path, FileLock] = {}

    @contextmanager
    def hold(self, path: Path) -> Iterator[None]:
        lock = self._locks.get(path)
        try:
            if lock is None:
                path.parent.mkdir(parents=True, exist_ok=True)
                lock = FileLock(str(path) + ".lock", timeout=self.timeout)
                self._locks[path] = lock
            lock.acquire()
        except Timeout as e:
            raise StoreError(f"Timed out waiting for lock on {path}") from e
        except OSError as e:
            raise StoreError(f"Cannot lock {path}: {e}") from e
        try:
            yield
        finally:
            lock.release()


class JsonMemoryStore:
    """Memory records kept as one JSON array per agent."""

    def __init__(self, root: Path, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.root = root
        self._locks = _FileLocks(lock_timeout)

    def _path(self, agent_id: str) -> Path:
        return self.root / agent_filename(agent_id)

    def _read(self, path: Path) -> list[MemoryRecord]:
        try:
            if not path.exists():
                return []
            return _memory_list.validate_json(path.read_bytes())
        except (OSError, PydanticValidationError) as e:
            raise StoreError(f"Failed to read memories from {path}: {e}") from e

    def _write(self, path: Path, memories: list[MemoryRecord]) -> None:
        try:
            atomic_write(path, _memory_list.dump_json(memories, indent=2).decode("utf-8"))
        except OSError as e:
            raise StoreError(f"Failed to write memories to {path}: {e}") from e

    def _locate(self, memory_id: str) -> tuple[Path, list[MemoryRecord], int]:
        try:
            paths = sorted(self.root.glob("*.json")) if self.root.is_dir() else []
        except OSError as e:
            raise StoreError(f"Failed to list {self.root}: {e}") from e
        for path in paths:
            memories = self._read(path)
            for index, memory in enumerate(memories):
                if memory.id == memory_id:
                    return path, memories, index
        raise MemoryNotFoundError(memory_id)

    def get_all_memories(self, agent_id: str) -> list[MemoryRecord]:
        return [m for m in self._read(self._path(agent_id)) if m.is_active]

    def get_memory(self, memory_id: str) -> MemoryRecord | None:
        try:
            _, memories, index = self._locate(memory_id)
        except MemoryNotFoundError:
            return None
        return memories[index]

    def add_memory(self, memory: MemoryRecord) -> MemoryRecord:
        path = self._path(memory.agent_id)
        with self._locks.hold(path):
            memories = [m for m in self._read(path) if m.id != memory.id]
            memories.append(memory)
            self._write(path, memories)
        logger.debug(f"Stored memory {memory.id} in {path}")
        return memory

    def update_memory(
        self,
        memory_id: str,
        importance: int | None = None,
        keywords: list[str] | None = None,
    ) -> MemoryRecord:
        return self._replace(
            memory_id,
            lambda m: apply_memory_update(m, importance=importance, keywords=keywords),
        )

    def soft_delete(self, memory_id: str) -> MemoryRecord:
        return self._replace(memory_id, lambda m: apply_memory_update(m, is_active=False))

    def hard_delete(self, memory_id: str) -> None:
        path, _, _ = self._locate(memory_id)
        with self._locks.hold(path):
            memories = self._read(path)
            remaining = [m for m in memories if m.id != memory_id]
            if len(remaining) == len(memories):
                raise MemoryNotFoundError(memory_id)
            self._write(path, remaining)
        logger.info(f"Hard-deleted memory {memory_id}")

    def _replace(
        self, memory_id: str, change: Callable[[MemoryRecord], MemoryRecord]
    ) -> MemoryRecord:
        path, _, _ = self._locate(memory_id)
        with self._locks.hold(path):
            # Re-read under the lock; another writer may have changed the file
            memories = self._read(path)
            for index, memory in enumerate(memories):
                if memory.id == memory_id:
                    memories[index] = change(memory)
                    self._write(path, memories)
                    return memories[index]
        raise MemoryNotFoundError(memory_id)


class JsonGraphStore:
    """Memory graphs kept as one JSON document per agent."""

    def __init__(self, root: Path, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.root = root
        self._locks = _FileLocks(lock_timeout)

    def _path(self, agent_id: str) -> Path:
        return self.root / agent_filename(agent_id)

    def load_graph(self, agent_id: str) -> MemoryGraph | None:
        path = self._path(agent_id)
        try:
            if not path.exists():
                return None
            return MemoryGraph.model_validate_json(path.read_bytes())
        except (OSError, PydanticValidationError) as e:
            raise StoreError(f"Failed to read graph from {path}: {e}") from e

    def save_graph(self, graph: MemoryGraph) -> None:
        path = self._path(graph.agent_id)
        with self._locks.hold(path):
            try:
                atomic_write(path, graph.model_dump_json(indent=2))
            except OSError as e:
                raise StoreError(f"Failed to write graph to {path}: {e}") from e
        logger.debug(
            f"Saved graph for {graph.agent_id}: "
            f"{len(graph.concepts)} concepts, {len(graph.links)} links"
        )

    @contextmanager
    def write_lock(self, agent_id: str) -> Iterator[None]:
        with self._locks.hold(self._path(agent_id)):
            yield

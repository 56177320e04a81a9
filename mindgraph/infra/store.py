"""Store interfaces and the in-process reference adapters.

The graph engine never touches storage directly. Services talk to these
two protocols; adapters decide how records are kept and how writers to
the same agent are serialised.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol, runtime_checkable

from ..domain.exceptions import MemoryNotFoundError
from ..domain.models import MemoryGraph, MemoryRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class MemoryStore(Protocol):
    """Access to an agent's memory records."""

    def get_all_memories(self, agent_id: str) -> list[MemoryRecord]:
        """Active memories of an agent, oldest first."""
        ...

    def get_memory(self, memory_id: str) -> MemoryRecord | None: ...

    def add_memory(self, memory: MemoryRecord) -> MemoryRecord: ...

    def update_memory(
        self,
        memory_id: str,
        importance: int | None = None,
        keywords: list[str] | None = None,
    ) -> MemoryRecord: ...

    def soft_delete(self, memory_id: str) -> MemoryRecord: ...

    def hard_delete(self, memory_id: str) -> None: ...


@runtime_checkable
class GraphStore(Protocol):
    """Whole-graph persistence for an agent."""

    def load_graph(self, agent_id: str) -> MemoryGraph | None: ...

    def save_graph(self, graph: MemoryGraph) -> None:
        """Atomically replace the stored graph."""
        ...

    def write_lock(self, agent_id: str) -> AbstractContextManager[object]:
        """Serialise read-modify-write cycles for one agent."""
        ...


def apply_memory_update(
    memory: MemoryRecord,
    importance: int | None = None,
    keywords: list[str] | None = None,
    is_active: bool | None = None,
) -> MemoryRecord:
    """Copy of ``memory`` with the mutable fields replaced."""
    update: dict[str, object] = {}
    if importance is not None:
        update["importance"] = importance
    if keywords is not None:
        update["keywords"] = list(keywords)
    if is_active is not None:
        update["is_active"] = is_active
    # Round-trip through validation so bounds are enforced
    return MemoryRecord.model_validate({**memory.model_dump(), **update})


class AgentLocks:
    """One re-entrant lock per agent id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def get(self, agent_id: str) -> threading.RLock:
        with self._guard:
            if agent_id not in self._locks:
                self._locks[agent_id] = threading.RLock()
            return self._locks[agent_id]


class InMemoryMemoryStore:
    """Process-local memory store."""

    def __init__(self) -> None:
        self._memories: dict[str, MemoryRecord] = {}
        self._lock = threading.RLock()

    def get_all_memories(self, agent_id: str) -> list[MemoryRecord]:
        with self._lock:
            return [
                m
                for m in self._memories.values()
                if m.agent_id == agent_id and m.is_active
            ]

    def get_memory(self, memory_id: str) -> MemoryRecord | None:
        with self._lock:
            return self._memories.get(memory_id)

    def add_memory(self, memory: MemoryRecord) -> MemoryRecord:
        with self._lock:
            self._memories[memory.id] = memory
        logger.debug(f"Stored memory {memory.id} for agent {memory.agent_id}")
        return memory

    def update_memory(
        self,
        memory_id: str,
        importance: int | None = None,
        keywords: list[str] | None = None,
    ) -> MemoryRecord:
        with self._lock:
            memory = self._require(memory_id)
            updated = apply_memory_update(memory, importance, keywords)
            self._memories[memory_id] = updated
            return updated

    def soft_delete(self, memory_id: str) -> MemoryRecord:
        with self._lock:
            memory = self._require(memory_id)
            updated = apply_memory_update(memory, is_active=False)
            self._memories[memory_id] = updated
            return updated

    def hard_delete(self, memory_id: str) -> None:
        with self._lock:
            self._require(memory_id)
            del self._memories[memory_id]

    def _require(self, memory_id: str) -> MemoryRecord:
        memory = self._memories.get(memory_id)
        if memory is None:
            raise MemoryNotFoundError(memory_id)
        return memory


class InMemoryGraphStore:
    """Process-local graph store with a per-agent ``threading`` lock."""

    def __init__(self) -> None:
        self._graphs: dict[str, str] = {}
        self._locks = AgentLocks()

    def load_graph(self, agent_id: str) -> MemoryGraph | None:
        payload = self._graphs.get(agent_id)
        if payload is None:
            return None
        return MemoryGraph.model_validate_json(payload)

    def save_graph(self, graph: MemoryGraph) -> None:
        # Stored serialised so callers never share mutable state with the store
        with self._locks.get(graph.agent_id):
            self._graphs[graph.agent_id] = graph.model_dump_json()

    @contextmanager
    def write_lock(self, agent_id: str) -> Iterator[None]:
        with self._locks.get(agent_id):
            yield

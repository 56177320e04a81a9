"""Dependency injection container for MindGraph."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import Config, get_config
from .domain.services import MemoryGraphService, VisualizationSession
from .infra import (
    GraphStore,
    InMemoryGraphStore,
    InMemoryMemoryStore,
    JsonGraphStore,
    JsonMemoryStore,
    MemoryStore,
)


@dataclass
class Container:
    """Dependency injection container.

    Wires config -> stores -> services, creating each lazily.
    """

    config: Config
    _memory_store: MemoryStore | None = None
    _graph_store: GraphStore | None = None
    _graph_service: MemoryGraphService | None = None
    _sessions: dict[str, VisualizationSession] = field(default_factory=dict)

    @classmethod
    def create(cls, config: Config | None = None) -> Container:
        """Create a new container with the given config.

        Args:
            config: Optional config. Uses global config if not provided.

        Returns:
            A new Container instance.
        """
        return cls(config=config or get_config())

    @property
    def memory_store(self) -> MemoryStore:
        """Get the memory store (lazy initialization)."""
        if self._memory_store is None:
            if self.config.store_backend == "memory":
                self._memory_store = InMemoryMemoryStore()
            else:
                self._memory_store = JsonMemoryStore(self.config.memories_path)
        return self._memory_store

    @property
    def graph_store(self) -> GraphStore:
        """Get the graph store (lazy initialization)."""
        if self._graph_store is None:
            if self.config.store_backend == "memory":
                self._graph_store = InMemoryGraphStore()
            else:
                self._graph_store = JsonGraphStore(self.config.graphs_path)
        return self._graph_store

    @property
    def graph_service(self) -> MemoryGraphService:
        """Get the memory graph service (lazy initialization)."""
        if self._graph_service is None:
            self._graph_service = MemoryGraphService(
                memory_store=self.memory_store,
                graph_store=self.graph_store,
                config=self.config,
            )
        return self._graph_service

    def visualization_session(self, agent_id: str) -> VisualizationSession:
        """Get the agent's visualization session, loading its memories once."""
        session = self._sessions.get(agent_id)
        if session is None:
            session = VisualizationSession(heuristics=self.config.heuristics)
            session.initialize(agent_id, self.graph_service.get_memories(agent_id))
            self._sessions[agent_id] = session
        return session

    def close(self) -> None:
        """Dispose sessions and drop all components."""
        for session in self._sessions.values():
            session.dispose()
        self._sessions.clear()
        self._graph_service = None
        self._graph_store = None
        self._memory_store = None


# Module-level container instance
_container: Container | None = None


def get_container() -> Container:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = Container.create()
    return _container


def reset_container() -> None:
    """Reset the container (for testing)."""
    global _container
    if _container is not None:
        _container.close()
    _container = None

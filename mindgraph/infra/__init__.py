"""Infrastructure layer - Memory and graph stores."""

from .json_store import JsonGraphStore, JsonMemoryStore
from .store import GraphStore, InMemoryGraphStore, InMemoryMemoryStore, MemoryStore

__all__ = [
    "GraphStore",
    "InMemoryGraphStore",
    "InMemoryMemoryStore",
    "JsonGraphStore",
    "JsonMemoryStore",
    "MemoryStore",
]

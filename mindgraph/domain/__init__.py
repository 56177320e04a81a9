"""Domain layer - Core business logic and models."""

from .exceptions import (
    ConceptNotFoundError,
    MemoryNotFoundError,
    MindGraphError,
    SelfLinkError,
    StoreError,
    ValidationError,
)
from .models import (
    Concept,
    ConceptCategory,
    KnowledgeGraphData,
    LinkType,
    MemoryGraph,
    MemoryLink,
    MemoryRecord,
    MemoryType,
    ProcessingStage,
    ProcessMemoryResult,
    VisualizationFrame,
)

__all__ = [
    # Exceptions
    "MindGraphError",
    "ValidationError",
    "MemoryNotFoundError",
    "ConceptNotFoundError",
    "SelfLinkError",
    "StoreError",
    # Models
    "MemoryRecord",
    "MemoryType",
    "Concept",
    "ConceptCategory",
    "MemoryLink",
    "LinkType",
    "MemoryGraph",
    "KnowledgeGraphData",
    "ProcessingStage",
    "ProcessMemoryResult",
    "VisualizationFrame",
]

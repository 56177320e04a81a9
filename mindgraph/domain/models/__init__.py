"""Domain models for MindGraph.

This package provides all domain models, organized by concern:
- enums: MemoryType, ConceptCategory, LinkType, ProcessingStage, ...
- memory: MemoryRecord
- concept: Concept, ConceptCandidate, RelatedConcept
- graph: MemoryLink, MemoryGraph, GraphStats, KnowledgeGraphData
- visualization: VisualizationFrame and its parts
- results: ProcessMemoryResult, ActivationResult, ConceptInsights, ...
"""

from .concept import Concept, ConceptCandidate, RelatedConcept
from .enums import (
    ConceptCategory,
    ConnectionType,
    FlowType,
    LinkType,
    MemoryType,
    NodeType,
    ProcessingStage,
    RelationshipType,
    VisualizationEventType,
)
from .graph import (
    ConceptCluster,
    GraphStats,
    KnowledgeGraphData,
    KnowledgeGraphEdge,
    KnowledgeGraphNode,
    KnowledgeGraphNodeMetadata,
    MemoryGraph,
    MemoryLink,
)
from .memory import CONVERSATION_ID_KEY, MemoryRecord
from .results import (
    ActivationResult,
    ConceptInsights,
    EmotionalLandscape,
    LinkedMemory,
    ProcessMemoryResult,
)
from .visualization import (
    CORE_NODE_ID,
    AttentionFocus,
    LayoutNode,
    MemoryConnection,
    MemoryVisualization,
    ThoughtFlow,
    Vector3,
    VisualizationEvent,
    VisualizationFrame,
)

__all__ = [
    # Enums
    "MemoryType",
    "ConceptCategory",
    "RelationshipType",
    "LinkType",
    "ConnectionType",
    "ProcessingStage",
    "FlowType",
    "NodeType",
    "VisualizationEventType",
    # Core models
    "CONVERSATION_ID_KEY",
    "MemoryRecord",
    "Concept",
    "ConceptCandidate",
    "RelatedConcept",
    # Graph models
    "MemoryLink",
    "ConceptCluster",
    "GraphStats",
    "MemoryGraph",
    "KnowledgeGraphNode",
    "KnowledgeGraphNodeMetadata",
    "KnowledgeGraphEdge",
    "KnowledgeGraphData",
    # Visualization models
    "CORE_NODE_ID",
    "Vector3",
    "MemoryVisualization",
    "MemoryConnection",
    "ThoughtFlow",
    "AttentionFocus",
    "VisualizationFrame",
    "VisualizationEvent",
    "LayoutNode",
    # Result models
    "ProcessMemoryResult",
    "ActivationResult",
    "LinkedMemory",
    "EmotionalLandscape",
    "ConceptInsights",
]

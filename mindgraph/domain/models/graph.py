"""Memory graph models: links, statistics and the knowledge graph view."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .concept import Concept
from .enums import ConceptCategory, LinkType, MemoryType, NodeType


class MemoryLink(BaseModel):
    """A scored relationship between two memories.

    Links are created once per unordered pair and never updated in place;
    a rebuild recomputes them from scratch.
    """

    id: str = Field(..., description="Unique identifier")
    source_memory_id: str = Field(..., description="Memory that triggered the link")
    target_memory_id: str = Field(..., description="Existing memory it links to")
    link_type: LinkType = Field(default=LinkType.SEMANTIC)
    strength: float = Field(..., ge=0.0, le=1.0, description="Link strength (0-1)")
    shared_concepts: list[str] = Field(
        default_factory=list, description="Concept IDs justifying the link"
    )
    reason: str = Field(default="", description="Why the memories are linked")
    created_at: datetime = Field(..., description="When the link was created")

    @property
    def pair(self) -> frozenset[str]:
        """Unordered memory pair."""
        return frozenset((self.source_memory_id, self.target_memory_id))

    def other_end(self, memory_id: str) -> str | None:
        """Return the opposite endpoint, or None if not incident."""
        if self.source_memory_id == memory_id:
            return self.target_memory_id
        if self.target_memory_id == memory_id:
            return self.source_memory_id
        return None


class ConceptCluster(BaseModel):
    """A group of concepts sharing a category or strong mutual relations."""

    name: str
    concept_ids: list[str] = Field(default_factory=list)
    central_concept: str = Field(default="", description="Most important member")


class GraphStats(BaseModel):
    """Derived statistics; always recomputable from concepts and links."""

    total_concepts: int = 0
    total_links: int = 0
    average_link_strength: float = 0.0
    most_connected_memory: str = ""
    concept_clusters: list[ConceptCluster] = Field(default_factory=list)
    concepts_by_category: dict[str, int] = Field(default_factory=dict)


class MemoryGraph(BaseModel):
    """Per-agent aggregate of concepts and links."""

    agent_id: str
    concepts: list[Concept] = Field(default_factory=list)
    links: list[MemoryLink] = Field(default_factory=list)
    stats: GraphStats = Field(default_factory=GraphStats)
    last_updated: datetime | None = None


# =============================================================================
# Knowledge graph view (force-directed layout input)
# =============================================================================


class KnowledgeGraphNodeMetadata(BaseModel):
    """Extra attributes shown next to a node."""

    importance: float | None = None
    category: ConceptCategory | None = None
    memory_type: MemoryType | None = None
    connection_count: int = 0


class KnowledgeGraphNode(BaseModel):
    """A concept or memory node in the knowledge graph view."""

    id: str
    type: NodeType
    label: str
    size: float
    color: str
    metadata: KnowledgeGraphNodeMetadata = Field(
        default_factory=KnowledgeGraphNodeMetadata
    )


class KnowledgeGraphEdge(BaseModel):
    """An edge in the knowledge graph view.

    ``type`` is a link type value or ``concept_memory``.
    """

    id: str
    source: str
    target: str
    strength: float = Field(..., ge=0.0, le=1.0)
    type: str
    label: str | None = None


class KnowledgeGraphData(BaseModel):
    """Nodes and edges fed to the force-directed layout."""

    nodes: list[KnowledgeGraphNode] = Field(default_factory=list)
    edges: list[KnowledgeGraphEdge] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return self.model_dump(mode="json")

"""Memory Graph Service - Graph query API for MindGraph.

Coordinates the brain modules around the stores:
- ConceptExtractor / ConceptMerger: memory text -> concepts
- LinkScorer: concepts -> memory links
- GraphStatistics: concepts + links -> stats
- GraphRecall: graph-enhanced retrieval

Each mutation is a read-modify-write of the whole graph under the store's
per-agent write lock. The new graph is assembled in memory and saved once,
so a failure part-way leaves the stored graph untouched.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ...brain.hippocampus import GraphRecall, GraphStatistics, LinkScorer
from ...brain.neocortex import ConceptExtractor, ConceptMerger
from ...brain.parietal.polar import recency_key
from ...config import Config, get_config
from ..exceptions import StoreError, ValidationError
from ..models import (
    Concept,
    ConceptCategory,
    ConceptInsights,
    EmotionalLandscape,
    KnowledgeGraphData,
    KnowledgeGraphEdge,
    KnowledgeGraphNode,
    KnowledgeGraphNodeMetadata,
    LinkedMemory,
    MemoryGraph,
    MemoryLink,
    MemoryRecord,
    MemoryType,
    NodeType,
    ProcessMemoryResult,
)

if TYPE_CHECKING:
    from ...infra.store import GraphStore, MemoryStore

logger = logging.getLogger(__name__)

CATEGORY_COLORS: dict[ConceptCategory, str] = {
    ConceptCategory.ENTITY: "#4A90E2",  # Blue
    ConceptCategory.TOPIC: "#7ED321",  # Green
    ConceptCategory.EMOTION: "#F5A623",  # Orange
    ConceptCategory.EVENT: "#BD10E0",  # Purple
    ConceptCategory.ATTRIBUTE: "#50E3C2",  # Teal
    ConceptCategory.RELATION: "#F8E71C",  # Yellow
}

MEMORY_TYPE_COLORS: dict[MemoryType, str] = {
    MemoryType.CONVERSATION: "#4A90E2",
    MemoryType.FACT: "#7ED321",
    MemoryType.INTERACTION: "#F5A623",
    MemoryType.PERSONALITY_INSIGHT: "#BD10E0",
}

CONCEPT_MEMORY_EDGE = "concept_memory"
CONCEPT_MEMORY_STRENGTH = 0.5
EMPTY_GRAPH_SUGGESTION = "Start having conversations to build your knowledge graph!"


def _oldest_first(memory: MemoryRecord) -> tuple[int, float, str]:
    if memory.timestamp is None:
        return (0, 0.0, memory.id)
    return (1, memory.timestamp.timestamp(), memory.id)


class MemoryGraphService:
    """Builds, stores and queries an agent's memory graph."""

    def __init__(
        self,
        memory_store: MemoryStore,
        graph_store: GraphStore,
        config: Config | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            memory_store: Source of memory records.
            graph_store: Whole-graph persistence with per-agent locking.
            config: Configuration (defaults to the global config).
        """
        self._memories = memory_store
        self._graphs = graph_store
        self._config = config or get_config()

        h = self._config.heuristics
        self._extractor = ConceptExtractor(h.extraction)
        self._merger = ConceptMerger(h.merge)
        self._linker = LinkScorer(h.links)
        self._statistics = GraphStatistics(h.links.strong_relation_threshold)
        self._recall = GraphRecall()

    # =========================================================================
    # Graph Construction
    # =========================================================================

    def add_memory(self, memory: MemoryRecord) -> ProcessMemoryResult:
        """Store a memory and fold it into the agent's graph.

        Raises:
            ValidationError: If the memory has no agent or no text.
        """
        if not memory.agent_id.strip():
            raise ValidationError("Agent ID cannot be empty")
        if not (memory.content.strip() or memory.summary.strip()):
            raise ValidationError("Memory content cannot be empty")

        try:
            self._memories.add_memory(memory)
        except StoreError as e:
            logger.warning(f"Could not store memory {memory.id}: {e}")
            return ProcessMemoryResult()
        return self.process_new_memory(memory)

    def process_new_memory(self, memory: MemoryRecord) -> ProcessMemoryResult:
        """Extract concepts from a memory, link it, and save the graph.

        Returns:
            ProcessMemoryResult with the concepts and links this memory created.
            Empty if a store is unavailable.
        """
        agent_id = memory.agent_id
        try:
            with self._graphs.write_lock(agent_id):
                graph = self._graphs.load_graph(agent_id) or MemoryGraph(agent_id=agent_id)
                known = {m.id: m for m in self._memories.get_all_memories(agent_id)}
                known[memory.id] = memory

                graph, result = self._fold(graph, memory, known)
                self._graphs.save_graph(graph)
        except StoreError as e:
            logger.exception(f"Failed to process memory {memory.id}: {e}")
            return ProcessMemoryResult()

        logger.debug(
            f"Processed memory {memory.id}: {len(result.new_concepts)} new concepts, "
            f"{len(result.new_links)} new links"
        )
        return result

    def rebuild_graph(self, agent_id: str) -> MemoryGraph:
        """Discard the agent's graph and regenerate it from all active memories.

        Memories are replayed oldest first and the result is saved once.
        """
        try:
            with self._graphs.write_lock(agent_id):
                memories = sorted(self._memories.get_all_memories(agent_id), key=_oldest_first)
                known = {m.id: m for m in memories}
                graph = MemoryGraph(agent_id=agent_id)
                for memory in memories:
                    graph, _ = self._fold(graph, memory, known)
                if not memories:
                    graph = self._finalize(graph.agent_id, [], [])
                self._graphs.save_graph(graph)
        except StoreError as e:
            logger.exception(f"Failed to rebuild graph for {agent_id}: {e}")
            return MemoryGraph(agent_id=agent_id)

        logger.info(
            f"Rebuilt graph for {agent_id}: {len(memories)} memories, "
            f"{graph.stats.total_concepts} concepts, {graph.stats.total_links} links"
        )
        return graph

    def _fold(
        self,
        graph: MemoryGraph,
        memory: MemoryRecord,
        known: dict[str, MemoryRecord],
    ) -> tuple[MemoryGraph, ProcessMemoryResult]:
        """Pure step: return the graph with ``memory`` folded in."""
        concepts = {concept.id: concept for concept in graph.concepts}
        observed_at = memory.timestamp or datetime.now(timezone.utc)

        candidates = self._extractor.extract(memory)
        merged = self._merger.merge(
            graph.agent_id, concepts, candidates, memory.id, observed_at
        )
        self._merger.discover_relationships(concepts, [c.id for c in merged.touched])

        new_links = self._linker.link_new_memory(
            memory, concepts, graph.links, known, created_at=observed_at
        )

        updated = self._finalize(
            graph.agent_id, list(concepts.values()), [*graph.links, *new_links]
        )
        result = ProcessMemoryResult(
            new_concepts=[concepts[c.id] for c in merged.created],
            new_links=new_links,
        )
        return updated, result

    def _finalize(
        self, agent_id: str, concepts: list[Concept], links: list[MemoryLink]
    ) -> MemoryGraph:
        return MemoryGraph(
            agent_id=agent_id,
            concepts=concepts,
            links=links,
            stats=self._statistics.compute(concepts, links),
            last_updated=datetime.now(timezone.utc),
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_graph(self, agent_id: str) -> MemoryGraph:
        """The stored graph, or an empty one if none exists or the store fails."""
        try:
            graph = self._graphs.load_graph(agent_id)
        except StoreError as e:
            logger.warning(f"Could not load graph for {agent_id}: {e}")
            graph = None
        return graph or MemoryGraph(agent_id=agent_id)

    def get_knowledge_graph_data(
        self,
        agent_id: str,
        max_nodes: int | None = None,
        min_link_strength: float | None = None,
        include_memories: bool = True,
    ) -> KnowledgeGraphData:
        """Nodes and edges for the force-directed knowledge graph view.

        Args:
            agent_id: Agent to render.
            max_nodes: Node budget, split between concepts and memories.
            min_link_strength: Edges weaker than this are dropped.
            include_memories: Add memory nodes and their edges.
        """
        config = self._config
        max_nodes = config.max_graph_nodes if max_nodes is None else max_nodes
        if min_link_strength is None:
            min_link_strength = config.min_link_strength

        graph = self.get_graph(agent_id)
        nodes: list[KnowledgeGraphNode] = []
        edges: list[KnowledgeGraphEdge] = []

        concept_limit = int(max_nodes * config.concept_node_share)
        top = self._merger.top_concepts(graph.concepts, concept_limit)
        for concept in top:
            nodes.append(
                KnowledgeGraphNode(
                    id=concept.id,
                    type=NodeType.CONCEPT,
                    label=concept.name,
                    size=10 + concept.importance * 20,
                    color=CATEGORY_COLORS[concept.category],
                    metadata=KnowledgeGraphNodeMetadata(
                        importance=concept.importance, category=concept.category
                    ),
                )
            )
        concept_ids = {concept.id for concept in top}

        seen_pairs: set[frozenset[str]] = set()
        for concept in top:
            for related in concept.related_concepts:
                pair = frozenset((concept.id, related.concept_id))
                if (
                    related.strength < min_link_strength
                    or related.concept_id not in concept_ids
                    or pair in seen_pairs
                ):
                    continue
                seen_pairs.add(pair)
                edges.append(
                    KnowledgeGraphEdge(
                        id=f"edge_{concept.id}_{related.concept_id}",
                        source=concept.id,
                        target=related.concept_id,
                        strength=related.strength,
                        type="semantic",
                        label=related.relationship_type.value,
                    )
                )

        if include_memories:
            memories = self._safe_memories(agent_id)
            memory_limit = int(max_nodes * config.memory_node_share)
            ranked = sorted(memories, key=lambda m: (-m.importance, m.id))[:memory_limit]
            memory_ids = {m.id for m in ranked}

            for memory in ranked:
                nodes.append(
                    KnowledgeGraphNode(
                        id=memory.id,
                        type=NodeType.MEMORY,
                        label=memory.label[:30] + "...",
                        size=8 + memory.importance * 1.5,
                        color=MEMORY_TYPE_COLORS[memory.memory_type],
                        metadata=KnowledgeGraphNodeMetadata(
                            importance=memory.importance, memory_type=memory.memory_type
                        ),
                    )
                )

            for link in graph.links:
                if (
                    link.strength >= min_link_strength
                    and link.source_memory_id in memory_ids
                    and link.target_memory_id in memory_ids
                ):
                    edges.append(
                        KnowledgeGraphEdge(
                            id=link.id,
                            source=link.source_memory_id,
                            target=link.target_memory_id,
                            strength=link.strength,
                            type=link.link_type.value,
                            label=link.link_type.value,
                        )
                    )

            for concept in top:
                for memory_id in concept.memory_ids:
                    if memory_id in memory_ids:
                        edges.append(
                            KnowledgeGraphEdge(
                                id=f"edge_{concept.id}_{memory_id}",
                                source=concept.id,
                                target=memory_id,
                                strength=CONCEPT_MEMORY_STRENGTH,
                                type=CONCEPT_MEMORY_EDGE,
                            )
                        )

        counts: dict[str, int] = {}
        for edge in edges:
            counts[edge.source] = counts.get(edge.source, 0) + 1
            counts[edge.target] = counts.get(edge.target, 0) + 1
        for node in nodes:
            node.metadata.connection_count = counts.get(node.id, 0)

        return KnowledgeGraphData(nodes=nodes, edges=edges)

    def get_linked_memories(self, agent_id: str, memory_id: str) -> list[LinkedMemory]:
        """Memories linked to ``memory_id``, strongest link first."""
        graph = self.get_graph(agent_id)
        if not graph.links:
            return []
        by_id = {m.id: m for m in self._safe_memories(agent_id)}
        return self._recall.linked_memories(memory_id, graph.links, by_id)

    def get_enhanced_relevant_memories(
        self, agent_id: str, query: str, max_memories: int = 10
    ) -> list[MemoryRecord]:
        """Keyword-relevant memories expanded through graph links."""
        memories = self._safe_memories(agent_id)
        if not memories:
            return []
        graph = self.get_graph(agent_id)
        return self._recall.enhanced_relevant_memories(
            memories, graph.links, query, max_memories
        )

    def get_concept_insights(self, agent_id: str) -> ConceptInsights:
        """Summarise the agent's concept space and suggest how to grow it."""
        graph = self.get_graph(agent_id)
        by_category: dict[str, list[Concept]] = {c.value: [] for c in ConceptCategory}

        if not graph.concepts:
            return ConceptInsights(
                concepts_by_category=by_category,
                suggestions=[EMPTY_GRAPH_SUGGESTION],
            )

        concepts = graph.concepts
        for concept in concepts:
            by_category[concept.category.value].append(concept)

        landscape = EmotionalLandscape(
            positive=[c for c in concepts if c.emotional_valence > 0.2][:10],
            neutral=[c for c in concepts if -0.2 <= c.emotional_valence <= 0.2][:10],
            negative=[c for c in concepts if c.emotional_valence < -0.2][:10],
        )
        recently_active = sorted(
            concepts, key=lambda c: (c.last_occurrence, c.id), reverse=True
        )[:10]

        suggestions: list[str] = []
        if len(by_category[ConceptCategory.TOPIC.value]) < 5:
            suggestions.append("Explore more topics to diversify your knowledge graph")
        if len(landscape.positive) < len(landscape.negative):
            suggestions.append("Consider exploring more positive topics and experiences")
        if len(graph.links) < len(concepts) * 0.5:
            suggestions.append(
                "Continue conversations to build more connections between memories"
            )
        if len(by_category[ConceptCategory.RELATION.value]) < 3:
            suggestions.append("Build more relationships with other agents")

        return ConceptInsights(
            top_concepts=self._merger.top_concepts(concepts, 10),
            concepts_by_category=by_category,
            emotional_landscape=landscape,
            recently_active=recently_active,
            suggestions=suggestions,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def get_memories(self, agent_id: str) -> list[MemoryRecord]:
        """Active memories of an agent, newest first."""
        return sorted(self._safe_memories(agent_id), key=recency_key)

    def _safe_memories(self, agent_id: str) -> list[MemoryRecord]:
        try:
            return self._memories.get_all_memories(agent_id)
        except StoreError as e:
            logger.warning(f"Could not load memories for {agent_id}: {e}")
            return []


def new_memory_id() -> str:
    """Generate a fresh memory id."""
    return f"mem_{uuid.uuid4().hex}"

"""Integration tests for the memory graph service."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from mindgraph.domain.exceptions import StoreError, ValidationError
from mindgraph.domain.models import (
    ConceptCategory,
    LinkType,
    MemoryGraph,
    MemoryType,
    NodeType,
    ProcessMemoryResult,
)
from mindgraph.domain.services import MemoryGraphService, new_memory_id
from mindgraph.infra import (
    InMemoryGraphStore,
    InMemoryMemoryStore,
    JsonGraphStore,
    JsonMemoryStore,
)


@pytest.fixture
def service(container) -> MemoryGraphService:
    return container.graph_service


@pytest.fixture
def conversation(make_memory):
    """A short conversation thread plus an unrelated fact."""
    return [
        make_memory(
            "I was so happy at the meeting with my friend Alice.",
            memory_id="mem_1",
            keywords=["meeting", "friend"],
            conversation_id="t1",
            minutes=0,
        ),
        make_memory(
            "The meeting made me happy, Alice agreed.",
            memory_id="mem_2",
            keywords=["meeting"],
            conversation_id="t1",
            minutes=2,
        ),
        make_memory(
            "Water boils at one hundred degrees.",
            memory_id="mem_3",
            memory_type=MemoryType.FACT,
            keywords=["science"],
            minutes=600,
        ),
    ]


class TestProcessNewMemory:
    """Tests for folding memories into the graph."""

    def test_first_memory_creates_concepts(self, service, conversation):
        """Test the first memory creates concepts but no links."""
        result = service.add_memory(conversation[0])

        names = {c.name for c in result.new_concepts}
        assert {"happy", "meeting", "friend", "alice"} <= names
        assert result.new_links == []

        graph = service.get_graph("agent-1")
        assert graph.stats.total_concepts == len(graph.concepts)
        assert graph.last_updated is not None

    def test_thread_memories_link_by_precedence(self, service, conversation):
        """Test a same-thread memory sharing concepts gets a typed link."""
        service.add_memory(conversation[0])
        result = service.add_memory(conversation[1])

        assert len(result.new_links) == 1
        link = result.new_links[0]
        assert link.source_memory_id == "mem_2"
        assert link.target_memory_id == "mem_1"
        # Shared concepts include the emotion "happy"
        assert link.link_type == LinkType.EMOTIONAL
        assert len(link.shared_concepts) >= 2
        assert 0.0 <= link.strength <= 1.0

    def test_reoccurring_concept_is_updated(self, service, conversation):
        """Test a concept seen twice is not created again."""
        service.add_memory(conversation[0])
        result = service.add_memory(conversation[1])

        assert "meeting" not in {c.name for c in result.new_concepts}
        graph = service.get_graph("agent-1")
        meeting = next(
            c
            for c in graph.concepts
            if c.name == "meeting" and c.category == ConceptCategory.EVENT
        )
        assert meeting.occurrence_count == 2
        assert meeting.memory_ids == ["mem_1", "mem_2"]

    def test_relationships_are_symmetric(self, service, conversation):
        """Test every stored relationship has a reverse entry."""
        for memory in conversation:
            service.add_memory(memory)

        graph = service.get_graph("agent-1")
        by_id = {c.id: c for c in graph.concepts}
        for concept in graph.concepts:
            for related in concept.related_concepts:
                reverse = by_id[related.concept_id].relation_to(concept.id)
                assert reverse is not None
                assert reverse.strength == pytest.approx(related.strength)

    def test_crowded_memory_relations_stay_capped(self, service, make_memory):
        """Test a memory with many concepts keeps every related list within ten."""
        topics = [
            "science", "music", "art", "history", "philosophy", "travel", "food",
            "sports", "culture", "health", "meeting", "friend", "garden",
        ]
        service.add_memory(
            make_memory(
                "You and your friend talked about " + ", ".join(topics),
                memory_id="m_many",
                keywords=topics,
            )
        )

        graph = service.get_graph("agent-1")
        by_id = {c.id: c for c in graph.concepts}
        assert len(graph.concepts) > 11
        for concept in graph.concepts:
            assert len(concept.related_concepts) <= 10
            for related in concept.related_concepts:
                assert by_id[related.concept_id].relation_to(concept.id) is not None

    def test_validation(self, service, make_memory):
        """Test empty agent ids and empty text are rejected."""
        with pytest.raises(ValidationError):
            service.add_memory(make_memory("text", agent_id=" "))
        with pytest.raises(ValidationError):
            service.add_memory(make_memory("   "))

    def test_new_memory_ids_are_unique(self):
        """Test generated ids are prefixed and unique."""
        ids = {new_memory_id() for _ in range(100)}

        assert len(ids) == 100
        assert all(mid.startswith("mem_") for mid in ids)


class TestRebuildGraph:
    """Tests for graph rebuilds."""

    def test_rebuild_twice_is_identical(self, service, conversation):
        """Test rebuilding an unchanged memory set is reproducible."""
        for memory in conversation:
            service.add_memory(memory)

        first = service.rebuild_graph("agent-1")
        second = service.rebuild_graph("agent-1")

        assert first.stats.total_concepts == second.stats.total_concepts
        assert first.stats.total_links == second.stats.total_links
        assert [c.id for c in first.concepts] == [c.id for c in second.concepts]
        assert [link.id for link in first.links] == [link.id for link in second.links]

    def test_rebuild_matches_incremental(self, service, conversation):
        """Test a rebuild reproduces the incrementally built graph."""
        for memory in conversation:
            service.add_memory(memory)
        incremental = service.get_graph("agent-1")

        rebuilt = service.rebuild_graph("agent-1")

        assert {c.id for c in rebuilt.concepts} == {c.id for c in incremental.concepts}
        assert {link.id for link in rebuilt.links} == {link.id for link in incremental.links}

    def test_no_duplicate_pairs(self, service, conversation):
        """Test no unordered memory pair is linked twice."""
        for memory in conversation:
            service.add_memory(memory)

        graph = service.rebuild_graph("agent-1")

        pairs = [link.pair for link in graph.links]
        assert len(pairs) == len(set(pairs))
        assert all(0.0 <= link.strength <= 1.0 for link in graph.links)

    def test_rebuild_skips_deleted_memories(self, service, container, conversation):
        """Test soft-deleted memories vanish from a rebuilt graph."""
        for memory in conversation:
            service.add_memory(memory)
        container.memory_store.soft_delete("mem_2")

        graph = service.rebuild_graph("agent-1")

        assert graph.links == []
        assert all("mem_2" not in c.memory_ids for c in graph.concepts)

    def test_rebuild_empty_agent(self, service):
        """Test rebuilding an agent without memories saves an empty graph."""
        graph = service.rebuild_graph("nobody")

        assert graph.concepts == []
        assert graph.stats.total_concepts == 0


class TestStoreFailures:
    """Tests for store-unavailable handling."""

    def test_process_with_failing_graph_store(self, test_config, make_memory):
        """Test a failing graph store yields an empty result."""
        graph_store = MagicMock()
        graph_store.load_graph.side_effect = StoreError("disk gone")
        service = MemoryGraphService(InMemoryMemoryStore(), graph_store, test_config)

        result = service.add_memory(make_memory("I love music"))

        assert result.new_concepts == []
        assert result.new_links == []
        graph_store.save_graph.assert_not_called()

    def test_failed_save_keeps_previous_graph(self, test_config, make_memory):
        """Test a failed save leaves the stored graph untouched."""
        graph_store = InMemoryGraphStore()
        service = MemoryGraphService(InMemoryMemoryStore(), graph_store, test_config)
        service.add_memory(make_memory("I love music", memory_id="m1"))
        before = graph_store.load_graph("agent-1")

        graph_store.save_graph = MagicMock(side_effect=StoreError("read-only"))
        result = service.add_memory(make_memory("Music and travel", memory_id="m2"))

        assert result.new_concepts == []
        assert graph_store.load_graph("agent-1") == before

    def test_queries_with_failing_memory_store(self, test_config):
        """Test queries degrade to empty results."""
        memory_store = MagicMock()
        memory_store.get_all_memories.side_effect = StoreError("offline")
        graph_store = MagicMock()
        graph_store.load_graph.side_effect = StoreError("offline")
        service = MemoryGraphService(memory_store, graph_store, test_config)

        assert service.get_graph("a") == MemoryGraph(agent_id="a")
        assert service.get_enhanced_relevant_memories("a", "music") == []
        assert service.get_linked_memories("a", "m1") == []
        assert service.get_memories("a") == []
        assert service.rebuild_graph("a").concepts == []

    def test_unusable_data_dir_degrades(self, test_config, temp_data_dir, make_memory):
        """Test JSON stores under a regular file yield empty results."""
        blocker = temp_data_dir / "blocker"
        blocker.write_text("not a directory")
        graph_only = MemoryGraphService(
            InMemoryMemoryStore(), JsonGraphStore(blocker / "graphs"), test_config
        )
        both = MemoryGraphService(
            JsonMemoryStore(blocker / "memories"),
            JsonGraphStore(blocker / "graphs"),
            test_config,
        )
        memory = make_memory("I love music and travel", memory_id="m1")

        assert graph_only.process_new_memory(memory) == ProcessMemoryResult()
        assert graph_only.rebuild_graph("agent-1") == MemoryGraph(agent_id="agent-1")
        assert both.add_memory(memory) == ProcessMemoryResult()
        assert both.get_graph("agent-1") == MemoryGraph(agent_id="agent-1")
        assert both.get_memories("agent-1") == []


class TestQueries:
    """Tests for the graph query API."""

    def test_knowledge_graph_caps(self, service, conversation):
        """Test node budgets split 60/40 between concepts and memories."""
        for memory in conversation:
            service.add_memory(memory)

        data = service.get_knowledge_graph_data("agent-1", max_nodes=5)

        concepts = [n for n in data.nodes if n.type == NodeType.CONCEPT]
        memories = [n for n in data.nodes if n.type == NodeType.MEMORY]
        assert len(concepts) <= 3
        assert len(memories) <= 2

    def test_knowledge_graph_edges_reference_nodes(self, service, conversation):
        """Test every edge joins two emitted nodes and respects the floor."""
        for memory in conversation:
            service.add_memory(memory)

        data = service.get_knowledge_graph_data("agent-1", min_link_strength=0.3)

        ids = {n.id for n in data.nodes}
        assert all(e.source in ids and e.target in ids for e in data.edges)
        assert all(
            e.strength >= 0.3 for e in data.edges if e.type != "concept_memory"
        )
        assert any(e.type == "concept_memory" for e in data.edges)

    def test_knowledge_graph_without_memories(self, service, conversation):
        """Test memory nodes can be left out."""
        service.add_memory(conversation[0])

        data = service.get_knowledge_graph_data("agent-1", include_memories=False)

        assert data.nodes
        assert all(n.type == NodeType.CONCEPT for n in data.nodes)

    def test_connection_counts(self, service, conversation):
        """Test node metadata counts incident edges."""
        for memory in conversation[:2]:
            service.add_memory(memory)

        data = service.get_knowledge_graph_data("agent-1")

        for node in data.nodes:
            expected = sum(1 for e in data.edges if node.id in (e.source, e.target))
            assert node.metadata.connection_count == expected

    def test_enhanced_relevant_memories(self, service, conversation):
        """Test linked memories join the direct matches."""
        for memory in conversation:
            service.add_memory(memory)

        result = service.get_enhanced_relevant_memories("agent-1", "friend", 2)

        assert [m.id for m in result][:1] == ["mem_1"]
        assert len(result) == 2

    def test_concept_insights(self, service, conversation):
        """Test insights summarise concepts and suggest growth."""
        for memory in conversation:
            service.add_memory(memory)

        insights = service.get_concept_insights("agent-1")

        assert insights.top_concepts
        assert set(insights.concepts_by_category) == {c.value for c in ConceptCategory}
        assert any(c.name == "happy" for c in insights.emotional_landscape.positive)
        assert insights.suggestions

    def test_insights_for_empty_graph(self, service):
        """Test an empty graph suggests starting conversations."""
        insights = service.get_concept_insights("nobody")

        assert insights.top_concepts == []
        assert insights.suggestions == [
            "Start having conversations to build your knowledge graph!"
        ]

    def test_memories_newest_first(self, service, conversation):
        """Test get_memories orders by recency."""
        for memory in conversation:
            service.add_memory(memory)

        assert [m.id for m in service.get_memories("agent-1")] == ["mem_3", "mem_2", "mem_1"]

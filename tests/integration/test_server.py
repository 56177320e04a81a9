"""Integration tests for MCP server tools."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from mindgraph.server import (
    add_memory,
    conversation_event,
    delete_memory,
    get_graph_stats,
    get_insights,
    get_knowledge_graph,
    get_linked_memories,
    get_relevant_memories,
    layout,
    ping,
    rebuild_graph,
    update_memory,
    visualization_frame,
)


class TestServerTools:
    """Integration tests for MCP server tools."""

    @pytest.fixture(autouse=True)
    def setup(self, container):
        """Route every tool to the test container."""
        with patch("mindgraph.server.get_container", return_value=container):
            yield

    def _store_pair(self):
        first = add_memory(
            agent_id="agent-1",
            content="We talked about travel and music at the meeting.",
            keywords=["travel", "music"],
            conversation_id="t1",
        )
        second = add_memory(
            agent_id="agent-1",
            content="Another conversation about travel and music.",
            keywords=["travel", "music"],
            conversation_id="t1",
        )
        return first, second

    def test_ping(self):
        """Test ping tool."""
        result = ping()

        assert result["status"] == "ok"
        assert "operational" in result["message"].lower()

    def test_add_memory_returns_concepts_and_links(self):
        """Test adding memories reports new concepts and the new link."""
        first, second = self._store_pair()

        assert first["success"] is True
        assert first["memory_id"].startswith("mem_")
        assert {"travel", "music"} <= {c["name"] for c in first["new_concepts"]}
        assert first["new_links"] == []

        assert len(second["new_links"]) == 1
        link = second["new_links"][0]
        assert link["target_id"] == first["memory_id"]
        assert 0.0 <= link["strength"] <= 1.0

    def test_add_memory_rejects_empty_content(self):
        """Test blank content is a validation failure."""
        result = add_memory(agent_id="agent-1", content="   ")

        assert result["success"] is False
        assert "empty" in result["error"].lower()

    def test_add_memory_unwraps_text_content(self):
        """Test MCP TextContent arrays are unwrapped before storing."""
        wrapped = json.dumps([{"type": "text", "text": "I love music"}])

        result = add_memory(agent_id="agent-1", content=wrapped)
        recalled = get_relevant_memories(agent_id="agent-1", query="music")

        assert result["success"] is True
        assert recalled["memories"][0]["content"] == "I love music"

    def test_add_memory_clamps_importance(self):
        """Test out-of-range importance is clamped."""
        result = add_memory(agent_id="agent-1", content="Loud music", importance=50)
        memories = get_relevant_memories(agent_id="agent-1", query="music")["memories"]

        assert result["success"] is True
        assert memories[0]["importance"] == 10

    def test_update_and_delete(self):
        """Test updating and deleting a memory."""
        first, _ = self._store_pair()
        memory_id = first["memory_id"]

        updated = update_memory(memory_id=memory_id, importance=9, keywords=["trip"])
        assert updated["memory"]["importance"] == 9
        assert updated["memory"]["keywords"] == ["trip"]

        assert delete_memory(memory_id=memory_id)["success"] is True
        recalled = get_relevant_memories(agent_id="agent-1", query="trip")
        assert memory_id not in {m["id"] for m in recalled["memories"]}

    def test_missing_memory(self):
        """Test tools report unknown memory ids."""
        assert update_memory(memory_id="nope", importance=3)["success"] is False
        assert delete_memory(memory_id="nope", hard=True)["success"] is False

    def test_linked_memories(self):
        """Test the linked memories tool."""
        first, second = self._store_pair()

        result = get_linked_memories(agent_id="agent-1", memory_id=first["memory_id"])

        assert [item["memory"]["id"] for item in result["linked_memories"]] == [
            second["memory_id"]
        ]

    def test_graph_tools(self):
        """Test stats, knowledge graph, rebuild and insights tools."""
        self._store_pair()

        stats = get_graph_stats(agent_id="agent-1")
        graph = get_knowledge_graph(agent_id="agent-1", max_nodes=10)
        rebuilt = rebuild_graph(agent_id="agent-1")
        insights = get_insights(agent_id="agent-1")

        assert stats["stats"]["total_links"] == 1
        assert stats["last_updated"] is not None
        assert len(graph["nodes"]) <= 10
        assert rebuilt["stats"]["total_links"] == 1
        assert insights["top_concepts"]

    def test_layout_tool(self):
        """Test the layout tool returns one position per node."""
        self._store_pair()

        result = layout(agent_id="agent-1", seed=42)
        graph = get_knowledge_graph(agent_id="agent-1")

        assert len(result["nodes"]) == len(graph["nodes"])

    def test_conversation_events_drive_frames(self):
        """Test reported events show up in visualization frames."""
        first, _ = self._store_pair()

        assert conversation_event(agent_id="agent-1", event="message_received", message="hi")[
            "stage"
        ] == "receiving"
        retrieved = conversation_event(
            agent_id="agent-1", event="memories_retrieved", memory_ids=[first["memory_id"]]
        )
        frame = visualization_frame(agent_id="agent-1")

        assert retrieved["stage"] == "processing"
        assert frame["processing_stage"] == "processing"
        assert frame["activated_memory_ids"][0] == first["memory_id"]
        assert frame["attention_focus"] is not None

    def test_unknown_event(self):
        """Test unknown conversation events are rejected."""
        result = conversation_event(agent_id="agent-1", event="daydream")

        assert result["success"] is False

    def test_frame_invalid_stage(self):
        """Test an unknown stage is rejected."""
        assert visualization_frame(agent_id="agent-1", stage="dreaming")["success"] is False

    def test_new_memories_are_highlighted(self):
        """Test memories added through the server appear as recently created."""
        visualization_frame(agent_id="agent-1")
        first, _ = self._store_pair()

        frame = visualization_frame(agent_id="agent-1")

        assert first["memory_id"] in frame["recently_created_ids"]


    def test_deleted_memory_leaves_frame(self):
        """Test deleting a memory removes it from later frames."""
        first, second = self._store_pair()

        delete_memory(memory_id=first["memory_id"])
        frame = visualization_frame(agent_id="agent-1")

        assert [m["id"] for m in frame["memories"]] == [second["memory_id"]]

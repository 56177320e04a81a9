"""MCP Server for MindGraph."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from mcp.server.fastmcp import FastMCP

from .brain.parietal import ForceDirectedLayout
from .container import Container, get_container
from .domain.exceptions import MemoryNotFoundError, StoreError, ValidationError
from .domain.models import (
    CONVERSATION_ID_KEY,
    MemoryRecord,
    MemoryType,
    ProcessingStage,
)
from .domain.services import new_memory_id

logger = logging.getLogger(__name__)


# =============================================================================
# Helper Functions
# =============================================================================


def _normalize_content(content: str) -> str:
    """Normalize content that may be wrapped in MCP TextContent format.

    Some MCP clients send content as JSON array: [{"text": "...", "type": "text"}]
    This function extracts the actual text content.
    """
    if not content:
        return content

    stripped = content.strip()
    if not (stripped.startswith("[") and stripped.endswith("]")):
        return content

    try:
        data = json.loads(stripped)
        if isinstance(data, list) and len(data) > 0:
            first = data[0]
            if isinstance(first, dict) and "text" in first:
                return _normalize_content(first["text"])
        return content
    except (json.JSONDecodeError, TypeError, KeyError):
        return content


def _format_memory(memory: MemoryRecord) -> dict[str, Any]:
    """Format a memory for API response."""
    return {
        "id": memory.id,
        "memory_type": memory.memory_type.value,
        "content": memory.content,
        "summary": memory.summary,
        "keywords": memory.keywords,
        "importance": memory.importance,
        "context": memory.context,
        "timestamp": memory.timestamp.isoformat() if memory.timestamp else None,
        "conversation_id": memory.conversation_id,
    }


def _refresh_session(container: Container, agent_id: str) -> None:
    """Push the agent's current memories into its visualization session."""
    container.visualization_session(agent_id).update_memories(
        container.graph_service.get_memories(agent_id)
    )


# =============================================================================
# Server Setup
# =============================================================================

SERVER_INSTRUCTIONS = """\
MindGraph keeps a concept graph of each agent's memories.

- Call `mg_add_memory` for every new memory; concepts and links are derived
  automatically and returned.
- Use `mg_get_relevant_memories` to recall memories for a message; results
  are expanded through the memory graph.
- Report conversation progress with `mg_conversation_event` so the mind view
  can follow along, and fetch frames with `mg_visualization_frame`.
- If a graph looks inconsistent, `mg_rebuild_graph` regenerates it from the
  stored memories.
"""

mcp = FastMCP(
    "mindgraph",
    instructions=SERVER_INSTRUCTIONS,
)


# =============================================================================
# Health Check Tools
# =============================================================================


@mcp.tool(name="mg_ping")
def ping() -> dict[str, Any]:
    """Health check - verify MindGraph is running."""
    return {"status": "ok", "message": "MindGraph is operational"}


# =============================================================================
# Memory Tools
# =============================================================================


@mcp.tool(name="mg_add_memory")
def add_memory(
    agent_id: str,
    content: str,
    keywords: list[str] | None = None,
    memory_type: str = "conversation",
    summary: str = "",
    importance: int = 5,
    context: str = "",
    conversation_id: str | None = None,
) -> dict[str, Any]:
    """Store a memory and fold it into the agent's memory graph.

    Args:
        agent_id: The agent the memory belongs to.
        content: The memory text.
        keywords: Keywords for relevance matching.
        memory_type: conversation, fact, interaction or personality_insight.
        summary: Short summary used as a label.
        importance: 1 (trivial) to 10 (critical).
        context: Where the memory was formed.
        conversation_id: Thread id; memories in one thread link more readily.

    Returns:
        The new memory id plus the concepts and links it created.
    """
    try:
        mem_type = MemoryType(memory_type)
    except ValueError:
        mem_type = MemoryType.CONVERSATION

    container = get_container()
    try:
        memory = MemoryRecord(
            id=new_memory_id(),
            agent_id=agent_id,
            memory_type=mem_type,
            content=_normalize_content(content),
            summary=summary,
            keywords=keywords or [],
            importance=max(1, min(10, importance)),
            context=context,
            timestamp=datetime.now().astimezone(),
            metadata={CONVERSATION_ID_KEY: conversation_id} if conversation_id else {},
        )
        result = container.graph_service.add_memory(memory)
    except ValidationError as e:
        return {"success": False, "error": str(e)}

    _refresh_session(container, agent_id)

    return {
        "success": True,
        "memory_id": memory.id,
        "new_concepts": [
            {"id": c.id, "name": c.name, "category": c.category.value}
            for c in result.new_concepts
        ],
        "new_links": [
            {
                "target_id": link.target_memory_id,
                "link_type": link.link_type.value,
                "strength": round(link.strength, 3),
                "reason": link.reason,
            }
            for link in result.new_links
        ],
    }


@mcp.tool(name="mg_update_memory")
def update_memory(
    memory_id: str,
    importance: int | None = None,
    keywords: list[str] | None = None,
) -> dict[str, Any]:
    """Update a memory's importance or keywords.

    Content is immutable; rebuild the graph afterwards to re-derive links.
    """
    container = get_container()
    try:
        memory = container.memory_store.update_memory(
            memory_id, importance=importance, keywords=keywords
        )
    except MemoryNotFoundError:
        return {"success": False, "error": f"Memory '{memory_id}' not found"}
    except StoreError as e:
        logger.warning(f"Store unavailable for memory {memory_id}: {e}")
        return {"success": False, "error": str(e)}

    _refresh_session(container, memory.agent_id)
    return {"success": True, "memory": _format_memory(memory)}


@mcp.tool(name="mg_delete_memory")
def delete_memory(memory_id: str, hard: bool = False) -> dict[str, Any]:
    """Deactivate a memory (or remove it permanently with ``hard=True``)."""
    container = get_container()
    try:
        if hard:
            memory = container.memory_store.get_memory(memory_id)
            container.memory_store.hard_delete(memory_id)
        else:
            memory = container.memory_store.soft_delete(memory_id)
    except MemoryNotFoundError:
        return {"success": False, "error": f"Memory '{memory_id}' not found"}
    except StoreError as e:
        logger.warning(f"Store unavailable for memory {memory_id}: {e}")
        return {"success": False, "error": str(e)}

    if memory is not None:
        _refresh_session(container, memory.agent_id)
    return {"success": True, "message": f"Memory '{memory_id}' deleted"}


@mcp.tool(name="mg_get_relevant_memories")
def get_relevant_memories(
    agent_id: str, query: str, max_memories: int = 10
) -> dict[str, Any]:
    """Recall memories for a query, expanded through memory links."""
    container = get_container()
    memories = container.graph_service.get_enhanced_relevant_memories(
        agent_id, query, max_memories
    )
    return {"memories": [_format_memory(m) for m in memories], "count": len(memories)}


@mcp.tool(name="mg_get_linked_memories")
def get_linked_memories(agent_id: str, memory_id: str) -> dict[str, Any]:
    """Memories joined to ``memory_id`` by a stored link, strongest first."""
    container = get_container()
    linked = container.graph_service.get_linked_memories(agent_id, memory_id)
    return {
        "memory_id": memory_id,
        "linked_memories": [
            {
                "memory": _format_memory(item.memory),
                "link_type": item.link.link_type.value,
                "strength": round(item.link.strength, 3),
                "reason": item.link.reason,
            }
            for item in linked
        ],
    }


# =============================================================================
# Graph Tools
# =============================================================================


@mcp.tool(name="mg_get_graph_stats")
def get_graph_stats(agent_id: str) -> dict[str, Any]:
    """Statistics of the agent's memory graph."""
    graph = get_container().graph_service.get_graph(agent_id)
    return {
        "agent_id": agent_id,
        "stats": graph.stats.model_dump(mode="json"),
        "last_updated": graph.last_updated.isoformat() if graph.last_updated else None,
    }


@mcp.tool(name="mg_get_knowledge_graph")
def get_knowledge_graph(
    agent_id: str,
    max_nodes: int = 100,
    min_link_strength: float = 0.2,
    include_memories: bool = True,
) -> dict[str, Any]:
    """Nodes and edges of the knowledge graph view."""
    data = get_container().graph_service.get_knowledge_graph_data(
        agent_id,
        max_nodes=max_nodes,
        min_link_strength=min_link_strength,
        include_memories=include_memories,
    )
    return data.to_dict()


@mcp.tool(name="mg_rebuild_graph")
def rebuild_graph(agent_id: str) -> dict[str, Any]:
    """Discard and regenerate the agent's graph from its active memories."""
    graph = get_container().graph_service.rebuild_graph(agent_id)
    return {"success": True, "stats": graph.stats.model_dump(mode="json")}


@mcp.tool(name="mg_get_insights")
def get_insights(agent_id: str) -> dict[str, Any]:
    """Top concepts, emotional landscape and growth suggestions."""
    return get_container().graph_service.get_concept_insights(agent_id).to_dict()


@mcp.tool(name="mg_layout")
def layout(
    agent_id: str,
    category: str = "all",
    show_memories: bool = True,
    seed: int | None = None,
) -> dict[str, Any]:
    """Force-directed 2-D positions for the knowledge graph.

    Args:
        agent_id: Agent to lay out.
        category: "all", "memory" or a concept category.
        show_memories: Keep memory nodes next to a category selection.
        seed: Seed for reproducible starting positions.
    """
    container = get_container()
    data = container.graph_service.get_knowledge_graph_data(agent_id)
    engine = ForceDirectedLayout(container.config.heuristics.force, seed=seed)
    nodes = engine.layout(data, category=category, show_memories=show_memories)
    return {"nodes": [n.model_dump() for n in nodes]}


# =============================================================================
# Visualization Tools
# =============================================================================


@mcp.tool(name="mg_conversation_event")
def conversation_event(
    agent_id: str,
    event: str,
    message: str | None = None,
    memory_ids: list[str] | None = None,
) -> dict[str, Any]:
    """Report conversation progress to the agent's mind view.

    Args:
        agent_id: The agent.
        event: message_received, memories_retrieved or response_generated.
        message: The incoming message (message_received).
        memory_ids: Retrieved memory ids, best first (memories_retrieved).
    """
    session = get_container().visualization_session(agent_id)

    if event == "message_received":
        session.on_message_received(_normalize_content(message or ""))
    elif event == "memories_retrieved":
        session.on_memories_retrieved(memory_ids or [])
    elif event == "response_generated":
        session.on_response_generated()
    else:
        return {"success": False, "error": f"Unknown event: {event}"}

    return {"success": True, "stage": session.get_processing_stage().value}


@mcp.tool(name="mg_visualization_frame")
def visualization_frame(
    agent_id: str,
    stage: str | None = None,
    query: str | None = None,
) -> dict[str, Any]:
    """Current frame of the agent's 3-D mind view."""
    processing_stage = None
    if stage is not None:
        try:
            processing_stage = ProcessingStage(stage)
        except ValueError:
            return {"success": False, "error": f"Invalid stage: {stage}"}

    session = get_container().visualization_session(agent_id)
    return session.generate_frame(stage=processing_stage, query=query).to_dict()

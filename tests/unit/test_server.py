"""Unit tests for server helpers."""

from __future__ import annotations

import json

from mindgraph.server import _format_memory, _normalize_content, mcp


class TestNormalizeContent:
    """Tests for unwrapping MCP TextContent payloads."""

    def test_plain_text(self):
        """Plain text passes through."""
        assert _normalize_content("Went hiking with Sam") == "Went hiking with Sam"

    def test_empty(self):
        assert _normalize_content("") == ""

    def test_wrapped_text(self):
        """A single TextContent item is unwrapped."""
        assert _normalize_content('[{"type": "text", "text": "Beach day"}]') == "Beach day"

    def test_nested_wrapping(self):
        """Doubly wrapped content is unwrapped twice."""
        inner = '[{"type": "text", "text": "Beach day"}]'
        outer = json.dumps([{"type": "text", "text": inner}])

        assert _normalize_content(outer) == "Beach day"

    def test_bracketed_prose_untouched(self):
        """Text that merely looks like a list is kept."""
        content = "[draft] notes about travel]"

        assert _normalize_content(content) == content

    def test_array_without_text_key(self):
        content = '[{"type": "image", "data": "abc"}]'

        assert _normalize_content(content) == content


class TestFormatMemory:
    """Tests for memory serialization."""

    def test_fields(self, make_memory):
        """Test enum and timestamp fields are rendered as strings."""
        memory = make_memory(
            "Lunch with Alice", memory_id="m1", keywords=["lunch"], conversation_id="t9"
        )

        data = _format_memory(memory)

        assert data["id"] == "m1"
        assert data["memory_type"] == "conversation"
        assert data["keywords"] == ["lunch"]
        assert data["conversation_id"] == "t9"
        assert data["timestamp"].startswith("2024-06-01T12:00:00")


class TestServerSetup:
    """Tests for the FastMCP instance."""

    def test_server_name(self):
        assert mcp.name == "mindgraph"

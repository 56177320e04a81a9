"""Memory record model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .enums import MemoryType

CONVERSATION_ID_KEY = "conversation_id"


class MemoryRecord(BaseModel):
    """A stored unit of an agent's experience.

    Content, summary and timestamp never change after creation. Only
    importance, keywords and the active flag may be updated; deletion is
    a soft delete through ``is_active``.
    """

    id: str = Field(..., description="Unique identifier")
    agent_id: str = Field(..., description="Owning agent")
    memory_type: MemoryType = Field(
        default=MemoryType.CONVERSATION, description="Type of memory"
    )
    content: str = Field(default="", description="The actual memory content")
    summary: str = Field(default="", description="Short summary for quick recall")
    keywords: list[str] = Field(
        default_factory=list, description="Keywords for relevance matching"
    )
    importance: int = Field(
        default=5, ge=1, le=10, description="How important the memory is (1-10)"
    )
    context: str = Field(default="", description="Where this memory was formed")
    timestamp: datetime | None = Field(None, description="Creation timestamp")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Extra data such as conversation_id"
    )
    is_active: bool = Field(default=True, description="False once soft-deleted")

    @field_validator("timestamp")
    @classmethod
    def _ensure_timezone(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _drop_malformed_keywords(cls, value: Any) -> list[str]:
        if not value:
            return []
        return [k for k in value if isinstance(k, str) and k.strip()]

    @property
    def conversation_id(self) -> str | None:
        """Conversation thread id, if the memory carries one."""
        value = self.metadata.get(CONVERSATION_ID_KEY) or self.metadata.get(
            "conversationId"
        )
        return str(value) if value else None

    @property
    def label(self) -> str:
        """Short display label."""
        return self.summary or self.content[:50]

"""Result models for service operations."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .concept import Concept
from .graph import MemoryLink
from .memory import MemoryRecord


class ProcessMemoryResult(BaseModel):
    """Result of folding a new memory into the agent's graph."""

    new_concepts: list[Concept] = Field(default_factory=list)
    new_links: list[MemoryLink] = Field(default_factory=list)


class ActivationResult(BaseModel):
    """Activated memory ids and their strengths for one query."""

    activated_ids: list[str] = Field(
        default_factory=list, description="Activated ids in activation order"
    )
    strengths: dict[str, float] = Field(default_factory=dict)

    def is_activated(self, memory_id: str) -> bool:
        """Check whether a memory is activated."""
        return memory_id in self.strengths


class LinkedMemory(BaseModel):
    """A memory reached through a stored link."""

    memory: MemoryRecord
    link: MemoryLink


class EmotionalLandscape(BaseModel):
    """Concepts bucketed by emotional valence."""

    positive: list[Concept] = Field(default_factory=list)
    neutral: list[Concept] = Field(default_factory=list)
    negative: list[Concept] = Field(default_factory=list)


class ConceptInsights(BaseModel):
    """Summary of an agent's concept space with growth suggestions."""

    top_concepts: list[Concept] = Field(default_factory=list)
    concepts_by_category: dict[str, list[Concept]] = Field(default_factory=dict)
    emotional_landscape: EmotionalLandscape = Field(
        default_factory=EmotionalLandscape
    )
    recently_active: list[Concept] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return self.model_dump(mode="json")

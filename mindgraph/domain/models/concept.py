"""Concept models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import ConceptCategory, RelationshipType


class RelatedConcept(BaseModel):
    """A weighted relationship from one concept to another."""

    concept_id: str = Field(..., description="Target concept ID")
    relationship_type: RelationshipType = Field(
        default=RelationshipType.RELATED_TO, description="Kind of relationship"
    )
    strength: float = Field(..., ge=0.0, le=1.0, description="Strength (0-1)")


class ConceptCandidate(BaseModel):
    """A concept proposed by the extractor, before it has an identity."""

    name: str = Field(..., description="Lower-cased concept name")
    category: ConceptCategory = Field(..., description="Concept category")
    description: str = Field(default="", description="Where it was seen")
    importance: float = Field(default=0.3, ge=0.0, le=1.0)
    emotional_valence: float = Field(default=0.0, ge=-1.0, le=1.0)


class Concept(BaseModel):
    """A recurring semantic unit distilled from one or more memories.

    Concepts are never deleted. ``memory_ids`` only ever grows.
    """

    id: str = Field(..., description="Unique identifier")
    name: str = Field(..., description="Lower-cased concept name")
    category: ConceptCategory = Field(..., description="Concept category")
    description: str = Field(default="", description="Human-readable description")
    related_concepts: list[RelatedConcept] = Field(default_factory=list)
    occurrence_count: int = Field(default=1, ge=1)
    last_occurrence: datetime = Field(..., description="When it was last observed")
    memory_ids: list[str] = Field(
        default_factory=list, description="Memories containing this concept"
    )
    importance: float = Field(default=0.3, ge=0.0, le=1.0)
    emotional_valence: float = Field(default=0.0, ge=-1.0, le=1.0)
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    def relation_to(self, concept_id: str) -> RelatedConcept | None:
        """Return the relationship entry pointing at ``concept_id``."""
        for related in self.related_concepts:
            if related.concept_id == concept_id:
                return related
        return None

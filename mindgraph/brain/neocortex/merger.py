"""Concept Merging - Reconciling candidates with the known concept set.

Implements:
- Deduplication by case-insensitive name + category
- Occurrence, importance and valence updates on reoccurrence
- Deterministic concept identities, so rebuilds are reproducible
- Symmetric relationship discovery between concepts
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from mindgraph.config import MergeHeuristics
from mindgraph.domain.exceptions import ConceptNotFoundError
from mindgraph.domain.models import (
    Concept,
    ConceptCandidate,
    ConceptCategory,
    RelatedConcept,
    RelationshipType,
)

CONCEPT_NAMESPACE = uuid.UUID("5b0f6c1e-2a4d-4c8e-9f3a-7d1e0b6a4c21")


def concept_id_for(agent_id: str, category: ConceptCategory, name: str) -> str:
    """Deterministic concept id for (agent, category, name)."""
    key = f"{agent_id}:{category.value}:{name.lower()}"
    return f"concept_{uuid.uuid5(CONCEPT_NAMESPACE, key).hex}"


@dataclass
class MergeResult:
    """Disjoint lists of concepts touched by one merge."""

    updated: list[Concept] = field(default_factory=list)
    created: list[Concept] = field(default_factory=list)

    @property
    def touched(self) -> list[Concept]:
        """Updated and created concepts together."""
        return [*self.updated, *self.created]


class ConceptMerger:
    """Merges extracted candidates into an agent's concept set."""

    def __init__(self, heuristics: MergeHeuristics | None = None) -> None:
        self.heuristics = heuristics or MergeHeuristics()

    # =========================================================================
    # Merge
    # =========================================================================

    def merge(
        self,
        agent_id: str,
        concepts: dict[str, Concept],
        candidates: list[ConceptCandidate],
        memory_id: str,
        observed_at: datetime,
    ) -> MergeResult:
        """Fold candidates into ``concepts`` (id-keyed, mutated in place).

        Args:
            agent_id: Owning agent, used for concept identities.
            concepts: The agent's concepts keyed by id.
            candidates: Output of the extractor for one memory.
            memory_id: The memory the candidates came from.
            observed_at: Timestamp of that memory.

        Returns:
            MergeResult with disjoint updated/created lists.
        """
        by_key = {(c.name.lower(), c.category): c.id for c in concepts.values()}
        result = MergeResult()
        seen: set[str] = set()

        for candidate in candidates:
            key = (candidate.name.lower(), candidate.category)
            concept_id = by_key.get(key)

            if concept_id is not None:
                if concept_id in seen:
                    continue
                concepts[concept_id] = self._reinforce(
                    concepts[concept_id], candidate, memory_id, observed_at
                )
                result.updated.append(concepts[concept_id])
            else:
                concept_id = concept_id_for(agent_id, candidate.category, candidate.name)
                if concept_id in seen:
                    continue
                concept = Concept(
                    id=concept_id,
                    name=candidate.name.lower(),
                    category=candidate.category,
                    description=candidate.description,
                    occurrence_count=1,
                    last_occurrence=observed_at,
                    memory_ids=[memory_id],
                    importance=candidate.importance,
                    emotional_valence=candidate.emotional_valence,
                    created_at=observed_at,
                    updated_at=observed_at,
                )
                concepts[concept_id] = concept
                by_key[key] = concept_id
                result.created.append(concept)
            seen.add(concept_id)

        return result

    def _reinforce(
        self,
        existing: Concept,
        candidate: ConceptCandidate,
        memory_id: str,
        observed_at: datetime,
    ) -> Concept:
        h = self.heuristics
        memory_ids = list(existing.memory_ids)
        if memory_id not in memory_ids:
            memory_ids.append(memory_id)

        importance = min(
            1.0,
            existing.importance * (1 - h.importance_decay)
            + candidate.importance * h.importance_boost,
        )
        w = h.valence_recency_weight
        valence = (1 - w) * existing.emotional_valence + w * candidate.emotional_valence

        last_occurrence = max(existing.last_occurrence, observed_at)
        return existing.model_copy(
            update={
                "occurrence_count": existing.occurrence_count + 1,
                "last_occurrence": last_occurrence,
                "memory_ids": memory_ids,
                "importance": importance,
                "emotional_valence": max(-1.0, min(1.0, valence)),
                "updated_at": observed_at,
            }
        )

    # =========================================================================
    # Relationship discovery
    # =========================================================================

    def discover_relationships(
        self, concepts: dict[str, Concept], touched_ids: list[str]
    ) -> None:
        """Refresh symmetric relationships of every touched concept.

        Pairs involving a touched concept are re-scored; pairs between
        untouched concepts keep their stored strength. Pairs are then
        accepted strongest first (ties by concept ids) while both ends have
        room under ``max_related_concepts``, and every list is rebuilt from
        the accepted pairs. The result is symmetric, capped, and does not
        depend on the order of ``touched_ids``.

        Raises:
            ConceptNotFoundError: If a touched id is not in ``concepts``.
        """
        for concept_id in touched_ids:
            if concept_id not in concepts:
                raise ConceptNotFoundError(concept_id)

        touched = set(touched_ids)
        pairs: dict[tuple[str, str], float] = {}
        for concept in concepts.values():
            if concept.id in touched:
                continue
            for related in concept.related_concepts:
                if related.concept_id in touched or related.concept_id not in concepts:
                    continue
                pairs[_pair_key(concept.id, related.concept_id)] = related.strength

        everything = list(concepts.values())
        for concept_id in sorted(touched):
            scores = self.score_related(everything, concepts[concept_id])
            for other_id, strength in scores.items():
                pairs[_pair_key(concept_id, other_id)] = strength

        partners: dict[str, list[tuple[str, float]]] = {cid: [] for cid in concepts}
        for (first, second), strength in self._select_pairs(pairs):
            partners[first].append((second, strength))
            partners[second].append((first, strength))

        for concept_id, concept in list(concepts.items()):
            entries = sorted(partners[concept_id], key=lambda e: (-e[1], e[0]))
            related = [
                RelatedConcept(
                    concept_id=other_id,
                    relationship_type=self.relation_kind(concept, concepts[other_id]),
                    strength=strength,
                )
                for other_id, strength in entries
            ]
            if related != concept.related_concepts:
                concepts[concept_id] = concept.model_copy(
                    update={"related_concepts": related}
                )

    def _select_pairs(
        self, pairs: dict[tuple[str, str], float]
    ) -> list[tuple[tuple[str, str], float]]:
        """Greedy strongest-first selection with a per-concept cap."""
        cap = self.heuristics.max_related_concepts
        degree: dict[str, int] = {}
        selected: list[tuple[tuple[str, str], float]] = []
        for key in sorted(pairs, key=lambda k: (-pairs[k], k)):
            first, second = key
            if degree.get(first, 0) >= cap or degree.get(second, 0) >= cap:
                continue
            degree[first] = degree.get(first, 0) + 1
            degree[second] = degree.get(second, 0) + 1
            selected.append((key, pairs[key]))
        return selected

    def score_related(
        self, concepts: list[Concept], target: Concept
    ) -> dict[str, float]:
        """Relationship strength from ``target`` to every related concept."""
        h = self.heuristics
        strengths: dict[str, float] = {}
        target_memories = set(target.memory_ids)

        for concept in concepts:
            if concept.id == target.id:
                continue

            shared = len(target_memories.intersection(concept.memory_ids))
            if shared > 0:
                strengths[concept.id] = min(1.0, shared * h.co_occurrence_step)
            elif concept.category == target.category:
                strengths[concept.id] = h.same_category_strength

            valence_gap = abs(concept.emotional_valence - target.emotional_valence)
            if valence_gap < h.valence_similarity_window:
                strengths[concept.id] = min(
                    1.0, strengths.get(concept.id, 0.0) + h.valence_similarity_strength
                )

        return {cid: round(strength, 6) for cid, strength in strengths.items()}

    def find_related(
        self, concepts: list[Concept], target: Concept
    ) -> list[RelatedConcept]:
        """Find concepts related to ``target`` by co-occurrence and similarity.

        Sorted by strength, ties broken by concept id, truncated to the
        configured maximum.
        """
        strengths = self.score_related(concepts, target)
        by_id = {concept.id: concept for concept in concepts}
        ordered = sorted(strengths, key=lambda cid: (-strengths[cid], cid))
        return [
            RelatedConcept(
                concept_id=cid,
                relationship_type=self.relation_kind(target, by_id[cid]),
                strength=strengths[cid],
            )
            for cid in ordered[: self.heuristics.max_related_concepts]
        ]

    def determine_relationship(
        self, first: Concept, second: Concept
    ) -> RelationshipType:
        """Decide the relationship kind from ``first`` towards ``second``."""
        threshold = self.heuristics.opposite_valence_threshold
        if (first.emotional_valence > threshold and second.emotional_valence < -threshold) or (
            first.emotional_valence < -threshold and second.emotional_valence > threshold
        ):
            return RelationshipType.OPPOSITE_OF

        if (
            first.category == ConceptCategory.TOPIC
            and second.category == ConceptCategory.ENTITY
        ):
            return RelationshipType.PART_OF

        if first.category == second.category:
            return RelationshipType.SIMILAR_TO

        if (
            first.category == ConceptCategory.EVENT
            and second.category == ConceptCategory.EMOTION
        ):
            return RelationshipType.CAUSES

        return RelationshipType.RELATED_TO

    def relation_kind(self, concept: Concept, partner: Concept) -> RelationshipType:
        """Kind of the entry ``concept`` holds for ``partner``."""
        if set(concept.memory_ids).intersection(partner.memory_ids):
            return self.determine_relationship(concept, partner)
        if concept.category == partner.category:
            return RelationshipType.SIMILAR_TO
        return RelationshipType.RELATED_TO

    # =========================================================================
    # Ranking
    # =========================================================================

    @staticmethod
    def top_concepts(concepts: list[Concept], limit: int = 20) -> list[Concept]:
        """Rank concepts by importance and occurrence frequency."""

        def score(concept: Concept) -> float:
            return concept.importance * 0.6 + min(concept.occurrence_count / 10, 1) * 0.4

        return sorted(concepts, key=lambda c: (-score(c), c.id))[:limit]


def _pair_key(first_id: str, second_id: str) -> tuple[str, str]:
    return (first_id, second_id) if first_id < second_id else (second_id, first_id)

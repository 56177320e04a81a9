"""Memory Linking - Scoring associations between memories.

Three independent heuristics contribute to the strength of a pair:
- Overlap: shared concepts (stored links) or shared keywords (frame
  connections), saturating with the shared count
- Thread: a flat bonus when both memories belong to the same conversation
- Temporal: a bonus decaying linearly to zero over one hour

Strength is ``min(1, max(overlap, thread) + temporal)``, deliberately not
the plain sum ``overlap + thread + temporal``. Overlap and thread are two
kinds of relational evidence for the same pair, so only the stronger one
counts and the temporal term is added on top. A same-thread pair sharing
two keywords three minutes apart scores max(0.5, 0.5) + 0.19 = 0.69; the
plain sum would saturate at 1.0 for nearly every pair in a conversation.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from mindgraph.config import LinkHeuristics
from mindgraph.domain.exceptions import SelfLinkError
from mindgraph.domain.models import (
    CORE_NODE_ID,
    Concept,
    ConceptCategory,
    ConnectionType,
    LinkType,
    MemoryConnection,
    MemoryLink,
    MemoryRecord,
)

LINK_NAMESPACE = uuid.UUID("0c7b9f52-8e1a-4d3b-a6f0-2e9d5c4b1a73")

# Highest precedence first
LINK_TYPE_PRECEDENCE: list[tuple[ConceptCategory, LinkType]] = [
    (ConceptCategory.EMOTION, LinkType.EMOTIONAL),
    (ConceptCategory.EVENT, LinkType.CAUSAL),
    (ConceptCategory.TOPIC, LinkType.SEMANTIC),
    (ConceptCategory.ENTITY, LinkType.ASSOCIATIVE),
]


def link_id_for(first_id: str, second_id: str) -> str:
    """Deterministic id of the link between an unordered memory pair."""
    a, b = sorted((first_id, second_id))
    return f"link_{uuid.uuid5(LINK_NAMESPACE, f'{a}|{b}').hex}"


class LinkScorer:
    """Computes weighted edges between memories."""

    def __init__(self, heuristics: LinkHeuristics | None = None) -> None:
        self.heuristics = heuristics or LinkHeuristics()

    # =========================================================================
    # Scoring terms
    # =========================================================================

    def concept_overlap_score(self, shared_count: int) -> float:
        """Overlap term for shared concepts."""
        if shared_count <= 0:
            return 0.0
        return min(1.0, shared_count * self.heuristics.concept_overlap_step)

    def keyword_overlap_score(self, shared_count: int) -> float:
        """Overlap term for shared keywords (needs a minimum shared count)."""
        h = self.heuristics
        if shared_count < h.keyword_min_shared:
            return 0.0
        return min(1.0, h.keyword_base + shared_count * h.keyword_step)

    def thread_score(self, first: MemoryRecord, second: MemoryRecord) -> float:
        """Flat bonus when both memories share a conversation thread."""
        if self.same_thread(first, second):
            return self.heuristics.thread_bonus
        return 0.0

    def temporal_score(self, first: MemoryRecord, second: MemoryRecord) -> float:
        """Linear proximity bonus for memories created within the window."""
        if first.timestamp is None or second.timestamp is None:
            return 0.0
        h = self.heuristics
        delta = abs((first.timestamp - second.timestamp).total_seconds())
        if delta >= h.temporal_window_seconds:
            return 0.0
        return h.temporal_weight * (1 - delta / h.temporal_window_seconds)

    def combine(self, overlap: float, thread: float, temporal: float) -> float:
        """Strength in [0, 1]: the stronger of overlap and thread, plus temporal."""
        return max(0.0, min(1.0, max(overlap, thread) + temporal))

    @staticmethod
    def same_thread(first: MemoryRecord, second: MemoryRecord) -> bool:
        """Check whether two memories carry the same conversation id."""
        thread = first.conversation_id
        return thread is not None and thread == second.conversation_id

    @staticmethod
    def shared_keywords(first: MemoryRecord, second: MemoryRecord) -> list[str]:
        """Case-insensitive keyword intersection, in ``first``'s order."""
        others = {k.lower() for k in second.keywords}
        seen: set[str] = set()
        shared: list[str] = []
        for keyword in first.keywords:
            lower = keyword.lower()
            if lower in others and lower not in seen:
                seen.add(lower)
                shared.append(lower)
        return shared

    # =========================================================================
    # Stored memory links
    # =========================================================================

    def link_new_memory(
        self,
        memory: MemoryRecord,
        concepts: Mapping[str, Concept],
        existing_links: Iterable[MemoryLink],
        memories: Mapping[str, MemoryRecord],
        created_at: datetime | None = None,
    ) -> list[MemoryLink]:
        """Create links from a new memory to memories sharing its concepts.

        Args:
            memory: The newly processed memory.
            concepts: The agent's concepts keyed by id, already merged.
            existing_links: Links already in the graph.
            memories: Known memories keyed by id, for thread/time terms.
            created_at: Link timestamp (defaults to the memory's timestamp).

        Returns:
            New links, at most one per unordered pair.
        """
        linked_pairs = {link.pair for link in existing_links}
        shared_by_memory: dict[str, list[str]] = {}

        for concept_id in sorted(concepts):
            concept = concepts[concept_id]
            if memory.id not in concept.memory_ids:
                continue
            for other_id in concept.memory_ids:
                if other_id != memory.id:
                    shared_by_memory.setdefault(other_id, []).append(concept_id)

        timestamp = created_at or memory.timestamp or datetime.now(timezone.utc)
        new_links: list[MemoryLink] = []

        for other_id in sorted(shared_by_memory):
            pair = frozenset((memory.id, other_id))
            if pair in linked_pairs:
                continue

            shared = shared_by_memory[other_id]
            link = self.score_link(
                memory, other_id, shared, concepts, memories.get(other_id), timestamp
            )
            if link is not None:
                new_links.append(link)
                linked_pairs.add(pair)

        return new_links

    def score_link(
        self,
        memory: MemoryRecord,
        other_id: str,
        shared_concepts: list[str],
        concepts: Mapping[str, Concept],
        other: MemoryRecord | None,
        created_at: datetime,
    ) -> MemoryLink | None:
        """Score one pair; return a link if it clears the threshold.

        Raises:
            SelfLinkError: If ``other_id`` is the memory itself.
        """
        if other_id == memory.id:
            raise SelfLinkError(memory.id)

        overlap = self.concept_overlap_score(len(shared_concepts))
        thread = self.thread_score(memory, other) if other is not None else 0.0
        temporal = self.temporal_score(memory, other) if other is not None else 0.0
        strength = self.combine(overlap, thread, temporal)

        if strength < self.heuristics.link_threshold:
            return None

        return MemoryLink(
            id=link_id_for(memory.id, other_id),
            source_memory_id=memory.id,
            target_memory_id=other_id,
            link_type=self.determine_link_type(shared_concepts, concepts),
            strength=round(strength, 6),
            shared_concepts=list(shared_concepts),
            reason=self._reason(len(shared_concepts), thread > 0, memory, other),
            created_at=created_at,
        )

    def determine_link_type(
        self, shared_concepts: list[str], concepts: Mapping[str, Concept]
    ) -> LinkType:
        """Pick the link type from the highest-precedence shared category."""
        categories = {
            concepts[cid].category for cid in shared_concepts if cid in concepts
        }
        for category, link_type in LINK_TYPE_PRECEDENCE:
            if category in categories:
                return link_type
        return LinkType.SEMANTIC

    def _reason(
        self,
        shared_count: int,
        same_thread: bool,
        memory: MemoryRecord,
        other: MemoryRecord | None,
    ) -> str:
        reasons = [f"Linked through {shared_count} shared concept(s)"]
        if same_thread:
            reasons.append("same conversation thread")
        if other is not None and self.temporal_score(memory, other) > 0:
            minutes = abs((memory.timestamp - other.timestamp).total_seconds()) / 60
            reasons.append(f"formed {minutes:.0f} minute(s) apart")
        return "; ".join(reasons)

    # =========================================================================
    # Frame connections
    # =========================================================================

    def score_connection(
        self, first: MemoryRecord, second: MemoryRecord
    ) -> MemoryConnection | None:
        """Score a transient connection between two visible memories."""
        overlap = self.keyword_overlap_score(len(self.shared_keywords(first, second)))
        thread = self.thread_score(first, second)
        temporal = self.temporal_score(first, second)

        connection_type = ConnectionType.KEYWORD
        if thread > 0:
            connection_type = ConnectionType.CONVERSATION
        elif temporal > 0:
            connection_type = ConnectionType.TEMPORAL

        strength = self.combine(overlap, thread, temporal)
        if strength < self.heuristics.link_threshold:
            return None

        return MemoryConnection(
            source_id=first.id,
            target_id=second.id,
            strength=round(strength, 6),
            type=connection_type,
        )

    def connections(
        self, memories: list[MemoryRecord], activated_ids: Iterable[str]
    ) -> list[MemoryConnection]:
        """All frame connections, strongest first, capped for legibility.

        Activated memories are always connected to the synthetic core node.
        """
        activated = set(activated_ids)
        found: list[MemoryConnection] = []
        seen_pairs: set[frozenset[str]] = set()

        for i, first in enumerate(memories):
            if first.id in activated:
                found.append(
                    MemoryConnection(
                        source_id=first.id,
                        target_id=CORE_NODE_ID,
                        strength=self.heuristics.core_strength,
                        type=ConnectionType.CORE,
                    )
                )

            for second in memories[i + 1 :]:
                pair = frozenset((first.id, second.id))
                if first.id == second.id or pair in seen_pairs:
                    continue
                seen_pairs.add(pair)

                connection = self.score_connection(first, second)
                if connection is not None:
                    found.append(connection)

        found.sort(key=lambda c: (-c.strength, c.source_id, c.target_id))
        return found[: self.heuristics.max_connections]

"""Graph-enhanced recall.

Retrieval runs in two steps:
1. Keyword relevance picks the best direct matches for a query
2. Activation spreads from those matches through stored memory links,
   attenuated by link strength
"""

from __future__ import annotations

from mindgraph.domain.models import LinkedMemory, MemoryLink, MemoryRecord


class GraphRecall:
    """Relevance scoring with link propagation."""

    def __init__(
        self,
        keyword_weight: float = 2.0,
        text_match_weight: float = 1.0,
        importance_weight: float = 0.5,
        rank_decay: float = 0.1,
        propagation_factor: float = 0.7,
    ) -> None:
        self.keyword_weight = keyword_weight
        self.text_match_weight = text_match_weight
        self.importance_weight = importance_weight
        self.rank_decay = rank_decay
        self.propagation_factor = propagation_factor

    def relevance_score(self, memory: MemoryRecord, query: str) -> float:
        """Score one memory against a free-text query."""
        query_lower = query.lower()
        score = 0.0

        for keyword in memory.keywords:
            if keyword.lower() in query_lower:
                score += self.keyword_weight

        if query_lower in memory.content.lower() or query_lower in memory.context.lower():
            score += self.text_match_weight

        score += memory.importance * self.importance_weight
        return score

    def relevant_memories(
        self, memories: list[MemoryRecord], query: str, limit: int = 10
    ) -> list[MemoryRecord]:
        """Top memories by keyword relevance (ties keep input order)."""
        scored = [(self.relevance_score(m, query), i, m) for i, m in enumerate(memories)]
        scored = [item for item in scored if item[0] > 0]
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [memory for _, _, memory in scored[:limit]]

    @staticmethod
    def linked_memories(
        memory_id: str,
        links: list[MemoryLink],
        memories_by_id: dict[str, MemoryRecord],
    ) -> list[LinkedMemory]:
        """Memories joined to ``memory_id`` by a link, strongest first."""
        found: dict[str, MemoryLink] = {}
        for link in links:
            other_id = link.other_end(memory_id)
            if other_id is not None and other_id != memory_id:
                found[other_id] = link

        results = [
            LinkedMemory(memory=memories_by_id[other_id], link=link)
            for other_id, link in found.items()
            if other_id in memories_by_id
        ]
        results.sort(key=lambda item: (-item.link.strength, item.memory.id))
        return results

    def enhanced_relevant_memories(
        self,
        memories: list[MemoryRecord],
        links: list[MemoryLink],
        query: str,
        limit: int = 10,
    ) -> list[MemoryRecord]:
        """Relevant memories expanded with their linked neighbours.

        Direct matches score ``1 - rank * decay``; a neighbour reached
        first through a link scores ``parent * strength * factor``.
        """
        direct = self.relevant_memories(memories, query, limit)
        if not direct or not links:
            return direct

        by_id = {memory.id: memory for memory in memories}
        scores: dict[str, float] = {
            memory.id: 1 - index * self.rank_decay for index, memory in enumerate(direct)
        }

        for memory in direct:
            for linked in self.linked_memories(memory.id, links, by_id):
                if linked.memory.id not in scores:
                    scores[linked.memory.id] = (
                        scores[memory.id] * linked.link.strength * self.propagation_factor
                    )

        ranked = [m for m in memories if m.id in scores]
        ranked.sort(key=lambda m: -scores[m.id])
        return ranked[:limit]

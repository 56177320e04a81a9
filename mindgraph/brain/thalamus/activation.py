"""Activation Scoring - Which memories light up for a query.

Three sources feed the activation map, in order:
1. Forced ids from an actual retrieval, with strength decaying by rank
2. Keyword/content matches against the current query
3. A mild recency glow for the newest memories not already active
"""

from __future__ import annotations

from collections.abc import Iterable

from mindgraph.brain.parietal.polar import recency_key
from mindgraph.config import ActivationHeuristics
from mindgraph.domain.models import ActivationResult, MemoryRecord


class ActivationScorer:
    """Computes activation strengths for a set of memories."""

    def __init__(self, heuristics: ActivationHeuristics | None = None) -> None:
        self.heuristics = heuristics or ActivationHeuristics()

    def forced_strength(self, rank: int) -> float:
        """Strength of the forced id at ``rank`` (strictly decreasing)."""
        return self.heuristics.forced_decay**rank

    def query_score(self, memory: MemoryRecord, query: str) -> float:
        """Match score of one memory against a non-empty query."""
        h = self.heuristics
        query_lower = query.lower()
        query_words = [w for w in query_lower.split() if len(w) >= h.min_query_word_length]
        score = 0.0

        for keyword in memory.keywords:
            keyword_lower = keyword.lower()
            if keyword_lower in query_lower:
                score += h.keyword_in_query
            for word in query_words:
                if word in keyword_lower:
                    score += h.query_word_in_keyword

        if query_lower in memory.content.lower():
            score += h.content_match

        return score

    def score(
        self,
        memories: list[MemoryRecord],
        query: str | None = None,
        forced_ids: Iterable[str] | None = None,
    ) -> ActivationResult:
        """Activate memories for a query and/or forced retrieval results.

        An empty or missing query skips keyword matching only.
        """
        h = self.heuristics
        result = ActivationResult()

        for memory_id in forced_ids or []:
            if memory_id in result.strengths:
                continue
            result.strengths[memory_id] = self.forced_strength(len(result.activated_ids))
            result.activated_ids.append(memory_id)

        if query and query.strip():
            for memory in memories:
                match = self.query_score(memory, query)
                if match <= h.activation_threshold:
                    continue
                existing = result.strengths.get(memory.id)
                if existing is None:
                    result.activated_ids.append(memory.id)
                result.strengths[memory.id] = min(1.0, (existing or 0.0) + match)

        newest = sorted(memories, key=recency_key)[: h.recent_count]
        for rank, memory in enumerate(newest):
            if memory.id in result.strengths:
                continue
            bonus = h.recency_bonus - rank * h.recency_step
            if bonus > h.recency_floor:
                result.strengths[memory.id] = round(bonus, 6)
                result.activated_ids.append(memory.id)

        return result

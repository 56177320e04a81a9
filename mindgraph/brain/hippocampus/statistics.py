"""Graph Statistics - Pure aggregation over concepts and links.

Everything here is recomputed from scratch on each call; nothing is
carried over from a previous GraphStats.
"""

from __future__ import annotations

from collections import Counter

import networkx as nx

from mindgraph.domain.models import (
    Concept,
    ConceptCategory,
    ConceptCluster,
    GraphStats,
    MemoryLink,
)


class GraphStatistics:
    """Derives GraphStats from an agent's concepts and links."""

    def __init__(self, strong_relation_threshold: float = 0.6) -> None:
        self.strong_relation_threshold = strong_relation_threshold

    def compute(self, concepts: list[Concept], links: list[MemoryLink]) -> GraphStats:
        """Compute every statistic for the given snapshot."""
        average = sum(link.strength for link in links) / len(links) if links else 0.0

        return GraphStats(
            total_concepts=len(concepts),
            total_links=len(links),
            average_link_strength=round(average, 6),
            most_connected_memory=self.most_connected_memory(links),
            concept_clusters=[
                *self.category_clusters(concepts),
                *self.relation_clusters(concepts),
            ],
            concepts_by_category=self.concepts_by_category(concepts),
        )

    @staticmethod
    def most_connected_memory(links: list[MemoryLink]) -> str:
        """Memory id with the most incident links; ties go to the smaller id."""
        degree: Counter[str] = Counter()
        for link in links:
            degree[link.source_memory_id] += 1
            degree[link.target_memory_id] += 1
        if not degree:
            return ""
        return min(degree, key=lambda memory_id: (-degree[memory_id], memory_id))

    @staticmethod
    def concepts_by_category(concepts: list[Concept]) -> dict[str, int]:
        counts = Counter(concept.category.value for concept in concepts)
        return {category.value: counts.get(category.value, 0) for category in ConceptCategory}

    @staticmethod
    def category_clusters(concepts: list[Concept]) -> list[ConceptCluster]:
        """One cluster per non-empty category, in category declaration order."""
        clusters: list[ConceptCluster] = []
        for category in ConceptCategory:
            members = sorted(
                (c for c in concepts if c.category == category), key=lambda c: c.id
            )
            if not members:
                continue
            central = min(members, key=lambda c: (-c.importance, c.id))
            clusters.append(
                ConceptCluster(
                    name=f"{category.value.capitalize()} concepts",
                    concept_ids=[c.id for c in members],
                    central_concept=central.id,
                )
            )
        return clusters

    def relation_clusters(self, concepts: list[Concept]) -> list[ConceptCluster]:
        """Connected components of concepts joined by strong relations."""
        by_id = {concept.id: concept for concept in concepts}
        graph = nx.Graph()
        for concept in concepts:
            for related in concept.related_concepts:
                if (
                    related.strength >= self.strong_relation_threshold
                    and related.concept_id in by_id
                    and related.concept_id != concept.id
                ):
                    graph.add_edge(concept.id, related.concept_id)

        components = [sorted(c) for c in nx.connected_components(graph) if len(c) >= 2]
        components.sort(key=lambda ids: (-len(ids), ids[0]))

        clusters: list[ConceptCluster] = []
        for index, ids in enumerate(components, start=1):
            central = min(
                (by_id[cid] for cid in ids), key=lambda c: (-c.importance, c.id)
            )
            clusters.append(
                ConceptCluster(
                    name=f"Related group {index} ({central.name})",
                    concept_ids=ids,
                    central_concept=central.id,
                )
            )
        return clusters

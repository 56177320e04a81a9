"""Force-Directed Layout - Iterative 2-D placement of the knowledge graph.

Each iteration accumulates three forces into node velocities before any
position moves:
- Inverse-square repulsion between every node pair
- Spring attraction along edges, scaled by edge strength
- A weak pull towards the canvas centre

Velocities are then damped and positions clamped to the padded canvas.
The pairwise terms are computed with numpy over the whole node set.
"""

from __future__ import annotations

import logging

import numpy as np

from mindgraph.config import ForceLayoutParams
from mindgraph.domain.models import (
    KnowledgeGraphData,
    KnowledgeGraphEdge,
    KnowledgeGraphNode,
    LayoutNode,
    NodeType,
)

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
MEMORY_ONLY = "memory"


def filter_graph(
    data: KnowledgeGraphData,
    category: str = ALL_CATEGORIES,
    show_memories: bool = True,
) -> tuple[list[KnowledgeGraphNode], list[KnowledgeGraphEdge]]:
    """Restrict the node and edge sets before simulation.

    Args:
        data: Full knowledge graph.
        category: ``"all"``, ``"memory"`` or a concept category value.
        show_memories: Keep memory nodes next to a category selection.

    Returns:
        Tuple of (nodes, edges) where every edge joins two kept nodes.
    """
    nodes = data.nodes
    if category != ALL_CATEGORIES:
        if category == MEMORY_ONLY:
            nodes = [n for n in data.nodes if n.type == NodeType.MEMORY]
        else:
            nodes = [
                n
                for n in data.nodes
                if n.type == NodeType.CONCEPT
                and n.metadata.category is not None
                and n.metadata.category.value == category
            ]
            if show_memories:
                nodes = nodes + [n for n in data.nodes if n.type == NodeType.MEMORY]
    elif not show_memories:
        nodes = [n for n in data.nodes if n.type != NodeType.MEMORY]

    kept = {n.id for n in nodes}
    edges = [e for e in data.edges if e.source in kept and e.target in kept]
    return nodes, edges


class ForceDirectedLayout:
    """Spring-embedder over a fixed canvas."""

    def __init__(
        self,
        params: ForceLayoutParams | None = None,
        seed: int | None = None,
    ) -> None:
        self.params = params or ForceLayoutParams()
        self.rng = np.random.default_rng(seed)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(min_x, max_x, min_y, max_y) of the padded canvas."""
        p = self.params
        return (p.padding, p.width - p.padding, p.padding, p.height - p.padding)

    def run(
        self,
        node_ids: list[str],
        edges: list[tuple[str, str, float]],
    ) -> list[LayoutNode]:
        """Simulate and return final positions in input order.

        Args:
            node_ids: Unique node ids.
            edges: (source, target, strength) triples; edges touching an
                unknown node are ignored.
        """
        p = self.params
        count = len(node_ids)
        if count == 0:
            return []
        if count == 1:
            return [LayoutNode(id=node_ids[0], x=p.width / 2, y=p.height / 2)]

        min_x, max_x, min_y, max_y = self.bounds
        pos = np.column_stack(
            [
                self.rng.uniform(min_x, max_x, count),
                self.rng.uniform(min_y, max_y, count),
            ]
        )
        vel = np.zeros_like(pos)

        index = {node_id: i for i, node_id in enumerate(node_ids)}
        kept = [(index[s], index[t], w) for s, t, w in edges if s in index and t in index]
        src = np.array([e[0] for e in kept], dtype=int)
        dst = np.array([e[1] for e in kept], dtype=int)
        weight = np.array([e[2] for e in kept], dtype=float)
        center = np.array([p.width / 2, p.height / 2])

        for _ in range(p.iterations):
            # Repulsion: delta[i, j] points from i to j
            delta = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]
            dist = np.maximum(np.linalg.norm(delta, axis=2), p.min_distance)
            magnitude = p.repulsion / (dist * dist)
            np.fill_diagonal(magnitude, 0.0)
            vel -= np.sum(delta / dist[:, :, np.newaxis] * magnitude[:, :, np.newaxis], axis=1)

            # Attraction: unit vector times (length * k * strength)
            if len(kept):
                pull = (pos[dst] - pos[src]) * (p.link_strength * weight)[:, np.newaxis]
                np.add.at(vel, src, pull)
                np.subtract.at(vel, dst, pull)

            vel += (center - pos) * p.center_force
            vel *= p.damping
            pos += vel
            pos[:, 0] = np.clip(pos[:, 0], min_x, max_x)
            pos[:, 1] = np.clip(pos[:, 1], min_y, max_y)

        logger.debug(f"Force layout settled {count} nodes, {len(kept)} edges")
        return [
            LayoutNode(
                id=node_id,
                x=float(pos[i, 0]),
                y=float(pos[i, 1]),
                vx=float(vel[i, 0]),
                vy=float(vel[i, 1]),
            )
            for i, node_id in enumerate(node_ids)
        ]

    def layout(
        self,
        data: KnowledgeGraphData,
        category: str = ALL_CATEGORIES,
        show_memories: bool = True,
    ) -> list[LayoutNode]:
        """Filter a knowledge graph and lay out what remains."""
        nodes, edges = filter_graph(data, category, show_memories)
        return self.run(
            [n.id for n in nodes],
            [(e.source, e.target, e.strength) for e in edges],
        )

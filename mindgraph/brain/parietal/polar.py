"""Deterministic Polar Layout - Closed-form 3-D placement of memories.

- Memory type picks a fixed 90 degree quadrant
- Recency rank within the type spreads memories across the quadrant
- Importance pulls memories towards the core
- Age lowers memories along the vertical axis
- Activated memories get a small depth jitter
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from mindgraph.config import PolarLayoutParams
from mindgraph.domain.models import MemoryRecord, MemoryType, Vector3

QUADRANTS: dict[MemoryType, tuple[float, float]] = {
    MemoryType.CONVERSATION: (0.0, math.pi / 2),
    MemoryType.FACT: (math.pi / 2, math.pi),
    MemoryType.INTERACTION: (math.pi, math.pi * 1.5),
    MemoryType.PERSONALITY_INSIGHT: (math.pi * 1.5, math.pi * 2),
}


def recency_key(memory: MemoryRecord) -> tuple[float, str]:
    """Sort key putting newer memories first; missing timestamps sort last."""
    if memory.timestamp is None:
        return (math.inf, memory.id)
    return (-memory.timestamp.timestamp(), memory.id)


class PolarLayout:
    """Places memories on a polar disc around the core."""

    def __init__(self, params: PolarLayoutParams | None = None) -> None:
        self.params = params or PolarLayoutParams()

    def angle(self, memory_type: MemoryType, rank: int, total_in_type: int) -> float:
        """Angle inside the type's quadrant for the given recency rank."""
        start, end = QUADRANTS[memory_type]
        span = end - start
        padding = self.params.quadrant_padding
        if total_in_type <= 1:
            return start + span * 0.5
        usable = 1 - 2 * padding
        return start + span * padding + (rank / (total_in_type - 1)) * span * usable

    def radius(self, importance: int) -> float:
        """Distance from the core; importance 10 sits closest."""
        p = self.params
        normalized = (max(1, min(10, importance)) - 1) / 9
        return p.max_radius - normalized * (p.max_radius - p.min_radius)

    def height(self, timestamp: datetime | None, reference_time: datetime) -> float:
        """Vertical position; newer memories sit higher."""
        p = self.params
        if timestamp is None:
            age_normalized = 1.0
        else:
            age_hours = (reference_time - timestamp).total_seconds() / 3600
            horizon_hours = p.age_horizon_days * 24
            age_normalized = max(0.0, min(age_hours / horizon_hours, 1.0))
        return (1 - age_normalized) * (p.vertical_max - p.vertical_min) + p.vertical_min

    def position(
        self,
        memory: MemoryRecord,
        rank: int,
        total_in_type: int,
        activated: bool,
        reference_time: datetime,
    ) -> Vector3:
        """Position of one memory given its recency rank within its type."""
        p = self.params
        angle = self.angle(memory.memory_type, rank, total_in_type)
        radius = self.radius(memory.importance)
        jitter = math.sin(rank * p.jitter_frequency) * p.jitter_amplitude if activated else 0.0

        return Vector3(
            x=math.cos(angle) * radius,
            y=self.height(memory.timestamp, reference_time),
            z=math.sin(angle) * radius + jitter,
        )

    def layout(
        self,
        memories: list[MemoryRecord],
        activated_ids: set[str] | frozenset[str] = frozenset(),
        reference_time: datetime | None = None,
    ) -> dict[str, Vector3]:
        """Position every memory, keyed by id.

        The result depends only on the inputs; pass ``reference_time`` to
        make it reproducible across calls.
        """
        now = reference_time or datetime.now(timezone.utc)
        by_type: dict[MemoryType, list[MemoryRecord]] = {}
        for memory in memories:
            by_type.setdefault(memory.memory_type, []).append(memory)

        positions: dict[str, Vector3] = {}
        for memory_type in QUADRANTS:
            group = sorted(by_type.get(memory_type, []), key=recency_key)
            for rank, memory in enumerate(group):
                positions[memory.id] = self.position(
                    memory, rank, len(group), memory.id in activated_ids, now
                )
        return positions

"""Thought flows - Transient vectors showing what the mind is doing."""

from __future__ import annotations

import math
import random

from mindgraph.domain.models import FlowType, ProcessingStage, ThoughtFlow, Vector3

ORIGIN = Vector3(x=0.0, y=0.0, z=0.0)


class ThoughtFlowGenerator:
    """Builds the thought flows for a processing stage.

    Progress values are drawn from ``rng`` so frames are reproducible
    when a seeded generator is supplied.
    """

    INPUT_STREAMS = 5
    INPUT_RADIUS = 8.0
    INPUT_HEIGHT = 2.0
    OUTPUT_STREAMS = 6
    OUTPUT_RADIUS = 7.0
    OUTPUT_HEIGHT = -1.0
    MAX_CHAIN_LINKS = 4

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def generate(
        self, stage: ProcessingStage, activated_positions: list[Vector3]
    ) -> list[ThoughtFlow]:
        """Flows for ``stage`` given the positions of activated memories."""
        if stage == ProcessingStage.RECEIVING:
            return [
                self._flow(
                    self._ring_point(
                        i, self.INPUT_STREAMS, self.INPUT_RADIUS, self.INPUT_HEIGHT
                    ),
                    ORIGIN,
                    FlowType.INPUT,
                )
                for i in range(self.INPUT_STREAMS)
            ]

        if stage == ProcessingStage.RETRIEVING:
            return [
                self._flow(ORIGIN, position, FlowType.PROCESSING)
                for position in activated_positions
            ]

        if stage == ProcessingStage.PROCESSING:
            links = min(len(activated_positions) - 1, self.MAX_CHAIN_LINKS)
            flows = [
                self._flow(activated_positions[i], activated_positions[i + 1], FlowType.PROCESSING)
                for i in range(max(links, 0))
            ]
            flows.append(
                self._flow(Vector3(y=-1.0), Vector3(y=1.0), FlowType.PROCESSING)
            )
            return flows

        if stage == ProcessingStage.RESPONDING:
            return [
                self._flow(
                    ORIGIN,
                    self._ring_point(
                        i, self.OUTPUT_STREAMS, self.OUTPUT_RADIUS, self.OUTPUT_HEIGHT, math.pi / 6
                    ),
                    FlowType.OUTPUT,
                )
                for i in range(self.OUTPUT_STREAMS)
            ]

        # Idle: one ambient stream through the core
        return [self._flow(Vector3(y=-0.5), Vector3(y=0.5), FlowType.PROCESSING)]

    @staticmethod
    def _ring_point(
        index: int, count: int, radius: float, height: float, offset: float = 0.0
    ) -> Vector3:
        angle = (index / count) * math.pi * 2 + offset
        return Vector3(x=math.cos(angle) * radius, y=height, z=math.sin(angle) * radius)

    def _flow(self, start: Vector3, end: Vector3, flow_type: FlowType) -> ThoughtFlow:
        return ThoughtFlow(
            from_=start.model_copy(),
            to=end.model_copy(),
            progress=self.rng.random(),
            type=flow_type,
        )

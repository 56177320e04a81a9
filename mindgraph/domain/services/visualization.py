"""Visualization Service - Frames of the 3-D mind view.

``generate_visualization_frame`` is a pure function of its inputs.
``VisualizationSession`` wraps it with per-agent state: the loaded
memories, the processing-stage machine, recently created ids and event
listeners. Sessions are explicit objects; create one per agent view.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable
from datetime import datetime

from ...brain.hippocampus import LinkScorer
from ...brain.parietal import QUADRANTS, PolarLayout
from ...brain.parietal.polar import recency_key
from ...brain.thalamus import (
    ActivationScorer,
    ProcessingStageMachine,
    Scheduler,
    ThoughtFlowGenerator,
)
from ...config import Heuristics
from ..models import (
    AttentionFocus,
    MemoryRecord,
    MemoryVisualization,
    ProcessingStage,
    Vector3,
    VisualizationEvent,
    VisualizationEventType,
    VisualizationFrame,
)

logger = logging.getLogger(__name__)

EventListener = Callable[[VisualizationEvent], None]

MAX_RECENTLY_CREATED = 5


def generate_visualization_frame(
    memories: list[MemoryRecord],
    stage: ProcessingStage = ProcessingStage.IDLE,
    query: str | None = None,
    forced_ids: Iterable[str] | None = None,
    recently_created_ids: list[str] | None = None,
    reference_time: datetime | None = None,
    heuristics: Heuristics | None = None,
    rng: random.Random | None = None,
) -> VisualizationFrame:
    """Build one frame from a memory snapshot.

    Args:
        memories: Memories to draw; inactive ones are skipped.
        stage: Current processing stage.
        query: Current message, used for keyword activation.
        forced_ids: Ids returned by an actual retrieval, best first.
        recently_created_ids: Ids to highlight as new.
        reference_time: "Now" for the age axis; fixes the layout when given.
        heuristics: Tuning knobs (defaults when omitted).
        rng: Source of thought-flow progress values.

    Returns:
        VisualizationFrame ready for rendering.
    """
    h = heuristics or Heuristics()
    visible = [m for m in memories if m.is_active]
    visible_ids = {m.id for m in visible}

    activation = ActivationScorer(h.activation).score(visible, query, forced_ids)
    activated_ids = [mid for mid in activation.activated_ids if mid in visible_ids]
    activated = set(activated_ids)

    positions = PolarLayout(h.polar).layout(visible, activated, reference_time)

    drawn: list[MemoryVisualization] = []
    for memory_type in QUADRANTS:
        for memory in sorted(
            (m for m in visible if m.memory_type == memory_type), key=recency_key
        ):
            drawn.append(
                MemoryVisualization(
                    id=memory.id,
                    position=positions[memory.id],
                    importance=memory.importance,
                    activated=memory.id in activated,
                    activation_strength=activation.strengths.get(memory.id, 0.0),
                    label=memory.label,
                )
            )

    connections = LinkScorer(h.links).connections(visible, activated)

    activated_positions = [positions[mid] for mid in activated_ids]
    flows = ThoughtFlowGenerator(rng).generate(stage, activated_positions)

    focus = None
    if stage != ProcessingStage.IDLE and activated_positions:
        count = len(activated_positions)
        focus = AttentionFocus(
            position=Vector3(
                x=sum(p.x for p in activated_positions) / count,
                y=sum(p.y for p in activated_positions) / count,
                z=sum(p.z for p in activated_positions) / count,
            )
        )

    return VisualizationFrame(
        memories=drawn,
        connections=connections,
        thought_flows=flows,
        attention_focus=focus,
        processing_stage=stage,
        activated_memory_ids=activated_ids,
        recently_created_ids=list(recently_created_ids or []),
    )


class VisualizationSession:
    """Live visualization state for one agent."""

    def __init__(
        self,
        heuristics: Heuristics | None = None,
        scheduler: Scheduler | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            heuristics: Tuning knobs shared by every frame.
            scheduler: Timer factory for automatic stage transitions.
            rng: Source of thought-flow progress values.
        """
        self._heuristics = heuristics or Heuristics()
        self._rng = rng or random.Random()
        self._stages = ProcessingStageMachine(
            self._heuristics.stages, scheduler, listener=self._on_stage_changed
        )
        self._agent_id: str | None = None
        self._memories: list[MemoryRecord] = []
        self._recently_created: list[str] = []
        self._listeners: dict[VisualizationEventType, list[EventListener]] = {}

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def agent_id(self) -> str | None:
        return self._agent_id

    @property
    def is_initialized(self) -> bool:
        return self._agent_id is not None

    def initialize(self, agent_id: str, memories: list[MemoryRecord]) -> None:
        """Bind the session to an agent and its current memories."""
        self._stages.reset()
        self._agent_id = agent_id
        self._memories = [m for m in memories if m.is_active]
        self._recently_created = []
        logger.debug(f"Visualization session for {agent_id}: {len(self._memories)} memories")

    def update_memories(self, memories: list[MemoryRecord]) -> list[str]:
        """Replace the memory snapshot; returns ids that were not there before."""
        known = {m.id for m in self._memories}
        self._memories = [m for m in memories if m.is_active]
        new_ids = [m.id for m in self._memories if m.id not in known]

        if new_ids:
            self._recently_created = [*new_ids, *self._recently_created][:MAX_RECENTLY_CREATED]
            self._emit(VisualizationEventType.MEMORY_CREATED, memory_ids=new_ids)
        return new_ids

    def dispose(self) -> None:
        """Cancel pending timers and drop all state and listeners."""
        self._stages.reset()
        self._agent_id = None
        self._memories = []
        self._recently_created = []
        self._listeners.clear()

    # =========================================================================
    # Conversation events
    # =========================================================================

    def on_message_received(self, message: str) -> None:
        self._stages.message_received(message)
        self._emit(VisualizationEventType.MESSAGE_RECEIVED, message=message)

    def on_memories_retrieved(self, memory_ids: list[str]) -> None:
        self._stages.memories_retrieved(memory_ids)
        self._emit(VisualizationEventType.MEMORIES_RETRIEVED, memory_ids=list(memory_ids))

    def on_response_generated(self) -> None:
        self._stages.response_generated()
        self._emit(VisualizationEventType.RESPONSE_GENERATED)

    def set_stage(self, stage: ProcessingStage) -> None:
        self._stages.set_stage(stage)

    # =========================================================================
    # Frames
    # =========================================================================

    def generate_frame(
        self,
        stage: ProcessingStage | None = None,
        query: str | None = None,
        reference_time: datetime | None = None,
    ) -> VisualizationFrame:
        """Frame for the current state; ``stage``/``query`` override it."""
        if not self.is_initialized:
            return VisualizationFrame()

        return generate_visualization_frame(
            self._memories,
            stage=stage or self._stages.stage,
            query=self._stages.query if query is None else query,
            forced_ids=self._stages.forced_ids,
            recently_created_ids=self._recently_created,
            reference_time=reference_time,
            heuristics=self._heuristics,
            rng=self._rng,
        )

    def get_processing_stage(self) -> ProcessingStage:
        return self._stages.stage

    def get_memory_count(self) -> int:
        return len(self._memories)

    def get_activated_count(self) -> int:
        return len(self._stages.forced_ids)

    # =========================================================================
    # Events
    # =========================================================================

    def add_event_listener(
        self, event_type: VisualizationEventType, callback: EventListener
    ) -> None:
        self._listeners.setdefault(event_type, []).append(callback)

    def remove_event_listener(
        self, event_type: VisualizationEventType, callback: EventListener
    ) -> None:
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def _on_stage_changed(self, stage: ProcessingStage) -> None:
        self._emit(VisualizationEventType.STAGE_CHANGED, stage=stage)

    def _emit(self, event_type: VisualizationEventType, **data: object) -> None:
        event = VisualizationEvent(type=event_type, agent_id=self._agent_id or "", **data)
        for callback in list(self._listeners.get(event_type, [])):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Visualization listener failed for {event_type.value}")

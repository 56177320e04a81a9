"""Visualization frame models (ephemeral, never persisted)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from .enums import ConnectionType, FlowType, ProcessingStage, VisualizationEventType

CORE_NODE_ID = "core"


class Vector3(BaseModel):
    """A point in 3-D space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class MemoryVisualization(BaseModel):
    """Placement and activation of a single memory."""

    id: str
    position: Vector3
    importance: int
    activated: bool = False
    activation_strength: float = Field(default=0.0, ge=0.0, le=1.0)
    label: str = ""


class MemoryConnection(BaseModel):
    """A weighted connection drawn between two memories (or to the core)."""

    source_id: str
    target_id: str
    strength: float = Field(..., ge=0.0, le=1.0)
    type: ConnectionType


class ThoughtFlow(BaseModel):
    """A transient vector tied to the current processing stage."""

    from_: Vector3 = Field(..., alias="from")
    to: Vector3
    progress: float = Field(..., ge=0.0, le=1.0)
    type: FlowType

    model_config = {"populate_by_name": True}


class AttentionFocus(BaseModel):
    """Centroid of the activated memories while the mind is busy."""

    position: Vector3
    radius: float = 2.0


class VisualizationFrame(BaseModel):
    """Everything needed to draw one frame of the mind view."""

    memories: list[MemoryVisualization] = Field(default_factory=list)
    connections: list[MemoryConnection] = Field(default_factory=list)
    thought_flows: list[ThoughtFlow] = Field(default_factory=list)
    attention_focus: AttentionFocus | None = None
    processing_stage: ProcessingStage = ProcessingStage.IDLE
    activated_memory_ids: list[str] = Field(default_factory=list)
    recently_created_ids: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API response."""
        return self.model_dump(mode="json", by_alias=True)


class LayoutNode(BaseModel):
    """A node position after the force-directed simulation."""

    id: str
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0


class VisualizationEvent(BaseModel):
    """Notification emitted by a visualization session."""

    type: VisualizationEventType
    agent_id: str = ""
    memory_ids: list[str] = Field(default_factory=list)
    message: str | None = None
    stage: ProcessingStage | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

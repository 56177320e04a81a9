"""Domain Services Package.

This package contains the business logic layer for MindGraph.

Main components:
- MemoryGraphService: Graph construction and the graph query API
- VisualizationSession: Per-agent state behind the 3-D mind view
- generate_visualization_frame: Pure frame builder used by the session
"""

from .graph import MemoryGraphService, new_memory_id
from .visualization import VisualizationSession, generate_visualization_frame

__all__ = [
    "MemoryGraphService",
    "VisualizationSession",
    "generate_visualization_frame",
    "new_memory_id",
]

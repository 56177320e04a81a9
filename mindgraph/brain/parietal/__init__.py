"""Parietal module - Spatial Processing.

The parietal lobe integrates sensory input into a sense of space. In
MindGraph, this module projects memories and concepts into space:
- A closed-form polar layout for the 3-D mind view
- A force-directed simulation for the 2-D knowledge graph
"""

from .force import ForceDirectedLayout, filter_graph
from .polar import QUADRANTS, PolarLayout

__all__ = ["ForceDirectedLayout", "PolarLayout", "QUADRANTS", "filter_graph"]

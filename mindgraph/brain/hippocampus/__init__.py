"""Hippocampus module - Memory Association & Retrieval.

The hippocampus is crucial for:
- Binding experiences into associations
- Consolidating related memories
- Contextual and temporal memory

In MindGraph, this module handles:
- Scoring links between memories (shared concepts, thread, time)
- Deriving graph statistics and concept clusters
- Graph-enhanced recall through stored links
"""

from .linking import LinkScorer, link_id_for
from .recall import GraphRecall
from .statistics import GraphStatistics

__all__ = ["GraphRecall", "GraphStatistics", "LinkScorer", "link_id_for"]

"""Amygdala Module - Emotional Processing.

The amygdala assigns emotional significance to experiences. In MindGraph,
this module scores the emotional valence of concepts as they are
distilled from memories.
"""

from mindgraph.brain.amygdala.valence import ValenceAnalyzer, ValenceResult

__all__ = ["ValenceAnalyzer", "ValenceResult"]

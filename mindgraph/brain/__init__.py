"""Brain-inspired cognitive modules for MindGraph.

This package organizes the graph engine using neuroscience-inspired naming:

## Module Structure

### amygdala/ - Emotional Processing
- Valence of concepts from emotion and sentiment words

### neocortex/ - Concept Formation & Abstraction
- Concept extraction from memory text
- Merging repeated observations
- Relationship discovery between concepts

### hippocampus/ - Memory Association & Retrieval
- Memory link scoring (concepts, thread, time)
- Graph statistics and concept clusters
- Graph-enhanced recall

### parietal/ - Spatial Processing
- Deterministic polar layout (3-D mind view)
- Force-directed layout (2-D knowledge graph)

### thalamus/ - Attention & Relay
- Activation scoring
- Processing-stage state machine
- Thought flows

## Design Philosophy

Every module here is a pure computation over snapshots. Storage, locking
and orchestration live in the domain services; nothing in this package
performs I/O.
"""

from .amygdala import ValenceAnalyzer
from .hippocampus import GraphRecall, GraphStatistics, LinkScorer
from .neocortex import ConceptExtractor, ConceptMerger
from .parietal import ForceDirectedLayout, PolarLayout
from .thalamus import ActivationScorer, ProcessingStageMachine, ThoughtFlowGenerator

__all__ = [
    "ActivationScorer",
    "ConceptExtractor",
    "ConceptMerger",
    "ForceDirectedLayout",
    "GraphRecall",
    "GraphStatistics",
    "LinkScorer",
    "PolarLayout",
    "ProcessingStageMachine",
    "ThoughtFlowGenerator",
    "ValenceAnalyzer",
]

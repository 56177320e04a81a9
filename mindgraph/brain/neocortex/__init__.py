"""Neocortex module - Concept Formation & Abstraction.

The neocortex is responsible for:
- Higher-order cognitive functions
- Semantic generalization
- Abstract reasoning

In MindGraph, this module handles:
- Concept extraction from memory text
- Merging repeated observations into stable concepts
- Discovering relationships between concepts
"""

from .extraction import ConceptExtractor
from .merger import ConceptMerger, MergeResult, concept_id_for

__all__ = ["ConceptExtractor", "ConceptMerger", "MergeResult", "concept_id_for"]

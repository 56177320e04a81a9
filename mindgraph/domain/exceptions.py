"""Custom exceptions for MindGraph."""

from __future__ import annotations


class MindGraphError(Exception):
    """Base exception for MindGraph."""

    pass


class ValidationError(MindGraphError):
    """Raised when input validation fails."""

    pass


class MemoryNotFoundError(MindGraphError):
    """Raised when a memory is not found."""

    def __init__(self, memory_id: str) -> None:
        self.memory_id = memory_id
        super().__init__(f"Memory with ID '{memory_id}' not found")


class ConceptNotFoundError(MindGraphError):
    """Raised when a graph mutation targets an unknown concept."""

    def __init__(self, concept_id: str) -> None:
        self.concept_id = concept_id
        super().__init__(f"Concept with ID '{concept_id}' not found")


class SelfLinkError(MindGraphError):
    """Raised when attempting to link a memory to itself."""

    def __init__(self, memory_id: str) -> None:
        self.memory_id = memory_id
        super().__init__(f"Cannot link memory '{memory_id}' to itself")


class StoreError(MindGraphError):
    """Raised when a memory or graph store cannot be read or written."""

    pass

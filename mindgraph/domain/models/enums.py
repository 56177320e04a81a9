"""Enumeration types for MindGraph domain models."""

from enum import Enum


class MemoryType(str, Enum):
    """Type of memory recorded for an agent."""

    CONVERSATION = "conversation"  # Something said in a conversation
    FACT = "fact"  # A learned fact
    INTERACTION = "interaction"  # An interaction with a user or agent
    PERSONALITY_INSIGHT = "personality_insight"  # Insight about the agent itself


class ConceptCategory(str, Enum):
    """Category of a distilled concept."""

    ENTITY = "entity"  # People, places, things
    TOPIC = "topic"  # Subject areas
    EMOTION = "emotion"  # Emotional concepts
    EVENT = "event"  # Events and actions
    ATTRIBUTE = "attribute"  # Properties and characteristics
    RELATION = "relation"  # Relationships between beings


class RelationshipType(str, Enum):
    """Kind of relationship between two concepts."""

    IS_A = "is_a"
    PART_OF = "part_of"
    RELATED_TO = "related_to"
    OPPOSITE_OF = "opposite_of"
    CAUSES = "causes"
    SIMILAR_TO = "similar_to"


class LinkType(str, Enum):
    """Type of a stored link between two memories."""

    SEMANTIC = "semantic"
    TEMPORAL = "temporal"
    CAUSAL = "causal"
    EMOTIONAL = "emotional"
    ASSOCIATIVE = "associative"


class ConnectionType(str, Enum):
    """Type of a transient connection drawn in a visualization frame."""

    KEYWORD = "keyword"
    CONVERSATION = "conversation"
    TEMPORAL = "temporal"
    CORE = "core"


class ProcessingStage(str, Enum):
    """Coarse phase of message handling.

    Cycle: idle -> receiving -> retrieving -> processing -> responding -> idle
    """

    IDLE = "idle"
    RECEIVING = "receiving"
    RETRIEVING = "retrieving"
    PROCESSING = "processing"
    RESPONDING = "responding"


class FlowType(str, Enum):
    """Direction of a thought-flow vector."""

    INPUT = "input"
    PROCESSING = "processing"
    OUTPUT = "output"


class NodeType(str, Enum):
    """Kind of node in the knowledge graph view."""

    MEMORY = "memory"
    CONCEPT = "concept"


class VisualizationEventType(str, Enum):
    """Events emitted by a visualization session."""

    MESSAGE_RECEIVED = "message_received"
    MEMORIES_RETRIEVED = "memories_retrieved"
    RESPONSE_GENERATED = "response_generated"
    MEMORY_CREATED = "memory_created"
    STAGE_CHANGED = "stage_changed"

"""Configuration settings for MindGraph."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

# =============================================================================
# Scoring heuristics
# =============================================================================


@dataclass
class ExtractionHeuristics:
    """Weights used when turning a memory into concept candidates."""

    min_match_length: int = 3
    base_importance: float = 0.3
    keyword_importance_boost: float = 0.2
    memory_importance_weight: float = 0.3
    proper_noun_boost: float = 0.1
    valence_window: int = 50
    valence_step: float = 0.2
    description_preview_length: int = 50


@dataclass
class MergeHeuristics:
    """Weights used when reconciling candidates with existing concepts."""

    importance_decay: float = 0.1
    importance_boost: float = 0.3
    valence_recency_weight: float = 0.5
    co_occurrence_step: float = 0.2
    same_category_strength: float = 0.3
    valence_similarity_window: float = 0.2
    valence_similarity_strength: float = 0.2
    opposite_valence_threshold: float = 0.3
    max_related_concepts: int = 10


@dataclass
class LinkHeuristics:
    """Weights used when scoring memory links and frame connections."""

    link_threshold: float = 0.3
    concept_overlap_step: float = 0.25
    keyword_min_shared: int = 2
    keyword_base: float = 0.3
    keyword_step: float = 0.1
    thread_bonus: float = 0.5
    temporal_weight: float = 0.2
    temporal_window_seconds: float = 3600.0
    core_strength: float = 0.8
    max_connections: int = 50
    strong_relation_threshold: float = 0.6


@dataclass
class PolarLayoutParams:
    """Geometry of the deterministic polar layout."""

    min_radius: float = 2.5
    max_radius: float = 6.0
    quadrant_padding: float = 0.1
    age_horizon_days: float = 30.0
    vertical_min: float = -2.0
    vertical_max: float = 2.0
    jitter_frequency: float = 0.5
    jitter_amplitude: float = 0.5


@dataclass
class ForceLayoutParams:
    """Physics constants of the force-directed layout."""

    width: float = 800.0
    height: float = 600.0
    padding: float = 50.0
    repulsion: float = 500.0
    link_strength: float = 0.3
    center_force: float = 0.05
    damping: float = 0.9
    iterations: int = 50
    min_distance: float = 1.0


@dataclass
class ActivationHeuristics:
    """Weights used when deciding which memories are activated."""

    forced_decay: float = 0.9
    keyword_in_query: float = 0.3
    query_word_in_keyword: float = 0.1
    min_query_word_length: int = 4
    content_match: float = 0.4
    activation_threshold: float = 0.2
    recent_count: int = 5
    recency_bonus: float = 0.3
    recency_step: float = 0.05
    recency_floor: float = 0.1


@dataclass
class StageTimings:
    """Delays (seconds) of the automatic processing-stage transitions."""

    receiving_to_retrieving: float = 0.5
    responding_to_idle: float = 2.0
    activation_grace: float = 3.0


@dataclass
class Heuristics:
    """All tuning knobs, grouped so they can be overridden as a unit."""

    extraction: ExtractionHeuristics = field(default_factory=ExtractionHeuristics)
    merge: MergeHeuristics = field(default_factory=MergeHeuristics)
    links: LinkHeuristics = field(default_factory=LinkHeuristics)
    polar: PolarLayoutParams = field(default_factory=PolarLayoutParams)
    force: ForceLayoutParams = field(default_factory=ForceLayoutParams)
    activation: ActivationHeuristics = field(default_factory=ActivationHeuristics)
    stages: StageTimings = field(default_factory=StageTimings)


# =============================================================================
# Application config
# =============================================================================


@dataclass
class Config:
    """MindGraph configuration."""

    # Data storage
    data_dir: Path = field(default_factory=lambda: Path.home() / ".mindgraph")
    store_backend: str = "json"  # "json" or "memory"

    # Server
    server_host: str = "127.0.0.1"
    server_port: int = 8765
    server_transport: str = "stdio"

    # Graph query defaults
    max_graph_nodes: int = 100
    min_link_strength: float = 0.2
    concept_node_share: float = 0.6
    memory_node_share: float = 0.4

    heuristics: Heuristics = field(default_factory=Heuristics)

    @property
    def memories_path(self) -> Path:
        """Directory holding per-agent memory files."""
        return self.data_dir / "memories"

    @property
    def graphs_path(self) -> Path:
        """Directory holding per-agent graph files."""
        return self.data_dir / "graphs"

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""
        data_dir_str = os.environ.get("MINDGRAPH_DATA_DIR")
        data_dir = Path(data_dir_str) if data_dir_str else Path.home() / ".mindgraph"

        heuristics = Heuristics()
        heuristics.links.link_threshold = float(
            os.environ.get("MINDGRAPH_LINK_THRESHOLD", "0.3")
        )
        heuristics.force.iterations = int(
            os.environ.get("MINDGRAPH_FORCE_ITERATIONS", "50")
        )

        return cls(
            data_dir=data_dir,
            store_backend=os.environ.get("MINDGRAPH_STORE", "json"),
            server_host=os.environ.get("MINDGRAPH_SERVER_HOST", "127.0.0.1"),
            server_port=int(os.environ.get("MINDGRAPH_SERVER_PORT", "8765")),
            server_transport=os.environ.get("MINDGRAPH_SERVER_TRANSPORT", "stdio"),
            max_graph_nodes=int(os.environ.get("MINDGRAPH_MAX_GRAPH_NODES", "100")),
            min_link_strength=float(
                os.environ.get("MINDGRAPH_MIN_LINK_STRENGTH", "0.2")
            ),
            heuristics=heuristics,
        )


# Module-level config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the config (for testing)."""
    global _config
    _config = None

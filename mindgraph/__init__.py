"""MindGraph - concept extraction, memory linking and spatial layouts for agent minds."""

__version__ = "0.1.0"

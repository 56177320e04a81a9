"""Thalamus module - Attention & Relay.

The thalamus relays signals and gates what reaches awareness. In
MindGraph, this module handles:
- Activation scoring (which memories light up for a query)
- The processing-stage state machine and its timed transitions
- Thought flows describing the current stage
"""

from .activation import ActivationScorer
from .flows import ThoughtFlowGenerator
from .stages import ProcessingStageMachine, Scheduler, thread_scheduler

__all__ = [
    "ActivationScorer",
    "ProcessingStageMachine",
    "Scheduler",
    "ThoughtFlowGenerator",
    "thread_scheduler",
]

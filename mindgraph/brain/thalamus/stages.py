"""Processing-stage state machine.

    idle -> receiving -> retrieving -> processing -> responding -> idle

Two transitions are automatic and delayed (receiving -> retrieving, and
responding -> idle followed by clearing the activation). Every transition
bumps a generation token; a delayed callback only acts if the token it was
scheduled under is still current, so a newer event always wins.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from mindgraph.config import StageTimings
from mindgraph.domain.models import ProcessingStage

logger = logging.getLogger(__name__)

# (delay_seconds, callback) -> handle; a handle with cancel() is cancelled on reset
Scheduler = Callable[[float, Callable[[], None]], Any]
StageListener = Callable[[ProcessingStage], None]


def thread_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run ``callback`` after ``delay`` seconds on a daemon timer thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class ProcessingStageMachine:
    """Tracks the processing stage, current query and forced activation."""

    def __init__(
        self,
        timings: StageTimings | None = None,
        scheduler: Scheduler | None = None,
        listener: StageListener | None = None,
    ) -> None:
        self.timings = timings or StageTimings()
        self._schedule = scheduler or thread_scheduler
        self._listener = listener
        self._lock = threading.RLock()
        self._stage = ProcessingStage.IDLE
        self._query = ""
        self._forced_ids: list[str] = []
        self._generation = 0
        self._pending: list[Any] = []

    # =========================================================================
    # Read access
    # =========================================================================

    @property
    def stage(self) -> ProcessingStage:
        return self._stage

    @property
    def query(self) -> str:
        return self._query

    @property
    def forced_ids(self) -> list[str]:
        return list(self._forced_ids)

    @property
    def generation(self) -> int:
        return self._generation

    # =========================================================================
    # Events
    # =========================================================================

    def message_received(self, message: str) -> None:
        """Store the query and enter ``receiving``; retrieval follows shortly."""
        with self._lock:
            self._query = message
            generation = self._transition(ProcessingStage.RECEIVING)
            self._defer(
                self.timings.receiving_to_retrieving,
                generation,
                lambda: self._transition(ProcessingStage.RETRIEVING),
            )
        self._notify(ProcessingStage.RECEIVING)

    def memories_retrieved(self, memory_ids: Iterable[str]) -> None:
        """Record the retrieved ids and enter ``processing``."""
        with self._lock:
            self._forced_ids = list(memory_ids)
            self._transition(ProcessingStage.PROCESSING)
        self._notify(ProcessingStage.PROCESSING)

    def response_generated(self) -> None:
        """Enter ``responding``; idle and activation clearing follow later."""
        with self._lock:
            generation = self._transition(ProcessingStage.RESPONDING)
            self._defer(self.timings.responding_to_idle, generation, self._settle)
        self._notify(ProcessingStage.RESPONDING)

    def set_stage(self, stage: ProcessingStage) -> None:
        """Force a stage, superseding any pending automatic transition."""
        with self._lock:
            self._transition(stage)
        self._notify(stage)

    def reset(self) -> None:
        """Return to a clean idle state and cancel pending timers."""
        with self._lock:
            self._generation += 1
            self._stage = ProcessingStage.IDLE
            self._query = ""
            self._forced_ids = []
            pending, self._pending = self._pending, []
        for handle in pending:
            cancel = getattr(handle, "cancel", None)
            if callable(cancel):
                cancel()

    # =========================================================================
    # Internals
    # =========================================================================

    def _transition(self, stage: ProcessingStage) -> int:
        self._generation += 1
        self._stage = stage
        return self._generation

    def _settle(self) -> None:
        generation = self._transition(ProcessingStage.IDLE)
        self._defer(self.timings.activation_grace, generation, self._clear_activation)

    def _clear_activation(self) -> None:
        self._forced_ids = []
        self._query = ""

    def _defer(
        self, delay: float, generation: int, action: Callable[[], object]
    ) -> None:
        def fire() -> None:
            with self._lock:
                if self._generation != generation:
                    logger.debug(f"Dropping stale stage timer (generation {generation})")
                    return
                before = self._stage
                action()
                stage = self._stage
            if stage != before:
                self._notify(stage)

        self._pending = [
            h for h in self._pending if getattr(h, "is_alive", lambda: True)()
        ]
        self._pending.append(self._schedule(delay, fire))

    def _notify(self, stage: ProcessingStage) -> None:
        if self._listener is not None:
            self._listener(stage)

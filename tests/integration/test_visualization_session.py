"""Integration tests for visualization frames and sessions."""

from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from mindgraph.domain.models import (
    ConnectionType,
    FlowType,
    MemoryType,
    ProcessingStage,
    VisualizationEventType,
)
from mindgraph.domain.services import VisualizationSession, generate_visualization_frame

REFERENCE = datetime(2024, 6, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def memories(make_memory):
    return [
        make_memory(
            "I went to the beach last year",
            memory_id="m_beach",
            keywords=["beach", "vacation"],
            conversation_id="t1",
            minutes=0,
        ),
        make_memory(
            "We planned an ocean trip",
            memory_id="m_ocean",
            keywords=["beach", "vacation"],
            conversation_id="t1",
            minutes=3,
        ),
        make_memory(
            "Water boils at 100 degrees",
            memory_id="m_fact",
            memory_type=MemoryType.FACT,
            minutes=900,
        ),
    ]


@pytest.fixture
def session(fake_scheduler, memories):
    session = VisualizationSession(scheduler=fake_scheduler, rng=random.Random(3))
    session.initialize("agent-1", memories)
    yield session
    session.dispose()


class TestGenerateFrame:
    """Tests for the pure frame builder."""

    def test_frame_contents(self, memories):
        """Test every visible memory is drawn with a connection for the thread."""
        frame = generate_visualization_frame(
            memories, query="I love the beach", reference_time=REFERENCE, rng=random.Random(1)
        )

        assert {m.id for m in frame.memories} == {"m_beach", "m_ocean", "m_fact"}
        assert "m_beach" in frame.activated_memory_ids
        conversation = [c for c in frame.connections if c.type == ConnectionType.CONVERSATION]
        assert len(conversation) == 1
        assert frame.attention_focus is None

    def test_inactive_memories_hidden(self, memories):
        """Test soft-deleted memories are not drawn or activated."""
        hidden = memories[0].model_copy(update={"is_active": False})

        frame = generate_visualization_frame(
            [hidden, *memories[1:]], forced_ids=[hidden.id], reference_time=REFERENCE
        )

        assert hidden.id not in {m.id for m in frame.memories}
        assert hidden.id not in frame.activated_memory_ids

    def test_layout_is_reproducible(self, memories):
        """Test positions are fixed for a given reference time."""
        first = generate_visualization_frame(memories, reference_time=REFERENCE)
        second = generate_visualization_frame(memories, reference_time=REFERENCE)

        assert [m.position for m in first.memories] == [m.position for m in second.memories]

    def test_attention_focus_is_centroid(self, memories):
        """Test the focus sits at the centre of the activated memories."""
        frame = generate_visualization_frame(
            memories,
            stage=ProcessingStage.PROCESSING,
            forced_ids=["m_beach", "m_fact"],
            reference_time=REFERENCE,
        )

        activated = [m.position for m in frame.memories if m.id in frame.activated_memory_ids]
        expected_x = sum(p.x for p in activated) / len(activated)
        assert frame.attention_focus.position.x == pytest.approx(expected_x)

    def test_empty_snapshot(self):
        """Test an empty memory list still yields an idle frame."""
        frame = generate_visualization_frame([])

        assert frame.memories == []
        assert frame.connections == []
        assert len(frame.thought_flows) == 1


class TestVisualizationSession:
    """Tests for VisualizationSession lifecycle and events."""

    def test_uninitialized_session(self):
        """Test an unbound session yields an empty frame."""
        frame = VisualizationSession().generate_frame()

        assert frame.memories == []
        assert frame.processing_stage == ProcessingStage.IDLE

    def test_counts(self, session):
        """Test counts reflect loaded memories and forced activation."""
        session.on_memories_retrieved(["m_beach", "m_ocean"])

        assert session.get_memory_count() == 3
        assert session.get_activated_count() == 2

    def test_conversation_cycle(self, session, fake_scheduler):
        """Test events move the stage and shape the frame."""
        session.on_message_received("Tell me about the beach")
        assert session.generate_frame(reference_time=REFERENCE).processing_stage == (
            ProcessingStage.RECEIVING
        )

        fake_scheduler.fire_all()
        retrieving = session.generate_frame(reference_time=REFERENCE)
        assert retrieving.processing_stage == ProcessingStage.RETRIEVING
        assert "m_beach" in retrieving.activated_memory_ids

        session.on_memories_retrieved(["m_fact"])
        processing = session.generate_frame(reference_time=REFERENCE)
        assert processing.activated_memory_ids[0] == "m_fact"

        session.on_response_generated()
        responding = session.generate_frame(reference_time=REFERENCE)
        assert all(f.type == FlowType.OUTPUT for f in responding.thought_flows)

        fake_scheduler.fire_all()
        assert session.get_processing_stage() == ProcessingStage.IDLE
        assert session.get_activated_count() == 0

    def test_stage_override(self, session):
        """Test generate_frame can override the stage."""
        frame = session.generate_frame(stage=ProcessingStage.RESPONDING)

        assert frame.processing_stage == ProcessingStage.RESPONDING
        assert session.get_processing_stage() == ProcessingStage.IDLE

    def test_update_memories_marks_new(self, session, memories, make_memory):
        """Test new memories are highlighted and announced."""
        events = []
        session.add_event_listener(VisualizationEventType.MEMORY_CREATED, events.append)
        extra = make_memory("Fresh memory", memory_id="m_new", minutes=1000)

        new_ids = session.update_memories([*memories, extra])

        assert new_ids == ["m_new"]
        assert session.generate_frame().recently_created_ids == ["m_new"]
        assert events[0].memory_ids == ["m_new"]
        assert events[0].agent_id == "agent-1"

    def test_recently_created_capped(self, session, memories, make_memory):
        """Test only the five latest new ids are kept."""
        current = list(memories)
        for i in range(7):
            current.append(make_memory(f"note {i}", memory_id=f"m_note{i}"))
            session.update_memories(current)

        recent = session.generate_frame().recently_created_ids
        assert recent == [f"m_note{i}" for i in range(6, 1, -1)]

    def test_stage_events(self, session):
        """Test stage changes and conversation events reach listeners."""
        stages = []
        received = []
        session.add_event_listener(
            VisualizationEventType.STAGE_CHANGED, lambda e: stages.append(e.stage)
        )
        session.add_event_listener(VisualizationEventType.MESSAGE_RECEIVED, received.append)

        session.on_message_received("hi")
        session.set_stage(ProcessingStage.PROCESSING)

        assert stages == [ProcessingStage.RECEIVING, ProcessingStage.PROCESSING]
        assert received[0].message == "hi"

    def test_failing_listener_does_not_break_session(self, session):
        """Test listener exceptions are logged, not raised."""
        calls = []

        def broken(event):
            raise RuntimeError("listener bug")

        session.add_event_listener(VisualizationEventType.RESPONSE_GENERATED, broken)
        session.add_event_listener(VisualizationEventType.RESPONSE_GENERATED, calls.append)

        session.on_response_generated()

        assert len(calls) == 1

    def test_remove_listener(self, session):
        """Test removed listeners are no longer called."""
        calls = []
        session.add_event_listener(VisualizationEventType.RESPONSE_GENERATED, calls.append)
        session.remove_event_listener(VisualizationEventType.RESPONSE_GENERATED, calls.append)

        session.on_response_generated()

        assert calls == []

    def test_dispose(self, session):
        """Test dispose unbinds the session."""
        session.dispose()

        assert session.is_initialized is False
        assert session.get_memory_count() == 0
        assert session.generate_frame().memories == []

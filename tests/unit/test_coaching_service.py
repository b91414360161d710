"""Tests for CoachingService orchestration."""

import asyncio

import pytest

from okr_coach.core.exceptions import (
    InvalidTransitionError,
    SessionCompletedError,
    SessionNotFoundError,
)
from okr_coach.domain.models.detection import DetectionResult
from okr_coach.domain.models.phase import BacktrackReason, Phase, PhaseEvent

OBJECTIVE_MESSAGE = "Objective: Dramatically increase customer retention this quarter"
KEY_RESULTS_MESSAGE = (
    "1. Increase monthly active users from 10K to 15K by Q2 2025\n"
    "2. Reduce churn from 8% to 5% by Q2 2025"
)


async def run_to_completion(service, session_id):
    """Drive a session through every phase and return the last turn."""
    await service.process_message(session_id, "I want to improve retention for our customers")
    await service.process_message(session_id, OBJECTIVE_MESSAGE)
    await service.process_message(session_id, KEY_RESULTS_MESSAGE)
    return await service.process_message(session_id, "I approve")


class TestSessionLifecycle:
    """Tests for session creation and lookup."""

    @pytest.mark.asyncio
    async def test_create_session(self, coaching_service, coaching_config):
        """New sessions start in discovery with discovery checkpoints."""
        session = await coaching_service.create_session("user-1", {"industry": "Retail"})

        assert session.status == "active"
        assert session.state.phase == Phase.DISCOVERY
        assert session.state.context.industry == "retail"
        assert session.state.progress == 0.05
        assert session.state.suggestions == coaching_config.templates.phase_suggestions[
            "discovery"
        ]

        checkpoints = await coaching_service.get_checkpoints(session.id)
        assert [cp.id for cp in checkpoints][0] == "discovery_context"
        assert len(checkpoints) == 5

    @pytest.mark.asyncio
    async def test_invalid_context_falls_back_to_empty(self, coaching_service):
        """A context with wrong types is dropped rather than failing the session."""
        session = await coaching_service.create_session("user-1", {"team_size": "lots"})
        assert session.state.context.team_size is None

    @pytest.mark.asyncio
    async def test_unknown_session(self, coaching_service):
        """Unknown IDs raise SessionNotFoundError everywhere."""
        with pytest.raises(SessionNotFoundError):
            await coaching_service.get_session("nope")
        with pytest.raises(SessionNotFoundError):
            await coaching_service.process_message("nope", "hello")
        with pytest.raises(SessionNotFoundError):
            await coaching_service.get_summary("nope")
        with pytest.raises(SessionNotFoundError):
            await coaching_service.delete_session("nope")

    @pytest.mark.asyncio
    async def test_list_and_delete(self, coaching_service):
        """Sessions can be listed and deleted."""
        first = await coaching_service.create_session("user-1")
        second = await coaching_service.create_session("user-2")

        listed = {s.id for s in await coaching_service.list_sessions()}
        assert listed == {first.id, second.id}

        await coaching_service.delete_session(first.id)

        assert {s.id for s in await coaching_service.list_sessions()} == {second.id}
        with pytest.raises(SessionNotFoundError):
            await coaching_service.get_session(first.id)


class TestProcessMessage:
    """Tests for the per-turn pipeline."""

    @pytest.mark.asyncio
    async def test_full_flow(self, coaching_service):
        """A session moves through every phase to completion."""
        session = await coaching_service.create_session("user-1")

        turn = await coaching_service.process_message(
            session.id, "I want to improve retention for our customers"
        )
        assert turn.decision.event == PhaseEvent.OBJECTIVE_IDENTIFIED
        assert turn.state.phase == Phase.REFINEMENT

        turn = await coaching_service.process_message(session.id, OBJECTIVE_MESSAGE)
        assert turn.state.objective_text == "Dramatically increase customer retention this quarter"
        assert turn.objective_score.overall == 90
        assert turn.decision.event == PhaseEvent.OBJECTIVE_ACCEPTED
        assert turn.state.phase == Phase.KR_DISCOVERY

        turn = await coaching_service.process_message(session.id, KEY_RESULTS_MESSAGE)
        assert turn.state.key_result_texts == [
            "Increase monthly active users from 10K to 15K by Q2 2025",
            "Reduce churn from 8% to 5% by Q2 2025",
        ]
        assert [s.overall for s in turn.key_result_scores] == [94, 80]
        assert turn.decision.event == PhaseEvent.KEY_RESULTS_ACCEPTED
        assert turn.state.phase == Phase.VALIDATION
        assert turn.state.quality_scores.okr_set is not None

        turn = await coaching_service.process_message(session.id, "I approve")
        assert turn.decision.event == PhaseEvent.USER_APPROVED
        assert turn.state.phase == Phase.COMPLETED
        assert turn.state.progress == 1.0

        stored = await coaching_service.get_session(session.id)
        assert stored.status == "completed"

        messages = await coaching_service.get_messages(session.id)
        assert len(messages) == 8
        assert [m.role for m in messages[:2]] == ["user", "assistant"]

    @pytest.mark.asyncio
    async def test_completed_session_rejects_messages(self, coaching_service):
        """Messages to a completed session raise SessionCompletedError."""
        session = await coaching_service.create_session("user-1")
        await run_to_completion(coaching_service, session.id)

        with pytest.raises(SessionCompletedError):
            await coaching_service.process_message(session.id, "one more thing")
        with pytest.raises(SessionCompletedError):
            await coaching_service.backtrack(session.id, Phase.REFINEMENT)

    @pytest.mark.asyncio
    async def test_completion_saves_okr_set(self, coaching_service):
        """The finished OKR set is stored with its scores."""
        session = await coaching_service.create_session("user-1")
        await run_to_completion(coaching_service, session.id)

        okr_sets = await coaching_service.get_okr_sets(session.id)

        assert len(okr_sets) == 1
        assert okr_sets[0]["objective"] == "Dramatically increase customer retention this quarter"
        assert okr_sets[0]["objective_score"] == 90
        assert [kr["score"] for kr in okr_sets[0]["key_results"]] == [94, 80]
        assert okr_sets[0]["metadata"]["okr_set"]["overall"] > 0

    @pytest.mark.asyncio
    async def test_summary_after_completion(self, coaching_service):
        """The read-only summary is still available once completed."""
        session = await coaching_service.create_session("user-1")
        await run_to_completion(coaching_service, session.id)

        summary = await coaching_service.get_summary(session.id)

        assert summary.status == "completed"
        assert summary.phase == Phase.COMPLETED
        assert summary.progress == 1.0
        assert summary.objective_score == 90
        assert [kr["score"] for kr in summary.key_results] == [94, 80]
        assert summary.estimated_minutes_remaining == 0

    @pytest.mark.asyncio
    async def test_reframing_attempts_count_consecutively(self, coaching_service):
        """Reframing attempts grow while patterns fire and reset otherwise."""
        session = await coaching_service.create_session("user-1")

        turn = await coaching_service.process_message(session.id, "Launch the new mobile app")
        assert turn.reframing is not None
        assert turn.reframing.suggestion in turn.response
        assert turn.state.phase == Phase.DISCOVERY
        assert turn.state.reframing_attempts == 1

        turn = await coaching_service.process_message(session.id, "Launch the new mobile app")
        assert turn.state.reframing_attempts == 2

        turn = await coaching_service.process_message(session.id, "hello")
        assert turn.reframing is None
        assert turn.state.reframing_attempts == 0

    @pytest.mark.asyncio
    async def test_checkpoint_completion_is_celebrated(self, coaching_service):
        """Completing a checkpoint adds a celebration to the reply."""
        session = await coaching_service.create_session("user-1")

        turn = await coaching_service.process_message(
            session.id,
            "I'm a product manager leading a team of 8 engineers at our company",
        )

        assert turn.completed_checkpoint.id == "discovery_context"
        assert turn.celebration.startswith("Great! I understand your context.")
        assert turn.response.startswith(turn.celebration)

        checkpoints = await coaching_service.get_checkpoints(session.id)
        assert checkpoints[0].is_complete is True

    @pytest.mark.asyncio
    async def test_concurrent_messages_are_serialized(self, coaching_service):
        """Two messages in flight for one session are applied one after the other."""
        session = await coaching_service.create_session("user-1")

        await asyncio.gather(
            coaching_service.process_message(session.id, "hello"),
            coaching_service.process_message(session.id, "hello"),
        )

        stored = await coaching_service.get_session(session.id)
        assert stored.state.turns_in_phase == 2
        assert len(await coaching_service.get_messages(session.id)) == 4


class TestBacktrack:
    """Tests for explicit backtracking through the service."""

    @pytest.mark.asyncio
    async def test_backtrack_to_discovery(self, coaching_service):
        """A user-requested backtrack is persisted and counted."""
        session = await coaching_service.create_session("user-1")
        await coaching_service.process_message(
            session.id, "I want to improve retention for our customers"
        )

        decision = await coaching_service.backtrack(
            session.id, Phase.DISCOVERY, BacktrackReason.NEW_INSIGHT
        )

        assert decision.next_phase == Phase.DISCOVERY
        assert decision.backtrack_reason == BacktrackReason.NEW_INSIGHT

        stored = await coaching_service.get_session(session.id)
        assert stored.state.phase == Phase.DISCOVERY

        summary = await coaching_service.get_summary(session.id)
        assert summary.backtrack_count == 1

    @pytest.mark.asyncio
    async def test_forward_backtrack_is_rejected(self, coaching_service):
        """Backtracking to a later phase raises InvalidTransitionError."""
        session = await coaching_service.create_session("user-1")

        with pytest.raises(InvalidTransitionError):
            await coaching_service.backtrack(session.id, Phase.KR_DISCOVERY)


class TestTurnHelpers:
    """Tests for the per-turn extraction and inference helpers."""

    def test_key_result_lines_accept_written_numbers(self, coaching_service):
        """Comma-grouped and unit-suffixed numbers mark a line as a key result."""
        text = (
            "Increase MAU from 10,000 to 20,000 by Q2 2024\n"
            "Cut p95 latency from 800ms to 200ms by Q3 2024\n"
            "Thanks!"
        )

        assert coaching_service._key_result_lines(text) == [
            "Increase MAU from 10,000 to 20,000 by Q2 2024",
            "Cut p95 latency from 800ms to 200ms by Q3 2024",
        ]

    @pytest.mark.asyncio
    async def test_inference_completes_one_checkpoint_per_turn(self, coaching_service):
        """Two satisfied checkpoints are completed on consecutive turns, in order."""
        session = await coaching_service.create_session("user-1")
        state = session.state
        state.phase = Phase.REFINEMENT
        state.objective_text = "Dramatically increase customer retention this quarter"
        state.checkpoints = coaching_service.tracker.create_progress(Phase.REFINEMENT)
        coaching_service._score_state(state)

        first = coaching_service._infer_checkpoint(state, DetectionResult())

        assert first.id == "refinement_quality"
        assert sum(cp.is_complete for cp in state.checkpoints.checkpoints) == 1

        second = coaching_service._infer_checkpoint(state, DetectionResult())

        assert second.id == "refinement_antipatterns"
        assert sum(cp.is_complete for cp in state.checkpoints.checkpoints) == 2

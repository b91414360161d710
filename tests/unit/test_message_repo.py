"""Tests for message and checkpoint repositories."""

import uuid
from datetime import datetime

import pytest

from okr_coach.domain.models.phase import Phase
from okr_coach.domain.models.session import ConversationMessage, Session
from okr_coach.services.checkpoint_tracker import CheckpointTracker


@pytest.fixture
async def session_id(session_repo):
    now = datetime.now()
    session = await session_repo.create(
        Session(id=str(uuid.uuid4()), user_id="user-1", created_at=now, updated_at=now)
    )
    return session.id


class TestMessageRepository:
    """Tests for MessageRepository."""

    @pytest.mark.asyncio
    async def test_save_assigns_id(self, message_repo, session_id):
        """Saved messages get a database ID and keep their metadata."""
        saved = await message_repo.save(
            ConversationMessage(
                session_id=session_id,
                role="user",
                content="Launch the new mobile app",
                metadata={"patterns": ["activity_focused"]},
            )
        )

        assert saved.id is not None
        assert saved.metadata == {"patterns": ["activity_focused"]}

    @pytest.mark.asyncio
    async def test_get_recent_is_oldest_first(self, message_repo, session_id):
        """get_recent returns the last N messages in conversation order."""
        for i in range(5):
            await message_repo.save(
                ConversationMessage(session_id=session_id, role="user", content=f"m{i}")
            )

        recent = await message_repo.get_recent(session_id, limit=3)
        everything = await message_repo.get_all(session_id)

        assert [m.content for m in recent] == ["m2", "m3", "m4"]
        assert [m.content for m in everything] == ["m0", "m1", "m2", "m3", "m4"]


class TestCheckpointRepository:
    """Tests for CheckpointRepository."""

    @pytest.mark.asyncio
    async def test_save_and_load_progress(self, checkpoint_repo, session_id, coaching_config):
        """Checkpoints round-trip with completion data, in sequence order."""
        tracker = CheckpointTracker(coaching_config)
        progress = tracker.create_progress(Phase.DISCOVERY)
        tracker.complete_checkpoint(progress, "discovery_context", 0.9, ["role given"])

        await checkpoint_repo.save_progress(session_id, progress)
        loaded = await checkpoint_repo.get_checkpoints(session_id)

        assert [cp.id for cp in loaded] == [cp.id for cp in progress.checkpoints]
        assert loaded[0].is_complete is True
        assert loaded[0].completion_confidence == 0.9
        assert loaded[0].evidence_collected == ["role given"]
        assert loaded[0].completed_at is not None
        assert loaded[1].is_complete is False

    @pytest.mark.asyncio
    async def test_save_replaces_previous_phase(self, checkpoint_repo, session_id, coaching_config):
        """Saving a new phase's progress replaces the old checkpoints."""
        tracker = CheckpointTracker(coaching_config)
        progress = tracker.create_progress(Phase.DISCOVERY)
        await checkpoint_repo.save_progress(session_id, progress)

        tracker.transition_to_phase(progress, Phase.VALIDATION)
        await checkpoint_repo.save_progress(session_id, progress)
        loaded = await checkpoint_repo.get_checkpoints(session_id)

        assert {cp.phase for cp in loaded} == {Phase.VALIDATION}
        assert len(loaded) == 3

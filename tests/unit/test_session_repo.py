"""Tests for session repository."""

import uuid
from datetime import datetime
from typing import Optional

import pytest

from okr_coach.domain.models.phase import Phase
from okr_coach.domain.models.quality import QualityScore, ScoringContext
from okr_coach.domain.models.session import ConversationMessage, Session, SessionState


def create_test_session(
    session_id: Optional[str] = None,
    user_id: str = "user-1",
    status: str = "active",
    phase: Phase = Phase.DISCOVERY,
) -> Session:
    """Helper to create test sessions."""
    if session_id is None:
        session_id = str(uuid.uuid4())

    now = datetime.now()
    return Session(
        id=session_id,
        user_id=user_id,
        created_at=now,
        updated_at=now,
        status=status,
        state=SessionState(phase=phase, context=ScoringContext(industry="Technology")),
    )


@pytest.mark.asyncio
async def test_create_session(session_repo):
    """Test creating a new session."""
    created = await session_repo.create(create_test_session(session_id="test-session-1"))

    assert created.id == "test-session-1"
    assert created.user_id == "user-1"
    assert created.status == "active"
    assert created.state.phase == Phase.DISCOVERY
    assert created.state.context.industry == "technology"


@pytest.mark.asyncio
async def test_get_missing_session(session_repo):
    """Unknown IDs return None."""
    assert await session_repo.get("does-not-exist") is None


@pytest.mark.asyncio
async def test_update_state_round_trips(session_repo):
    """State changes are persisted with the phase column."""
    session = await session_repo.create(create_test_session())
    state = session.state
    state.phase = Phase.REFINEMENT
    state.objective_text = "Delight our customers"
    state.quality_scores.objective = QualityScore(overall=82, dimensions={"clarity": 100})

    await session_repo.update_state(session.id, state)
    loaded = await session_repo.get(session.id)

    assert loaded.state.phase == Phase.REFINEMENT
    assert loaded.state.objective_text == "Delight our customers"
    assert loaded.state.quality_scores.objective.overall == 82
    assert loaded.status == "active"


@pytest.mark.asyncio
async def test_update_state_with_status(session_repo):
    """Passing a status updates it alongside the state."""
    session = await session_repo.create(create_test_session())
    session.state.phase = Phase.COMPLETED

    await session_repo.update_state(session.id, session.state, status="completed")
    loaded = await session_repo.get(session.id)

    assert loaded.status == "completed"
    assert loaded.state.phase == Phase.COMPLETED


@pytest.mark.asyncio
async def test_list_active(session_repo):
    """Only active sessions are listed."""
    await session_repo.create(create_test_session(session_id="active-1"))
    await session_repo.create(create_test_session(session_id="done-1", status="completed"))

    sessions = await session_repo.list_active()

    assert [s.id for s in sessions] == ["active-1"]


@pytest.mark.asyncio
async def test_okr_sets(session_repo):
    """OKR sets are stored with their key results in order."""
    session = await session_repo.create(create_test_session())

    okr_set_id = await session_repo.save_okr_set(
        session.id,
        "Delight our customers",
        88,
        [("Raise NPS from 30 to 45 by Q3 2025", 84), ("Cut churn from 8% to 5% by Q3 2025", None)],
        metadata={"scope": "team"},
    )
    okr_sets = await session_repo.get_okr_sets(session.id)

    assert len(okr_sets) == 1
    assert okr_sets[0]["id"] == okr_set_id
    assert okr_sets[0]["objective_score"] == 88
    assert okr_sets[0]["metadata"] == {"scope": "team"}
    assert okr_sets[0]["key_results"] == [
        {"text": "Raise NPS from 30 to 45 by Q3 2025", "score": 84},
        {"text": "Cut churn from 8% to 5% by Q3 2025", "score": None},
    ]


@pytest.mark.asyncio
async def test_delete_cascades(session_repo, message_repo, checkpoint_repo, test_db):
    """Deleting a session removes its messages, checkpoints and OKR sets."""
    import aiosqlite

    session = await session_repo.create(create_test_session())
    await message_repo.save(
        ConversationMessage(session_id=session.id, role="user", content="hello")
    )
    await session_repo.save_okr_set(session.id, "Delight our customers", 80, [("KR", 70)])

    assert await session_repo.delete(session.id) is True
    assert await session_repo.get(session.id) is None
    assert await message_repo.get_all(session.id) == []
    assert await session_repo.get_okr_sets(session.id) == []

    async with aiosqlite.connect(test_db) as db:
        cursor = await db.execute("SELECT COUNT(*) FROM key_results")
        row = await cursor.fetchone()
    assert row[0] == 0


@pytest.mark.asyncio
async def test_delete_missing_session(session_repo):
    """Deleting an unknown session reports False."""
    assert await session_repo.delete("nope") is False

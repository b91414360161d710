"""
Shared test fixtures.

Every database fixture uses a fresh temporary SQLite file with the schema
applied, and points settings.database_path at it for the test's duration.
"""

import pytest
import tempfile
from pathlib import Path

from okr_coach.core.config import CoachingConfig
from okr_coach.domain.models.detection import (
    DetectionResult,
    InterventionType,
    PatternMatch,
    Severity,
)
from okr_coach.persistence.database import init_database
from okr_coach.persistence.repositories.checkpoint_repo import CheckpointRepository
from okr_coach.persistence.repositories.message_repo import MessageRepository
from okr_coach.persistence.repositories.session_repo import SessionRepository
from okr_coach.services.coaching_service import CoachingService


@pytest.fixture
async def test_db(monkeypatch):
    """Create and initialize test database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        from okr_coach.core import config

        monkeypatch.setattr(config.settings, "database_path", db_path)
        yield db_path


@pytest.fixture
async def session_repo(test_db):
    return SessionRepository(str(test_db))


@pytest.fixture
async def message_repo(test_db):
    return MessageRepository(str(test_db))


@pytest.fixture
async def checkpoint_repo(test_db):
    return CheckpointRepository(str(test_db))


@pytest.fixture
def coaching_config():
    """Default configuration, independent of any YAML on disk."""
    return CoachingConfig()


@pytest.fixture
async def coaching_service(session_repo, message_repo, checkpoint_repo, coaching_config):
    return CoachingService(
        session_repo=session_repo,
        message_repo=message_repo,
        checkpoint_repo=checkpoint_repo,
        config=coaching_config,
    )


@pytest.fixture
def high_severity_detection():
    """A detection result holding one blocking (high severity) pattern."""
    return DetectionResult(
        patterns=[
            PatternMatch(
                id="activity_focused",
                name="Activity-Focused Language",
                confidence=0.93,
                severity=Severity.HIGH,
                intervention=InterventionType.ACTIVITY_TO_OUTCOME,
            )
        ],
        confidence=0.93,
        severity=Severity.HIGH,
    )

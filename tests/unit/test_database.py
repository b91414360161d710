"""Tests for database module."""

import pytest
import tempfile
from pathlib import Path

import aiosqlite

from okr_coach.persistence.database import check_database_health, init_database


@pytest.mark.asyncio
async def test_init_database_creates_file():
    """Database initialization creates the database file and parent directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "nested" / "test.db"

        assert not db_path.exists()

        await init_database(db_path)

        assert db_path.exists()


@pytest.mark.asyncio
async def test_init_database_creates_tables():
    """Database initialization creates all required tables."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        async with aiosqlite.connect(db_path) as db:
            cursor = await db.execute(
                "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
            )
            tables = [row[0] for row in await cursor.fetchall()]

        assert "sessions" in tables
        assert "messages" in tables
        assert "checkpoints" in tables
        assert "okr_sets" in tables
        assert "key_results" in tables


@pytest.mark.asyncio
async def test_init_database_is_idempotent():
    """Running the schema twice keeps existing rows."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        async with aiosqlite.connect(db_path) as db:
            await db.execute("INSERT INTO sessions (id, user_id) VALUES ('s1', 'u1')")
            await db.commit()

        await init_database(db_path)

        async with aiosqlite.connect(db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM sessions")
            row = await cursor.fetchone()

        assert row[0] == 1


@pytest.mark.asyncio
async def test_check_database_health():
    """Health check reports session count and integrity."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        await init_database(db_path)

        health = await check_database_health(db_path)

        assert health["status"] == "healthy"
        assert health["session_count"] == 0
        assert health["integrity"] == "ok"
        assert health["row_counts"] == {"sessions": 0, "messages": 0, "okr_sets": 0}


@pytest.mark.asyncio
async def test_check_database_health_without_schema():
    """A database without the schema is reported unhealthy."""
    with tempfile.TemporaryDirectory() as tmpdir:
        health = await check_database_health(Path(tmpdir) / "empty.db")

        assert health["status"] == "unhealthy"
        assert "error" in health

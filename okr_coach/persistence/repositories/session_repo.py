"""Session repository for database operations."""

import json
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiosqlite
import structlog

from okr_coach.domain.models.session import Session, SessionState

log = structlog.get_logger(__name__)


class SessionRepository:
    """Repository for session CRUD operations and finished OKR sets."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def create(self, session: Session) -> Session:
        """Create a new session."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute(
                "INSERT INTO sessions (id, user_id, status, phase, state, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    session.id,
                    session.user_id,
                    session.status,
                    session.state.phase.value,
                    session.state.model_dump_json(),
                    session.created_at.isoformat(),
                    session.updated_at.isoformat(),
                ),
            )
            await db.commit()

            cursor = await db.execute("SELECT * FROM sessions WHERE id = ?", (session.id,))
            row = await cursor.fetchone()
            if not row:
                raise ValueError(f"Session {session.id} not found after creation")
            return self._row_to_session(row)

    async def get(self, session_id: str) -> Optional[Session]:
        """Get a session by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM sessions WHERE id = ?", (session_id,))
            row = await cursor.fetchone()
            if not row:
                return None
            return self._row_to_session(row)

    async def update_state(
        self, session_id: str, state: SessionState, status: Optional[str] = None
    ) -> None:
        """Persist the session state, and the status when given."""
        async with aiosqlite.connect(self.db_path) as db:
            if status is None:
                await db.execute(
                    "UPDATE sessions SET phase = ?, state = ?, updated_at = ? WHERE id = ?",
                    (
                        state.phase.value,
                        state.model_dump_json(),
                        datetime.now().isoformat(),
                        session_id,
                    ),
                )
            else:
                await db.execute(
                    "UPDATE sessions SET phase = ?, state = ?, status = ?, updated_at = ? "
                    "WHERE id = ?",
                    (
                        state.phase.value,
                        state.model_dump_json(),
                        status,
                        datetime.now().isoformat(),
                        session_id,
                    ),
                )
            await db.commit()

    async def list_active(self) -> List[Session]:
        """List all active sessions."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM sessions WHERE status = 'active' ORDER BY created_at DESC"
            )
            rows = await cursor.fetchall()
            return [self._row_to_session(row) for row in rows]

    async def delete(self, session_id: str) -> bool:
        """Delete a session and its dependent rows. Returns True if deleted."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("PRAGMA foreign_keys = ON")
            cursor = await db.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
            await db.commit()
            return cursor.rowcount > 0

    # ==========================================================================
    # OKR sets
    # ==========================================================================

    async def save_okr_set(
        self,
        session_id: str,
        objective: str,
        objective_score: Optional[int],
        key_results: Sequence[Tuple[str, Optional[int]]],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Store a finished objective with its key results.

        Args:
            session_id: Owning session
            objective: Objective text
            objective_score: Objective overall score, if scored
            key_results: (text, overall score) pairs in display order
            metadata: Extra JSON-serializable data (set score, scope, ...)

        Returns:
            The new OKR set ID
        """
        okr_set_id = str(uuid.uuid4())
        now = datetime.now().isoformat()

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO okr_sets (id, session_id, objective, objective_score, metadata, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    okr_set_id,
                    session_id,
                    objective,
                    objective_score,
                    json.dumps(metadata or {}),
                    now,
                ),
            )
            await db.executemany(
                "INSERT INTO key_results (id, okr_set_id, text, score, order_index, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                [
                    (str(uuid.uuid4()), okr_set_id, text, score, index, now)
                    for index, (text, score) in enumerate(key_results)
                ],
            )
            await db.commit()

        log.info(
            "okr_set_saved",
            session_id=session_id,
            okr_set_id=okr_set_id,
            key_results=len(key_results),
        )
        return okr_set_id

    async def get_okr_sets(self, session_id: str) -> List[Dict[str, Any]]:
        """All OKR sets for a session, oldest first, each with its key results."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM okr_sets WHERE session_id = ? ORDER BY created_at ASC",
                (session_id,),
            )
            okr_rows = await cursor.fetchall()

            result = []
            for row in okr_rows:
                kr_cursor = await db.execute(
                    "SELECT text, score FROM key_results WHERE okr_set_id = ? "
                    "ORDER BY order_index ASC",
                    (row["id"],),
                )
                kr_rows = await kr_cursor.fetchall()
                result.append(
                    {
                        "id": row["id"],
                        "objective": row["objective"],
                        "objective_score": row["objective_score"],
                        "metadata": json.loads(row["metadata"]) if row["metadata"] else {},
                        "key_results": [
                            {"text": kr["text"], "score": kr["score"]} for kr in kr_rows
                        ],
                        "created_at": row["created_at"],
                    }
                )
            return result

    def _row_to_session(self, row: aiosqlite.Row) -> Session:
        """Convert a database row to a Session model."""
        state = (
            SessionState.model_validate_json(row["state"]) if row["state"] else SessionState()
        )
        return Session(
            id=row["id"],
            user_id=row["user_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            status=row["status"],
            state=state,
        )

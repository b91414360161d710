"""Checkpoint repository for database operations."""

import json
from datetime import datetime
from typing import List

import aiosqlite

from okr_coach.domain.models.checkpoint import Checkpoint, CheckpointProgress


class CheckpointRepository:
    """Stores the current phase's checkpoints for each session.

    The full CheckpointProgress (streaks, backtrack history) travels inside
    the session state; this table keeps the checkpoints queryable.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def save_progress(self, session_id: str, progress: CheckpointProgress) -> None:
        """Replace the stored checkpoints for ``session_id`` with ``progress``."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM checkpoints WHERE session_id = ?", (session_id,))
            await db.executemany(
                """INSERT INTO checkpoints (
                    session_id, checkpoint_id, phase, name, sequence_order,
                    is_complete, completion_confidence, evidence, completed_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                [
                    (
                        session_id,
                        cp.id,
                        cp.phase.value,
                        cp.name,
                        cp.sequence_order,
                        int(cp.is_complete),
                        cp.completion_confidence,
                        json.dumps(cp.evidence_collected),
                        cp.completed_at.isoformat() if cp.completed_at else None,
                    )
                    for cp in progress.checkpoints
                ],
            )
            await db.commit()

    async def get_checkpoints(self, session_id: str) -> List[Checkpoint]:
        """Stored checkpoints for a session in sequence order."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM checkpoints WHERE session_id = ? ORDER BY sequence_order ASC",
                (session_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_checkpoint(row) for row in rows]

    def _row_to_checkpoint(self, row: aiosqlite.Row) -> Checkpoint:
        return Checkpoint(
            id=row["checkpoint_id"],
            phase=row["phase"],
            name=row["name"],
            sequence_order=row["sequence_order"],
            is_complete=bool(row["is_complete"]),
            completion_confidence=row["completion_confidence"],
            evidence_collected=json.loads(row["evidence"]) if row["evidence"] else [],
            completed_at=datetime.fromisoformat(row["completed_at"])
            if row["completed_at"]
            else None,
        )

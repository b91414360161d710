"""Conversation message repository for database operations."""

import json
from datetime import datetime
from typing import List

import aiosqlite

from okr_coach.domain.models.session import ConversationMessage


class MessageRepository:
    """Repository for conversation message storage."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def save(self, message: ConversationMessage) -> ConversationMessage:
        """Save a message to the database.

        Returns:
            Saved ConversationMessage with its database ID
        """
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """INSERT INTO messages (
                    session_id, role, content, metadata, created_at
                ) VALUES (?, ?, ?, ?, ?)""",
                (
                    message.session_id,
                    message.role,
                    message.content,
                    json.dumps(message.metadata or {}),
                    message.created_at.isoformat(),
                ),
            )
            await db.commit()

            cursor = await db.execute(
                "SELECT * FROM messages WHERE id = ?", (cursor.lastrowid,)
            )
            row = await cursor.fetchone()
            if not row:
                raise ValueError(f"Message for session {message.session_id} not found after save")
            return self._row_to_message(row)

    async def get_recent(self, session_id: str, limit: int = 10) -> List[ConversationMessage]:
        """Get the most recent messages for a session, oldest first.

        Args:
            session_id: Session ID to get messages for
            limit: Maximum number of messages to return (default 10)
        """
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """SELECT * FROM (
                       SELECT * FROM messages
                       WHERE session_id = ?
                       ORDER BY id DESC
                       LIMIT ?
                   ) ORDER BY id ASC""",
                (session_id, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_message(row) for row in rows]

    async def get_all(self, session_id: str) -> List[ConversationMessage]:
        """Get every message for a session in conversation order."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM messages WHERE session_id = ? ORDER BY id ASC",
                (session_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_message(row) for row in rows]

    def _row_to_message(self, row: aiosqlite.Row) -> ConversationMessage:
        return ConversationMessage(
            id=row["id"],
            session_id=row["session_id"],
            role=row["role"],
            content=row["content"],
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            created_at=datetime.fromisoformat(row["created_at"]),
        )

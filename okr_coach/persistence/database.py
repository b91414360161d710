"""
SQLite schema setup and health reporting.

The schema lives in schema.sql next to this module and is applied on every
startup; every statement is CREATE ... IF NOT EXISTS so existing data is
left alone. Repositories open their own aiosqlite connections.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import aiosqlite
import structlog

from okr_coach.core.config import settings

log = structlog.get_logger(__name__)

SCHEMA_FILE = Path(__file__).parent / "schema.sql"

STARTUP_PRAGMAS = (
    "PRAGMA foreign_keys = ON",
    "PRAGMA journal_mode = WAL",
)

# Row counts reported by the health check
COUNTED_TABLES = ("sessions", "messages", "okr_sets")


async def init_database(db_path: Optional[Path] = None) -> None:
    """Create the database file and its parent directory if needed, then apply the schema.

    Args:
        db_path: Database file. Defaults to settings.database_path.

    Raises:
        FileNotFoundError: If schema.sql is missing from the package
    """
    db_path = Path(db_path or settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    if not SCHEMA_FILE.exists():
        log.error("schema_file_not_found", path=str(SCHEMA_FILE))
        raise FileNotFoundError(f"Schema file not found: {SCHEMA_FILE}")

    async with aiosqlite.connect(db_path) as db:
        for pragma in STARTUP_PRAGMAS:
            await db.execute(pragma)
        await db.executescript(SCHEMA_FILE.read_text())
        await db.commit()

    log.info("database_initialized", path=str(db_path))


async def check_database_health(db_path: Optional[Path] = None) -> Dict[str, Any]:
    """Row counts and integrity_check result, or ``status: unhealthy`` with the error."""
    db_path = db_path or settings.database_path
    try:
        async with aiosqlite.connect(db_path) as db:
            counts = {}
            for table in COUNTED_TABLES:
                cursor = await db.execute(f"SELECT COUNT(*) FROM {table}")
                row = await cursor.fetchone()
                counts[table] = row[0] if row else 0

            cursor = await db.execute("PRAGMA integrity_check")
            integrity = await cursor.fetchone()
    except aiosqlite.Error as e:
        log.error("database_health_check_failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "session_count": counts["sessions"],
        "row_counts": counts,
        "integrity": integrity[0] if integrity else "unknown",
        "path": str(db_path),
    }

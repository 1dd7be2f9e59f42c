"""Database engine setup and initialization."""

from pathlib import Path

import aiosqlite

from ..config import get_db_path


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the remote store schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        # One JSON document per workout, partitioned by owner
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workouts (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                date TEXT NOT NULL,
                data TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT
            )
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workouts_user_date
            ON workouts(user_id, date)
        """)

        await db.commit()

"""Pytest configuration and fixtures."""

import aiosqlite
import pytest
import pytest_asyncio

from liftbook.db.kv import FileKeyValueStorage
from liftbook.db.local import LocalWorkoutStore
from liftbook.db.remote import RemoteWorkoutStore
from liftbook.models.workout import ExerciseEntry, Weight, WorkoutRecord


def make_workout(
    date: str = "2024-01-01",
    exercises: list[tuple] | None = None,
    bodyweight: float | None = 80.0,
) -> WorkoutRecord:
    """Build a workout from (name, weight, reps) tuples."""
    if exercises is None:
        exercises = [("Squat", 100, 5)]
    return WorkoutRecord(
        date=date,
        bodyweight=bodyweight,
        exercises=[
            ExerciseEntry(name=name, weight=Weight.parse(weight), reps=reps)
            for name, weight, reps in exercises
        ],
    )


@pytest.fixture
def storage(tmp_path):
    """Key-value storage in a temporary directory."""
    return FileKeyValueStorage(tmp_path / "local")


@pytest.fixture
def local_store(storage):
    return LocalWorkoutStore(storage)


@pytest_asyncio.fixture
async def remote_store(tmp_path):
    """Initialized remote store backed by a temporary database."""
    store = RemoteWorkoutStore(tmp_path / "remote.db")
    await store.init()
    yield store
    store.close()


@pytest.fixture
def sample_workout():
    """A workout with a loaded and a bodyweight exercise."""
    return make_workout(
        date="2024-01-01",
        exercises=[("Squat", 100, 5), ("Pull Up", "BW", 8)],
    )


async def insert_document(db_path, user_id: str, document: str, workout_id: str = "raw-1"):
    """Write a raw workout document, bypassing the store's validation."""
    async with aiosqlite.connect(db_path) as db:
        await db.execute(
            """
            INSERT INTO workouts (id, user_id, date, data, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (workout_id, user_id, "2024-01-01T00:00:00.000000Z", document, "2024-01-01T00:00:00Z"),
        )
        await db.commit()

"""Remote per-user workout store with a live change feed."""

import asyncio
import json
import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

import aiosqlite

from ..config import get_db_path
from ..errors import (
    NetworkError,
    PermissionDeniedError,
    RemoteStoreError,
    SubscriptionError,
    WorkoutNotFoundError,
)
from ..models.workout import WorkoutRecord, format_timestamp, sort_newest_first
from .engine import init_db

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[WorkoutRecord]], None]
ErrorCallback = Callable[[SubscriptionError], None]


def _date_key(value: datetime) -> str:
    """Fixed-width UTC timestamp so the date column sorts lexically."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class Subscription:
    """Live view of one user's workouts.

    Every change signal makes the subscription fetch the user's full
    snapshot and hand it to ``on_change``. Signals queue up on an unbounded
    channel; signals that arrive while a fetch is pending collapse into one
    snapshot. After the first error the subscription stops.
    """

    def __init__(
        self,
        store: "RemoteWorkoutStore",
        user_id: str,
        on_change: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ):
        self.user_id = user_id
        self._store = store
        self._on_change = on_change
        self._on_error = on_error
        self._queue: asyncio.Queue[None] = asyncio.Queue()
        self._task: asyncio.Task | None = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def _start(self) -> None:
        self._active = True
        self._queue.put_nowait(None)
        self._task = asyncio.create_task(self._run())

    def notify(self) -> None:
        """Signal that the user's workouts changed."""
        if self._active:
            self._queue.put_nowait(None)

    async def _run(self) -> None:
        while True:
            await self._queue.get()
            handled = 1
            while not self._queue.empty():
                self._queue.get_nowait()
                handled += 1
            try:
                try:
                    snapshot = await self._store.list_for_user(self.user_id)
                except RemoteStoreError as e:
                    self._fail(e)
                    return
                if not self._active:
                    return
                try:
                    self._on_change(snapshot)
                except Exception:
                    logger.exception("Workout snapshot listener failed")
            finally:
                for _ in range(handled):
                    self._queue.task_done()

    def _fail(self, error: RemoteStoreError) -> None:
        logger.error("Error in workout subscription for %s: %s", self.user_id, error)
        self._detach()
        if self._on_error is not None:
            wrapped = SubscriptionError(str(error))
            wrapped.__cause__ = error
            self._on_error(wrapped)

    def _detach(self) -> None:
        self._active = False
        self._store._remove_subscription(self)
        # Pending signals will never be fetched
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

    async def settled(self) -> None:
        """Wait until every pending change has been delivered."""
        if not self._active or self._task is None or self._task.done():
            return
        await self._queue.join()

    def unsubscribe(self) -> None:
        """Stop delivering snapshots. Safe to call more than once."""
        if not self._active:
            return
        self._detach()
        if self._task is not None and not self._task.done():
            self._task.cancel()


class RemoteWorkoutStore:
    """Per-user workout documents stored in SQLite.

    Each workout is a JSON document owned by exactly one user; every read
    and write is scoped by ``user_id``. Database failures surface as
    ``NetworkError``.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        self._subscriptions: dict[str, list[Subscription]] = {}

    async def init(self) -> None:
        """Create the schema if needed."""
        try:
            await init_db(self.db_path)
        except aiosqlite.Error as e:
            raise NetworkError(f"Remote store unavailable: {e}") from e

    @asynccontextmanager
    async def _connect(self):
        try:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                yield db
        except aiosqlite.Error as e:
            raise NetworkError(f"Remote store unavailable: {e}") from e

    async def list_for_user(self, user_id: str) -> list[WorkoutRecord]:
        """Get all of a user's workouts, newest first."""
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT * FROM workouts WHERE user_id = ? ORDER BY date DESC",
                (user_id,),
            )
            rows = await cursor.fetchall()
            return sort_newest_first([self._row_to_record(row) for row in rows])

    async def create(self, user_id: str, record: WorkoutRecord) -> WorkoutRecord:
        """Store a new workout under a server-assigned id."""
        now = datetime.now(timezone.utc)
        stored = replace(
            record,
            id=uuid4().hex,
            exercises=list(record.exercises),
            created_at=record.created_at or now,
        )
        async with self._connect() as db:
            await db.execute(
                """
                INSERT INTO workouts (id, user_id, date, data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    stored.id,
                    user_id,
                    _date_key(stored.date),
                    self._to_document(stored),
                    format_timestamp(stored.created_at),
                    format_timestamp(stored.updated_at) if stored.updated_at else None,
                ),
            )
            await db.commit()
        self._notify(user_id)
        return stored

    async def update(
        self, user_id: str, workout_id: str, record: WorkoutRecord
    ) -> WorkoutRecord:
        """Replace a workout owned by ``user_id``."""
        async with self._connect() as db:
            existing = await self._fetch_owned(db, user_id, workout_id)
            if existing is None:
                raise WorkoutNotFoundError(workout_id)

            stored = replace(
                record,
                id=workout_id,
                exercises=list(record.exercises),
                created_at=record.created_at or existing.created_at,
                updated_at=datetime.now(timezone.utc),
            )
            await db.execute(
                """
                UPDATE workouts SET date = ?, data = ?, updated_at = ?
                WHERE id = ? AND user_id = ?
                """,
                (
                    _date_key(stored.date),
                    self._to_document(stored),
                    format_timestamp(stored.updated_at),
                    workout_id,
                    user_id,
                ),
            )
            await db.commit()
        self._notify(user_id)
        return stored

    async def delete(self, user_id: str, workout_id: str) -> str:
        """Delete a workout owned by ``user_id``."""
        async with self._connect() as db:
            existing = await self._fetch_owned(db, user_id, workout_id)
            if existing is None:
                raise WorkoutNotFoundError(workout_id)
            await db.execute(
                "DELETE FROM workouts WHERE id = ? AND user_id = ?",
                (workout_id, user_id),
            )
            await db.commit()
        self._notify(user_id)
        return workout_id

    async def get_by_id(self, user_id: str, workout_id: str) -> WorkoutRecord | None:
        """Get a workout owned by ``user_id``, or None if it does not exist."""
        async with self._connect() as db:
            return await self._fetch_owned(db, user_id, workout_id)

    def subscribe(
        self,
        user_id: str,
        on_change: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        """Deliver the user's full snapshot now and after every change.

        Must be called from a running event loop.
        """
        subscription = Subscription(self, user_id, on_change, on_error)
        self._subscriptions.setdefault(user_id, []).append(subscription)
        subscription._start()
        return subscription

    def close(self) -> None:
        """Cancel every open subscription."""
        for subscriptions in list(self._subscriptions.values()):
            for subscription in list(subscriptions):
                subscription.unsubscribe()

    async def _fetch_owned(
        self, db: aiosqlite.Connection, user_id: str, workout_id: str
    ) -> WorkoutRecord | None:
        cursor = await db.execute("SELECT * FROM workouts WHERE id = ?", (workout_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        if row["user_id"] != user_id:
            raise PermissionDeniedError(workout_id)
        return self._row_to_record(row)

    def _notify(self, user_id: str) -> None:
        for subscription in list(self._subscriptions.get(user_id, [])):
            subscription.notify()

    def _remove_subscription(self, subscription: Subscription) -> None:
        subscriptions = self._subscriptions.get(subscription.user_id, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)
        if not subscriptions:
            self._subscriptions.pop(subscription.user_id, None)

    def _to_document(self, record: WorkoutRecord) -> str:
        data = record.to_dict()
        data.pop("id", None)
        return json.dumps(data)

    def _row_to_record(self, row: aiosqlite.Row) -> WorkoutRecord:
        """Convert a database row to a WorkoutRecord."""
        try:
            return WorkoutRecord.from_dict(json.loads(row["data"]), id=row["id"])
        except (ValueError, TypeError) as e:
            raise NetworkError(f"Malformed workout document {row['id']}: {e}") from e

"""Workout data access for the rest of the application.

``WorkoutDataService`` hides where workouts live. Signed out, everything
goes to the local store. On login the local workouts are migrated once,
then a live remote subscription feeds ``list()`` and all writes go to the
remote store.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from pathlib import Path

from ..config import get_db_path, get_local_storage_dir
from ..db.kv import FileKeyValueStorage
from ..db.local import LocalWorkoutStore
from ..db.remote import RemoteWorkoutStore, Subscription
from ..errors import (
    DataAccessError,
    MigrationError,
    RemoteStoreError,
    StorageWriteError,
    SubscriptionError,
    WorkoutNotFoundError,
)
from ..models.workout import WorkoutRecord, sort_newest_first
from .auth import AuthStateNotifier, SessionFileProvider
from .duplicates import find_duplicate
from .sync import SyncEngine, SyncResult, SyncSession, SyncState

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load workouts. Please try again."
GET_FAILED = "Failed to load workout. Please try again."
SAVE_FAILED = "Failed to save workout. Please try again."
UPDATE_FAILED = "Failed to update workout. Please try again."
DELETE_FAILED = "Failed to delete workout. Please try again."
IMPORT_FAILED = "Failed to import workouts. Please try again."
SYNC_FAILED = "Failed to sync your data to cloud storage. Your local data is safe."
CLEAR_FAILED = (
    "Your workouts were synced to cloud storage, but local data could not be "
    "cleared. Already synced workouts will be skipped next time."
)
SUBSCRIPTION_FAILED = "Failed to sync workout data. Please reload to reconnect."


class WorkoutDataService:
    """Uniform CRUD over the local or remote workout store."""

    def __init__(
        self,
        local_store: LocalWorkoutStore,
        remote_store: RemoteWorkoutStore,
        sync_engine: SyncEngine | None = None,
    ):
        self.local_store = local_store
        self.remote_store = remote_store
        self.sync_engine = sync_engine or SyncEngine(local_store, remote_store)
        self.session = SyncSession()
        self.user_id: str | None = None
        self.error = ""
        self.last_sync: SyncResult | None = None
        self._workouts: list[WorkoutRecord] = []
        self._subscription: Subscription | None = None
        self._snapshot_ready = asyncio.Event()
        self._detach_auth = None
        self.provider: AuthStateNotifier | None = None
        self._migration: asyncio.Future | None = None
        # Bumped on every logout so a stale migration does not subscribe
        self._generation = 0

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def syncing(self) -> bool:
        return self.session.state == SyncState.SYNCING

    def clear_error(self) -> None:
        self.error = ""

    def attach(self, provider: AuthStateNotifier) -> None:
        """Follow authentication changes announced by ``provider``."""
        if self._detach_auth is not None:
            self._detach_auth()
        self._detach_auth = provider.on_auth_state_changed(self.handle_auth_state)
        self.provider = provider

    async def handle_auth_state(self, user_id: str | None) -> None:
        """React to the signed-in user changing."""
        if user_id == self.user_id:
            return
        if self.user_id is not None:
            self._end_session()
        if user_id is None:
            return

        self.user_id = user_id
        await self._start_session(user_id)

    async def _start_session(self, user_id: str) -> None:
        if not self.session.begin():
            return

        generation = self._generation
        migration = asyncio.ensure_future(
            self._migrate_after(self._migration, user_id, generation)
        )
        self._migration = migration
        try:
            result = await migration
        except MigrationError as e:
            logger.error("Error syncing local workouts for %s: %s", user_id, e)
            result = None
            if generation == self._generation:
                self.error = SYNC_FAILED
        except StorageWriteError as e:
            logger.error("Error clearing synced local workouts for %s: %s", user_id, e)
            result = None
            if generation == self._generation:
                self.error = CLEAR_FAILED
        finally:
            if self._migration is migration:
                self._migration = None

        # Signed out or switched user while migrating
        if generation != self._generation:
            return
        if result is not None:
            self.last_sync = result
        self.session.finish()

        self._snapshot_ready.clear()
        self._subscription = self.remote_store.subscribe(
            user_id, self._on_snapshot, self._on_subscription_error
        )

    async def _migrate_after(
        self, previous: asyncio.Future | None, user_id: str, generation: int
    ) -> SyncResult | None:
        """Run one migration once the previous one has released the local store."""
        if previous is not None:
            await asyncio.wait([previous])
        if generation != self._generation:
            return None
        return await self.sync_engine.migrate(user_id)

    def _end_session(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.user_id = None
        self.session.reset()
        self._generation += 1
        self._workouts = []
        self._snapshot_ready.clear()

    def _on_snapshot(self, workouts: list[WorkoutRecord]) -> None:
        self._workouts = workouts
        self._snapshot_ready.set()

    def _on_subscription_error(self, error: SubscriptionError) -> None:
        logger.error("Workout listener error: %s", error)
        self.error = SUBSCRIPTION_FAILED
        self._snapshot_ready.set()

    @contextmanager
    def _user_facing(self, message: str):
        try:
            yield
        except (StorageWriteError, WorkoutNotFoundError, RemoteStoreError) as e:
            logger.error("%s (%s)", message, e)
            self.error = message
            raise DataAccessError(message) from e

    async def list(self) -> list[WorkoutRecord]:
        """Get all workouts, newest first."""
        if not self.authenticated:
            return self.local_store.list()

        if self._subscription is None:
            with self._user_facing(LOAD_FAILED):
                return await self.remote_store.list_for_user(self.user_id)

        await self._snapshot_ready.wait()
        return list(self._workouts)

    async def create(self, record: WorkoutRecord) -> WorkoutRecord:
        self.error = ""
        with self._user_facing(SAVE_FAILED):
            if self.authenticated:
                # The subscription delivers the new workout
                return await self.remote_store.create(self.user_id, record)
            return self.local_store.create(record)

    async def update(self, workout_id: str, record: WorkoutRecord) -> WorkoutRecord:
        self.error = ""
        with self._user_facing(UPDATE_FAILED):
            if self.authenticated:
                return await self.remote_store.update(self.user_id, workout_id, record)
            return self.local_store.update(workout_id, record)

    async def delete(self, workout_id: str) -> str:
        self.error = ""
        with self._user_facing(DELETE_FAILED):
            if self.authenticated:
                return await self.remote_store.delete(self.user_id, workout_id)
            return self.local_store.delete(workout_id)

    async def get_by_id(self, workout_id: str) -> WorkoutRecord | None:
        with self._user_facing(GET_FAILED):
            if self.authenticated:
                return await self.remote_store.get_by_id(self.user_id, workout_id)
            return self.local_store.get_by_id(workout_id)

    async def import_records(self, records: list[WorkoutRecord]) -> SyncResult:
        """Bring imported workouts into the active store.

        Signed out, the import replaces all local workouts. Signed in, each
        workout is added remotely unless it duplicates an existing one.
        """
        self.error = ""
        if not self.authenticated:
            with self._user_facing(IMPORT_FAILED):
                stored = self.local_store.replace_all(records)
            return SyncResult(
                len(stored), 0, f"Successfully imported {len(stored)} workouts"
            )

        await self.settled()
        existing = await self.list()
        imported = 0
        skipped = 0
        with self._user_facing(IMPORT_FAILED):
            for record in sort_newest_first(records):
                if find_duplicate(record, existing) is not None:
                    skipped += 1
                    continue
                created = await self.remote_store.create(
                    self.user_id, record.with_id(None)
                )
                existing.append(created)
                imported += 1
        return SyncResult(
            imported,
            skipped,
            f"{imported} workouts imported, {skipped} skipped due to duplicates",
        )

    async def settled(self) -> None:
        """Wait until pending remote changes have reached ``list()``."""
        if self._subscription is not None:
            await self._subscription.settled()

    def close(self) -> None:
        """Stop following auth changes and drop the live subscription."""
        if self._detach_auth is not None:
            self._detach_auth()
            self._detach_auth = None
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None


async def open_workout_data(
    data_dir: Path | None = None,
) -> tuple[WorkoutDataService, SessionFileProvider]:
    """Build the stores for ``data_dir`` and restore any saved session."""
    remote_store = RemoteWorkoutStore(get_db_path(data_dir))
    await remote_store.init()

    storage = FileKeyValueStorage(get_local_storage_dir(data_dir))
    service = WorkoutDataService(LocalWorkoutStore(storage), remote_store)
    provider = SessionFileProvider(storage)
    service.attach(provider)
    await provider.restore()
    return service, provider

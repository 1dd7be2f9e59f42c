"""Migration of local workouts into the remote store."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum

from ..db.local import LocalWorkoutStore
from ..db.remote import RemoteWorkoutStore
from ..errors import MigrationError, RemoteStoreError
from ..models.workout import WorkoutRecord
from .duplicates import find_duplicate

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    """Migration state within one login session."""

    NOT_SYNCED = "not_synced"
    SYNCING = "syncing"
    SYNCED = "synced"


@dataclass
class SyncResult:
    """Outcome of one migration run."""

    synced: int
    skipped: int
    message: str
    failed: int = 0

    def to_dict(self) -> dict:
        return {
            "synced": self.synced,
            "skipped": self.skipped,
            "failed": self.failed,
            "message": self.message,
        }


class SyncSession:
    """Tracks whether the current login session has migrated yet.

    ``begin()`` succeeds once per session; ``reset()`` on logout allows the
    next login to migrate again.
    """

    def __init__(self):
        self.state = SyncState.NOT_SYNCED

    def begin(self) -> bool:
        """Move to SYNCING. Returns False if this session already started."""
        if self.state != SyncState.NOT_SYNCED:
            return False
        self.state = SyncState.SYNCING
        return True

    def finish(self) -> None:
        self.state = SyncState.SYNCED

    def reset(self) -> None:
        self.state = SyncState.NOT_SYNCED


class SyncEngine:
    """Moves local workouts into a user's remote collection."""

    def __init__(
        self,
        local_store: LocalWorkoutStore,
        remote_store: RemoteWorkoutStore,
        retain_failed: bool = False,
    ):
        """Initialize the sync engine.

        Args:
            local_store: Store holding workouts recorded while signed out
            remote_store: The user's remote collection
            retain_failed: Keep workouts whose remote write failed in the
                local store instead of clearing it entirely
        """
        self.local_store = local_store
        self.remote_store = remote_store
        self.retain_failed = retain_failed

    async def migrate(self, user_id: str) -> SyncResult:
        """Copy local workouts to the remote store and clear local data.

        Workouts already present remotely (see ``is_duplicate``) are
        skipped. A failed remote write is logged and does not stop the
        batch. Local data is cleared once every record was attempted.

        Raises:
            MigrationError: If existing remote workouts cannot be fetched.
                Nothing has been written or cleared at that point.
        """
        local_workouts = self.local_store.list()
        if not local_workouts:
            return SyncResult(0, 0, "No local workouts found to sync")

        try:
            existing = await self.remote_store.list_for_user(user_id)
        except RemoteStoreError as e:
            logger.error("Error fetching remote workouts for %s: %s", user_id, e)
            raise MigrationError(f"Failed to sync workouts: {e}") from e

        synced = 0
        skipped = 0
        failed: list[WorkoutRecord] = []

        for local_workout in local_workouts:
            if find_duplicate(local_workout, existing) is not None:
                skipped += 1
                continue

            now = datetime.now(timezone.utc)
            workout = replace(
                local_workout,
                id=None,
                exercises=list(local_workout.exercises),
                created_at=local_workout.created_at or now,
                synced_at=now,
                migrated_from_local=True,
            )
            try:
                await self.remote_store.create(user_id, workout)
            except RemoteStoreError as e:
                logger.warning(
                    "Failed to migrate workout from %s: %s",
                    local_workout.day.isoformat(),
                    e,
                )
                failed.append(local_workout)
                continue
            synced += 1

        self.local_store.clear()
        if failed and self.retain_failed:
            self.local_store.replace_all(failed)

        message = f"{synced} workouts synced, {skipped} skipped due to duplicates"
        if failed:
            message += f", {len(failed)} failed"
        logger.info("Migration for %s: %s", user_id, message)

        return SyncResult(synced, skipped, message, failed=len(failed))

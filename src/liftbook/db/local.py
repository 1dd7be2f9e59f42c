"""Local (on-device) workout store."""

from __future__ import annotations

import json
import logging
from uuid import uuid4

from ..config import LOCAL_WORKOUTS_KEY
from ..errors import StorageWriteError, WorkoutNotFoundError
from ..models.workout import WorkoutRecord, sort_newest_first
from .kv import KeyValueStorage

logger = logging.getLogger(__name__)


class LocalWorkoutStore:
    """Workout store persisted as a single JSON blob.

    All operations are synchronous. A corrupt blob reads as an empty store.
    """

    def __init__(self, storage: KeyValueStorage, key: str = LOCAL_WORKOUTS_KEY):
        self.storage = storage
        self.key = key

    def _load(self) -> list[WorkoutRecord]:
        try:
            raw = self.storage.get(self.key)
            if not raw:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("expected a list of workouts")
            return [WorkoutRecord.from_dict(item) for item in data]
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Ignoring corrupt local workout data: %s", e)
            return []

    def _save(self, records: list[WorkoutRecord]) -> None:
        payload = json.dumps([r.to_dict() for r in records])
        try:
            self.storage.set(self.key, payload)
        except OSError as e:
            logger.error("Error saving workouts to local storage: %s", e)
            raise StorageWriteError("Failed to save workouts") from e

    def list(self) -> list[WorkoutRecord]:
        """Get all workouts, newest first."""
        return sort_newest_first(self._load())

    def create(self, record: WorkoutRecord) -> WorkoutRecord:
        """Add a workout under a freshly generated id."""
        records = self._load()
        new_record = record.with_id(str(uuid4()))
        records.append(new_record)
        self._save(records)
        return new_record

    def update(self, workout_id: str, record: WorkoutRecord) -> WorkoutRecord:
        """Replace the workout stored under ``workout_id``."""
        records = self._load()
        for index, existing in enumerate(records):
            if existing.id == workout_id:
                updated = record.with_id(workout_id)
                records[index] = updated
                self._save(records)
                return updated
        raise WorkoutNotFoundError(workout_id)

    def delete(self, workout_id: str) -> str:
        """Delete a workout and return its id."""
        records = self._load()
        remaining = [r for r in records if r.id != workout_id]
        if len(remaining) == len(records):
            raise WorkoutNotFoundError(workout_id)
        self._save(remaining)
        return workout_id

    def get_by_id(self, workout_id: str) -> WorkoutRecord | None:
        """Get a single workout, or None."""
        for record in self._load():
            if record.id == workout_id:
                return record
        return None

    def clear(self) -> None:
        """Remove all local workouts."""
        try:
            self.storage.remove(self.key)
        except OSError as e:
            raise StorageWriteError("Failed to clear workouts") from e

    def replace_all(self, records: list[WorkoutRecord]) -> list[WorkoutRecord]:
        """Replace every local workout, keeping ids that are present."""
        stored = []
        seen_ids = set()
        for record in records:
            if not record.id or record.id in seen_ids:
                record = record.with_id(str(uuid4()))
            seen_ids.add(record.id)
            stored.append(record)
        self._save(stored)
        return sort_newest_first(stored)

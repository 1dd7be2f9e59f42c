"""Workout data services for liftbook."""

from .auth import AuthStateNotifier, SessionFileProvider
from .duplicates import find_duplicate, is_duplicate
from .sync import SyncEngine, SyncResult, SyncSession, SyncState
from .workout_data import WorkoutDataService, open_workout_data

__all__ = [
    "AuthStateNotifier",
    "find_duplicate",
    "is_duplicate",
    "open_workout_data",
    "SessionFileProvider",
    "SyncEngine",
    "SyncResult",
    "SyncSession",
    "SyncState",
    "WorkoutDataService",
]

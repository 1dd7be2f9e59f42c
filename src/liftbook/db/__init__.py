"""Storage layer for liftbook."""

from .engine import init_db
from .kv import FileKeyValueStorage, KeyValueStorage
from .local import LocalWorkoutStore
from .remote import RemoteWorkoutStore, Subscription

__all__ = [
    "FileKeyValueStorage",
    "init_db",
    "KeyValueStorage",
    "LocalWorkoutStore",
    "RemoteWorkoutStore",
    "Subscription",
]

"""Runtime configuration for liftbook."""

import os
from pathlib import Path

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent / "data"

# Key holding the serialized local workout list
LOCAL_WORKOUTS_KEY = "liftbook-workouts"

# Key holding the signed-in user id between CLI invocations
SESSION_KEY = "liftbook-session"

# Bodyweight/load unit shown in exports; not stored on records
WEIGHT_UNIT = os.environ.get("LIFTBOOK_WEIGHT_UNIT", "kg")


def get_data_dir(data_dir: Path | None = None) -> Path:
    """Get the data directory, honoring LIFTBOOK_DATA_DIR."""
    if data_dir is None:
        env_dir = os.environ.get("LIFTBOOK_DATA_DIR")
        data_dir = Path(env_dir) if env_dir else DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the remote store database file path."""
    return get_data_dir(data_dir) / "liftbook_remote.db"


def get_local_storage_dir(data_dir: Path | None = None) -> Path:
    """Get the directory backing on-device key-value storage."""
    return get_data_dir(data_dir) / "local"

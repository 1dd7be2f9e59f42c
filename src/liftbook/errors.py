"""Exception types raised by liftbook."""


class LiftbookError(Exception):
    """Base class for liftbook errors."""


class StorageWriteError(LiftbookError):
    """Local storage could not persist the workout list."""


class WorkoutNotFoundError(LiftbookError):
    """No workout with the requested id exists in the store."""

    def __init__(self, workout_id: str):
        super().__init__(f"Workout not found: {workout_id}")
        self.workout_id = workout_id


class RemoteStoreError(LiftbookError):
    """Base class for remote store failures."""


class NetworkError(RemoteStoreError):
    """The remote store could not be reached or failed to answer."""


class PermissionDeniedError(RemoteStoreError):
    """The workout belongs to a different user."""

    def __init__(self, workout_id: str):
        super().__init__(f"Workout not found or access denied: {workout_id}")
        self.workout_id = workout_id


class MigrationError(LiftbookError):
    """Local workouts could not be migrated to the remote store."""


class SubscriptionError(LiftbookError):
    """A live remote subscription failed."""


class DataAccessError(LiftbookError):
    """User-facing failure of a data operation.

    The message is suitable for display; the underlying error is
    available as ``__cause__``.
    """


class ImportValidationError(LiftbookError):
    """Imported workout data failed validation."""

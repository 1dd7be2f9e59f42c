"""Data models for liftbook."""

from .workout import (
    BODYWEIGHT_MARKER,
    ExerciseEntry,
    Weight,
    WeightKind,
    WorkoutRecord,
)

__all__ = [
    "BODYWEIGHT_MARKER",
    "ExerciseEntry",
    "Weight",
    "WeightKind",
    "WorkoutRecord",
]

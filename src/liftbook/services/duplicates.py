"""Duplicate detection for workout records."""

from ..models.workout import ExerciseEntry, WorkoutRecord


def _exercise_key(entry: ExerciseEntry) -> tuple:
    return (entry.normalized_name, entry.weight, entry.reps)


def _sort_key(entry: ExerciseEntry) -> tuple:
    # Same-name entries are ordered by load and reps as well
    return (
        entry.normalized_name,
        entry.weight.is_bodyweight,
        entry.weight.value or 0.0,
        entry.reps,
    )


def is_duplicate(a: WorkoutRecord, b: WorkoutRecord) -> bool:
    """Check whether two workouts record the same session.

    Two workouts are duplicates when they fall on the same calendar day and
    have the same exercises, compared by trimmed case-insensitive name,
    weight and reps regardless of order. Notes, ids and provenance are
    ignored.
    """
    if a.day != b.day:
        return False

    if len(a.exercises) != len(b.exercises):
        return False

    exercises_a = sorted(a.exercises, key=_sort_key)
    exercises_b = sorted(b.exercises, key=_sort_key)

    return all(
        _exercise_key(ex_a) == _exercise_key(ex_b)
        for ex_a, ex_b in zip(exercises_a, exercises_b)
    )


def find_duplicate(
    record: WorkoutRecord, candidates: list[WorkoutRecord]
) -> WorkoutRecord | None:
    """Return the first candidate that duplicates ``record``."""
    for candidate in candidates:
        if is_duplicate(record, candidate):
            return candidate
    return None

"""CSV/JSON export and JSON import of workouts."""

import csv
import io
import json
from datetime import datetime, timezone

from ..config import WEIGHT_UNIT
from ..errors import ImportValidationError
from ..models.workout import WorkoutRecord, format_timestamp, sort_newest_first


def _require_workouts(workouts: list[WorkoutRecord]) -> list[WorkoutRecord]:
    if not workouts:
        raise ValueError("No workout data to export")
    return sort_newest_first(workouts)


def export_csv(workouts: list[WorkoutRecord], unit: str = WEIGHT_UNIT) -> str:
    """Export workouts as CSV with one row per exercise."""
    workouts = _require_workouts(workouts)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(
        ["Date", f"Bodyweight ({unit})", "Exercise", "Weight", "Reps", "Notes"]
    )
    for workout in workouts:
        bodyweight = "" if workout.bodyweight is None else f"{workout.bodyweight:g}"
        for exercise in workout.exercises:
            writer.writerow([
                workout.day.isoformat(),
                bodyweight,
                exercise.name,
                str(exercise.weight),
                exercise.reps,
                exercise.notes,
            ])
    return buffer.getvalue()


def export_json(
    workouts: list[WorkoutRecord], exported_at: datetime | None = None
) -> str:
    """Export workouts as a JSON document with metadata."""
    workouts = _require_workouts(workouts)
    exported_at = exported_at or datetime.now(timezone.utc)

    data = {
        "exportDate": format_timestamp(exported_at),
        "totalWorkouts": len(workouts),
        "dateRange": {
            "from": format_timestamp(workouts[-1].date),
            "to": format_timestamp(workouts[0].date),
        },
        "workouts": [
            {
                "id": w.id,
                "date": format_timestamp(w.date),
                "bodyweight": w.bodyweight,
                "exercises": [ex.to_dict() for ex in w.exercises],
            }
            for w in workouts
        ],
    }
    return json.dumps(data, indent=2)


def default_export_filename(fmt: str, today: datetime | None = None) -> str:
    """File name for an export made today."""
    today = today or datetime.now(timezone.utc)
    return f"liftbook-workouts-{today.date().isoformat()}.{fmt}"


def _validate_workout(index: int, workout) -> None:
    position = index + 1
    if not isinstance(workout, dict):
        raise ImportValidationError(f"Workout {position} is not an object.")
    if not workout.get("date"):
        raise ImportValidationError(f"Workout {position} is missing a date field.")
    if not isinstance(workout.get("exercises"), list):
        raise ImportValidationError(f"Workout {position} is missing exercises array.")

    for j, exercise in enumerate(workout["exercises"]):
        if not isinstance(exercise, dict) or not exercise.get("name"):
            raise ImportValidationError(
                f"Exercise {j + 1} in workout {position} is missing a name."
            )
        name = exercise["name"]
        if exercise.get("weight") is None:
            raise ImportValidationError(
                f'Exercise "{name}" in workout {position} is missing weight.'
            )
        if exercise.get("reps") is None:
            raise ImportValidationError(
                f'Exercise "{name}" in workout {position} is missing reps.'
            )


def parse_import(text: str) -> list[WorkoutRecord]:
    """Parse and validate a JSON export or a bare array of workouts.

    Raises:
        ImportValidationError: If the content is not valid workout data.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportValidationError(
            "Invalid JSON file. Please check the file format."
        ) from e

    return parse_import_data(data)


def parse_import_data(data) -> list[WorkoutRecord]:
    """Validate already-decoded import data.

    Raises:
        ImportValidationError: If the content is not valid workout data.
    """
    if isinstance(data, list):
        workouts = data
    elif isinstance(data, dict) and isinstance(data.get("workouts"), list):
        workouts = data["workouts"]
    else:
        raise ImportValidationError(
            "Invalid JSON format. Expected an array of workouts "
            "or exported JSON with workouts array."
        )

    if not workouts:
        raise ImportValidationError("No workouts found in the imported file.")

    records = []
    for index, workout in enumerate(workouts):
        _validate_workout(index, workout)
        try:
            records.append(WorkoutRecord.from_dict(workout))
        except ValueError as e:
            raise ImportValidationError(f"Workout {index + 1}: {e}") from e
    return records

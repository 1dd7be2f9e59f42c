"""Workout statistics."""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime

from ..models.workout import Weight, WorkoutRecord, format_timestamp


@dataclass
class WorkoutSummary:
    """Aggregate figures over a set of workouts."""

    total_workouts: int
    total_exercises: int
    total_volume: float
    average_exercises_per_workout: float
    most_frequent_exercise: str
    first_date: datetime
    last_date: datetime

    def to_dict(self) -> dict:
        return {
            "total_workouts": self.total_workouts,
            "total_exercises": self.total_exercises,
            "total_volume": self.total_volume,
            "average_exercises_per_workout": self.average_exercises_per_workout,
            "most_frequent_exercise": self.most_frequent_exercise,
            "date_range": {
                "from": format_timestamp(self.first_date),
                "to": format_timestamp(self.last_date),
            },
        }


@dataclass
class PersonalRecord:
    """Best set logged for an exercise, scored by weight x reps."""

    exercise: str
    weight: Weight
    reps: int
    date: datetime

    @property
    def score(self) -> float:
        return self.weight.volume(self.reps)

    def to_dict(self) -> dict:
        return {
            "exercise": self.exercise,
            "weight": self.weight.to_raw(),
            "reps": self.reps,
            "score": self.score,
            "date": format_timestamp(self.date),
        }


def summarize(workouts: list[WorkoutRecord]) -> WorkoutSummary | None:
    """Summarize workouts; returns None when there are none."""
    if not workouts:
        return None

    frequency: Counter[str] = Counter()
    total_volume = 0.0
    total_exercises = 0

    for workout in workouts:
        for exercise in workout.exercises:
            frequency[exercise.normalized_name] += 1
            total_volume += exercise.volume
            total_exercises += 1

    most_frequent = frequency.most_common(1)
    dates = [w.date for w in workouts]

    return WorkoutSummary(
        total_workouts=len(workouts),
        total_exercises=total_exercises,
        total_volume=total_volume,
        average_exercises_per_workout=round(total_exercises / len(workouts), 1),
        most_frequent_exercise=most_frequent[0][0] if most_frequent else "N/A",
        first_date=min(dates),
        last_date=max(dates),
    )


def personal_records(workouts: list[WorkoutRecord]) -> dict[str, PersonalRecord]:
    """Find the best set per exercise, keyed by normalized name.

    Ties keep the earliest workout. Bodyweight-only sets score zero.
    """
    records: dict[str, PersonalRecord] = {}
    for workout in sorted(workouts, key=lambda w: w.date):
        for exercise in workout.exercises:
            key = exercise.normalized_name
            current = records.get(key)
            if current is None or exercise.volume > current.score:
                records[key] = PersonalRecord(
                    exercise=exercise.name.strip(),
                    weight=exercise.weight,
                    reps=exercise.reps,
                    date=workout.date,
                )
    return records


def bodyweight_series(workouts: list[WorkoutRecord]) -> list[tuple[datetime, float]]:
    """Bodyweight over time, oldest first, skipping workouts without one."""
    return [
        (w.date, w.bodyweight)
        for w in sorted(workouts, key=lambda w: w.date)
        if w.bodyweight is not None
    ]

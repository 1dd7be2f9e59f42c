"""Workout record data models."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timezone
from enum import Enum

# Serialized form of the bodyweight-only marker
BODYWEIGHT_MARKER = "BW"


class WeightKind(str, Enum):
    """How an exercise was loaded."""

    NUMERIC = "numeric"
    BODYWEIGHT = "bodyweight"


@dataclass(frozen=True)
class Weight:
    """Load used for an exercise entry.

    Either a numeric value or the bodyweight-only marker. Numeric values
    compare as floats, so ``Weight.numeric(100) == Weight.numeric(100.0)``.
    """

    kind: WeightKind
    value: float | None = None

    @classmethod
    def numeric(cls, value: float) -> "Weight":
        return cls(WeightKind.NUMERIC, float(value))

    @classmethod
    def bodyweight(cls) -> "Weight":
        return cls(WeightKind.BODYWEIGHT)

    @property
    def is_bodyweight(self) -> bool:
        return self.kind == WeightKind.BODYWEIGHT

    @classmethod
    def parse(cls, raw) -> "Weight":
        """Parse a stored or user-entered weight.

        Accepts numbers, numeric strings, and "BW"/"bodyweight" in any case.
        """
        if isinstance(raw, Weight):
            return raw
        if isinstance(raw, bool) or raw is None:
            raise ValueError(f"Invalid weight: {raw!r}")
        if isinstance(raw, (int, float)):
            return cls.numeric(raw)
        if isinstance(raw, str):
            text = raw.strip()
            if text.lower() in (BODYWEIGHT_MARKER.lower(), "bodyweight"):
                return cls.bodyweight()
            try:
                return cls.numeric(float(text))
            except ValueError:
                raise ValueError(f"Invalid weight: {raw!r}") from None
        raise ValueError(f"Invalid weight: {raw!r}")

    def to_raw(self) -> float | int | str:
        """Convert to the JSON form ("BW" or a number)."""
        if self.is_bodyweight:
            return BODYWEIGHT_MARKER
        if self.value is not None and self.value.is_integer():
            return int(self.value)
        return self.value

    def volume(self, reps: int) -> float:
        """Load times reps; bodyweight-only entries count as zero."""
        if self.is_bodyweight:
            return 0.0
        return self.value * reps

    def __str__(self) -> str:
        if self.is_bodyweight:
            return "Bodyweight"
        return str(self.to_raw())


def normalize_date(value) -> datetime:
    """Canonicalize a workout date to an aware UTC datetime.

    Date-only values mean midnight UTC and naive datetimes are read as UTC.

    Raises:
        ValueError: If the value is not a valid date.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid workout date: {value!r}") from None
    else:
        raise ValueError(f"Invalid workout date: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a UTC timestamp the way records are stored."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_optional_timestamp(value) -> datetime | None:
    if not value:
        return None
    return normalize_date(value)


@dataclass
class ExerciseEntry:
    """A single exercise performed in a workout."""

    name: str
    weight: Weight
    reps: int
    notes: str = ""

    @property
    def normalized_name(self) -> str:
        """Name used for matching: trimmed and case-folded."""
        return self.name.strip().lower()

    @property
    def volume(self) -> float:
        return self.weight.volume(self.reps)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "weight": self.weight.to_raw(),
            "reps": self.reps,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseEntry":
        """Create from dictionary.

        Raises:
            ValueError: If name, weight or reps are missing or invalid.
        """
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Exercise is missing a name")

        reps = data.get("reps")
        if isinstance(reps, str) and reps.strip().isdigit():
            reps = int(reps.strip())
        if isinstance(reps, float) and reps.is_integer():
            reps = int(reps)
        if isinstance(reps, bool) or not isinstance(reps, int) or reps <= 0:
            raise ValueError(f"Exercise {name!r} has invalid reps: {reps!r}")

        return cls(
            name=name,
            weight=Weight.parse(data.get("weight")),
            reps=reps,
            notes=data.get("notes") or "",
        )


@dataclass
class WorkoutRecord:
    """A recorded workout session.

    Provenance fields are set by whichever store last wrote the record and
    stay ``None`` on records that were never synced.
    """

    date: datetime
    exercises: list[ExerciseEntry] = field(default_factory=list)
    bodyweight: float | None = None
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    synced_at: datetime | None = None
    migrated_from_local: bool = False

    def __post_init__(self):
        self.date = normalize_date(self.date)

    @property
    def day(self) -> date:
        """Calendar day of the workout (UTC)."""
        return self.date.date()

    def with_id(self, workout_id: str | None) -> "WorkoutRecord":
        """Return a copy carrying a different id."""
        return replace(self, id=workout_id, exercises=list(self.exercises))

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        data = {
            "id": self.id,
            "date": format_timestamp(self.date),
            "bodyweight": self.bodyweight,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }
        if self.created_at:
            data["created_at"] = format_timestamp(self.created_at)
        if self.updated_at:
            data["updated_at"] = format_timestamp(self.updated_at)
        if self.synced_at:
            data["synced_at"] = format_timestamp(self.synced_at)
        if self.migrated_from_local:
            data["migrated_from_local"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict, id: str | None = None) -> "WorkoutRecord":
        """Create from dictionary.

        Raises:
            ValueError: If the date or any exercise is invalid.
        """
        if not data.get("date"):
            raise ValueError("Workout is missing a date")

        exercises = data.get("exercises")
        if not isinstance(exercises, list):
            raise ValueError("Workout is missing exercises")

        bodyweight = data.get("bodyweight")
        if bodyweight in ("", None):
            bodyweight = None
        else:
            try:
                bodyweight = float(bodyweight)
            except (TypeError, ValueError):
                raise ValueError(f"Invalid bodyweight: {bodyweight!r}") from None

        return cls(
            id=id if id is not None else data.get("id"),
            date=normalize_date(data["date"]),
            bodyweight=bodyweight,
            exercises=[ExerciseEntry.from_dict(ex) for ex in exercises],
            created_at=_parse_optional_timestamp(data.get("created_at")),
            updated_at=_parse_optional_timestamp(data.get("updated_at")),
            synced_at=_parse_optional_timestamp(data.get("synced_at")),
            migrated_from_local=bool(data.get("migrated_from_local", False)),
        )


def sort_newest_first(records: list[WorkoutRecord]) -> list[WorkoutRecord]:
    """Sort workouts by date, newest first."""
    return sorted(records, key=lambda r: r.date, reverse=True)

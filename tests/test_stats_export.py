"""Tests for workout statistics, export and import parsing."""

import csv
import io
import json
from datetime import datetime, timezone

import pytest

from conftest import make_workout
from liftbook.errors import ImportValidationError
from liftbook.services.export import (
    default_export_filename,
    export_csv,
    export_json,
    parse_import,
    parse_import_data,
)
from liftbook.services.stats import bodyweight_series, personal_records, summarize


class TestSummarize:
    """Tests for summarize."""

    def test_empty(self):
        assert summarize([]) is None

    def test_totals(self, sample_workout):
        workouts = [
            sample_workout,
            make_workout(date="2024-01-03", exercises=[("squat", 110, 3)]),
        ]

        summary = summarize(workouts)

        assert summary.total_workouts == 2
        assert summary.total_exercises == 3
        assert summary.total_volume == 100 * 5 + 110 * 3
        assert summary.average_exercises_per_workout == 1.5
        assert summary.most_frequent_exercise == "squat"
        assert summary.first_date.day == 1
        assert summary.last_date.day == 3

    def test_to_dict(self, sample_workout):
        data = summarize([sample_workout]).to_dict()
        assert data["date_range"] == {
            "from": "2024-01-01T00:00:00Z",
            "to": "2024-01-01T00:00:00Z",
        }


class TestPersonalRecords:
    """Tests for personal_records."""

    def test_best_set_per_exercise(self):
        workouts = [
            make_workout(date="2024-01-01", exercises=[("Squat", 100, 5)]),
            make_workout(date="2024-01-02", exercises=[("squat ", 120, 5)]),
            make_workout(date="2024-01-03", exercises=[("Squat", 140, 1)]),
        ]

        records = personal_records(workouts)

        assert list(records) == ["squat"]
        assert records["squat"].weight.value == 120
        assert records["squat"].score == 600

    def test_tie_keeps_earliest(self):
        workouts = [
            make_workout(date="2024-02-01", exercises=[("Row", 50, 10)]),
            make_workout(date="2024-01-01", exercises=[("Row", 100, 5)]),
        ]

        record = personal_records(workouts)["row"]

        assert record.date.month == 1

    def test_bodyweight_scores_zero(self):
        records = personal_records([make_workout(exercises=[("Dip", "BW", 20)])])
        assert records["dip"].score == 0
        assert records["dip"].to_dict()["weight"] == "BW"


def test_bodyweight_series_skips_missing():
    workouts = [
        make_workout(date="2024-01-03", bodyweight=81.0),
        make_workout(date="2024-01-02", bodyweight=None),
        make_workout(date="2024-01-01", bodyweight=80.5),
    ]

    series = bodyweight_series(workouts)

    assert [weight for _, weight in series] == [80.5, 81.0]


class TestExport:
    """Tests for CSV and JSON export."""

    def test_empty_export_rejected(self):
        with pytest.raises(ValueError, match="No workout data"):
            export_csv([])
        with pytest.raises(ValueError, match="No workout data"):
            export_json([])

    def test_csv_rows(self, sample_workout):
        text = export_csv([sample_workout], unit="lb")

        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0] == ["Date", "Bodyweight (lb)", "Exercise", "Weight", "Reps", "Notes"]
        assert rows[1] == ["2024-01-01", "80", "Squat", "100", "5", ""]
        assert rows[2] == ["2024-01-01", "80", "Pull Up", "Bodyweight", "8", ""]

    def test_csv_quotes_commas(self):
        workout = make_workout()
        workout.exercises[0].notes = "slow, paused"

        rows = list(csv.reader(io.StringIO(export_csv([workout]))))

        assert rows[1][-1] == "slow, paused"

    def test_json_metadata(self, sample_workout):
        later = make_workout(date="2024-02-01")
        exported_at = datetime(2024, 3, 1, 12, tzinfo=timezone.utc)

        data = json.loads(export_json([sample_workout, later], exported_at))

        assert data["exportDate"] == "2024-03-01T12:00:00Z"
        assert data["totalWorkouts"] == 2
        assert data["dateRange"] == {
            "from": "2024-01-01T00:00:00Z",
            "to": "2024-02-01T00:00:00Z",
        }
        assert data["workouts"][0]["date"] == "2024-02-01T00:00:00Z"
        assert data["workouts"][1]["exercises"][1]["weight"] == "BW"

    def test_default_filename(self):
        today = datetime(2024, 5, 6, tzinfo=timezone.utc)
        assert default_export_filename("csv", today) == "liftbook-workouts-2024-05-06.csv"


class TestImport:
    """Tests for import parsing."""

    def test_exported_json_imports(self, sample_workout):
        records = parse_import(export_json([sample_workout]))

        assert len(records) == 1
        assert records[0].exercises == sample_workout.exercises
        assert records[0].day == sample_workout.day

    def test_bare_array(self):
        records = parse_import_data(
            [{"date": "2024-01-01", "exercises": [{"name": "Row", "weight": 60, "reps": 8}]}]
        )
        assert records[0].exercises[0].name == "Row"

    @pytest.mark.parametrize(
        ("data", "message"),
        [
            ({"foo": 1}, "Invalid JSON format"),
            ([], "No workouts found"),
            ([{"exercises": []}], "Workout 1 is missing a date field."),
            ([{"date": "2024-01-01"}], "Workout 1 is missing exercises array."),
            (
                [{"date": "2024-01-01", "exercises": [{"weight": 1, "reps": 1}]}],
                "Exercise 1 in workout 1 is missing a name.",
            ),
            (
                [{"date": "2024-01-01", "exercises": [{"name": "Row", "reps": 1}]}],
                'Exercise "Row" in workout 1 is missing weight.',
            ),
            (
                [{"date": "2024-01-01", "exercises": [{"name": "Row", "weight": 1}]}],
                'Exercise "Row" in workout 1 is missing reps.',
            ),
            ([{"date": "yesterday", "exercises": []}], "Workout 1:"),
        ],
    )
    def test_validation_errors(self, data, message):
        with pytest.raises(ImportValidationError) as exc_info:
            parse_import_data(data)
        assert message in str(exc_info.value)

    def test_invalid_json(self):
        with pytest.raises(ImportValidationError, match="Invalid JSON file"):
            parse_import("{oops")

"""Workout log commands."""

import re
from dataclasses import replace
from datetime import date

import click

from ..errors import DataAccessError
from ..models.workout import ExerciseEntry, Weight, WorkoutRecord
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    store_label,
    workout_data,
)

EXERCISE_PATTERN = re.compile(
    r"^(?P<name>[^:]+):(?P<weight>[^x:]+)x(?P<reps>\d+)(?::(?P<notes>.*))?$",
    re.IGNORECASE,
)


def parse_exercise(value: str) -> ExerciseEntry:
    """Parse an exercise given as NAME:WEIGHTxREPS[:NOTES].

    WEIGHT is a number or BW for bodyweight-only sets, e.g.
    "Squat:100x5" or "Pull Up:BWx8:strict".
    """
    match = EXERCISE_PATTERN.match(value.strip())
    if not match:
        raise click.BadParameter(
            f"'{value}' is not NAME:WEIGHTxREPS[:NOTES] (e.g. Squat:100x5)"
        )
    try:
        return ExerciseEntry(
            name=match["name"].strip(),
            weight=Weight.parse(match["weight"]),
            reps=int(match["reps"]),
            notes=(match["notes"] or "").strip(),
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _exercise_callback(ctx, param, values):
    return [parse_exercise(v) for v in values]


def describe_exercises(record: WorkoutRecord) -> str:
    return ", ".join(f"{ex.name} {ex.weight.to_raw()}x{ex.reps}" for ex in record.exercises)


def echo_workout(record: WorkoutRecord) -> None:
    """Print one workout in detail."""
    click.echo()
    click.echo(click.style(f"Workout {record.id}", bold=True))
    click.echo("=" * 50)
    click.echo(f"Date:       {record.day.isoformat()}")
    if record.bodyweight is not None:
        click.echo(f"Bodyweight: {record.bodyweight:g}")
    if record.synced_at:
        click.echo(f"Synced:     {record.synced_at:%Y-%m-%d %H:%M} UTC")
    click.echo()

    rows = [
        [ex.name, str(ex.weight), str(ex.reps), ex.notes]
        for ex in record.exercises
    ]
    if rows:
        click.echo(format_table(["Exercise", "Weight", "Reps", "Notes"], rows))
    else:
        echo_info("No exercises recorded.")


@click.command()
@click.option(
    "--date",
    "workout_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Workout date (default: today)",
)
@click.option("--bodyweight", "-b", type=float, help="Bodyweight on the day")
@click.option(
    "--exercise",
    "-e",
    "exercises",
    multiple=True,
    required=True,
    callback=_exercise_callback,
    help="Exercise as NAME:WEIGHTxREPS[:NOTES]; repeat for each exercise",
)
@click.pass_context
@async_command
async def add(ctx, workout_date, bodyweight, exercises):
    """Record a workout.

    Examples:

        liftbook add -b 80 -e Squat:100x5 -e "Bench Press:70x8"

        liftbook add --date 2024-01-01 -e "Pull Up:BWx10:strict"
    """
    ensure_initialized(ctx)

    record = WorkoutRecord(
        date=(workout_date.date() if workout_date else date.today()),
        bodyweight=bodyweight,
        exercises=list(exercises),
    )

    async with workout_data(ctx) as service:
        try:
            created = await service.create(record)
        except DataAccessError as e:
            echo_error(str(e))
            ctx.exit(1)
        echo_success(f"Saved workout {created.id} to {store_label(service)}")


@click.command("list")
@click.option("--limit", "-n", type=int, default=None, help="Show only the newest N")
@click.pass_context
@async_command
async def list_workouts(ctx, limit):
    """List recorded workouts, newest first."""
    ensure_initialized(ctx)

    async with workout_data(ctx) as service:
        workouts = await service.list()
        if service.error:
            echo_error(service.error)
        label = store_label(service)

    if not workouts:
        echo_info(f"No workouts recorded on {label}. Add one with 'liftbook add'.")
        return

    if limit:
        workouts = workouts[:limit]

    rows = [
        [
            w.id,
            w.day.isoformat(),
            "" if w.bodyweight is None else f"{w.bodyweight:g}",
            describe_exercises(w),
        ]
        for w in workouts
    ]
    click.echo(format_table(["ID", "Date", "BW", "Exercises"], rows))


@click.command()
@click.argument("workout_id")
@click.pass_context
@async_command
async def show(ctx, workout_id):
    """Show a single workout."""
    ensure_initialized(ctx)

    async with workout_data(ctx) as service:
        try:
            record = await service.get_by_id(workout_id)
        except DataAccessError as e:
            echo_error(str(e))
            ctx.exit(1)

    if record is None:
        echo_error(f"Workout {workout_id} not found.")
        ctx.exit(1)

    echo_workout(record)


@click.command()
@click.argument("workout_id")
@click.option(
    "--date",
    "workout_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="New workout date",
)
@click.option("--bodyweight", "-b", type=float, help="New bodyweight")
@click.option(
    "--exercise",
    "-e",
    "exercises",
    multiple=True,
    callback=_exercise_callback,
    help="Replace all exercises; repeat for each exercise",
)
@click.pass_context
@async_command
async def edit(ctx, workout_id, workout_date, bodyweight, exercises):
    """Edit a workout.

    Only the given fields change. Passing any --exercise replaces the
    whole exercise list.
    """
    ensure_initialized(ctx)

    async with workout_data(ctx) as service:
        try:
            record = await service.get_by_id(workout_id)
            if record is None:
                echo_error(f"Workout {workout_id} not found.")
                ctx.exit(1)

            changes = {}
            if workout_date:
                changes["date"] = workout_date.date()
            if bodyweight is not None:
                changes["bodyweight"] = bodyweight
            if exercises:
                changes["exercises"] = list(exercises)
            record = replace(record, **changes)

            await service.update(workout_id, record)
        except DataAccessError as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success(f"Updated workout {workout_id}")


@click.command()
@click.argument("workout_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, workout_id, yes):
    """Delete a workout."""
    ensure_initialized(ctx)

    if not yes:
        click.confirm(f"Delete workout {workout_id}?", abort=True)

    async with workout_data(ctx) as service:
        try:
            await service.delete(workout_id)
        except DataAccessError as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success(f"Deleted workout {workout_id}")

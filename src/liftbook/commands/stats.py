"""Workout statistics command."""

import click

from ..services.stats import bodyweight_series, personal_records, summarize
from .base import async_command, echo_info, ensure_initialized, format_table, workout_data


@click.command()
@click.option("--bodyweight", "show_bodyweight", is_flag=True, help="Also list bodyweight over time")
@click.pass_context
@async_command
async def stats(ctx, show_bodyweight: bool):
    """Show training statistics and personal records.

    Personal records are the best weight x reps set per exercise. Exercise
    names are matched ignoring case and surrounding spaces.
    """
    ensure_initialized(ctx)

    async with workout_data(ctx) as service:
        workouts = await service.list()

    summary = summarize(workouts)
    if summary is None:
        echo_info("No workouts recorded yet.")
        return

    click.echo()
    click.echo(click.style("Summary", bold=True))
    click.echo("=" * 50)
    click.echo(f"Workouts:          {summary.total_workouts}")
    click.echo(f"Exercises logged:  {summary.total_exercises}")
    click.echo(f"Total volume:      {summary.total_volume:g}")
    click.echo(f"Avg per workout:   {summary.average_exercises_per_workout}")
    click.echo(f"Most frequent:     {summary.most_frequent_exercise}")
    click.echo(
        f"Date range:        {summary.first_date.date()} to {summary.last_date.date()}"
    )

    records = personal_records(workouts)
    if records:
        click.echo()
        click.echo(click.style("Personal records", bold=True))
        rows = [
            [pr.exercise, str(pr.weight), str(pr.reps), pr.date.date().isoformat()]
            for _, pr in sorted(records.items())
        ]
        click.echo(format_table(["Exercise", "Weight", "Reps", "Date"], rows))

    if show_bodyweight:
        series = bodyweight_series(workouts)
        click.echo()
        click.echo(click.style("Bodyweight", bold=True))
        if not series:
            echo_info("No bodyweight recorded.")
        for day, weight in series:
            click.echo(f"  {day.date().isoformat()}  {weight:g}")

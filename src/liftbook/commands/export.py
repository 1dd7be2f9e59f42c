"""Export and import commands."""

from pathlib import Path

import click

from ..errors import DataAccessError, ImportValidationError
from ..services.export import (
    default_export_filename,
    export_csv,
    export_json,
    parse_import,
)
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    store_label,
    workout_data,
)


@click.command()
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="json",
    help="Output format",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write to this file (default: liftbook-workouts-<date>.<format>)",
)
@click.option("--stdout", is_flag=True, help="Print instead of writing a file")
@click.pass_context
@async_command
async def export(ctx, fmt: str, output: Path | None, stdout: bool):
    """Export workouts as CSV or JSON.

    Examples:
        # JSON backup in the current directory
        liftbook export

        # CSV to a chosen file
        liftbook export -f csv -o workouts.csv
    """
    ensure_initialized(ctx)

    async with workout_data(ctx) as service:
        workouts = await service.list()

    try:
        content = export_csv(workouts) if fmt == "csv" else export_json(workouts)
    except ValueError as e:
        echo_error(str(e))
        ctx.exit(1)

    if stdout:
        click.echo(content, nl=False)
        return

    output = output or Path(default_export_filename(fmt))
    output.write_text(content, encoding="utf-8")
    echo_success(f"Exported {len(workouts)} workouts to {output}")


@click.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def import_data(ctx, file: Path, yes: bool):
    """Import workouts from a JSON export.

    Signed out, the import replaces every workout stored on this device.
    Signed in, workouts are added to your cloud log and duplicates skipped.
    """
    ensure_initialized(ctx)

    try:
        records = parse_import(file.read_text(encoding="utf-8"))
    except ImportValidationError as e:
        echo_error(str(e))
        ctx.exit(1)

    async with workout_data(ctx) as service:
        if not service.authenticated and not yes:
            echo_warning("This will replace all workouts stored on this device.")
            click.confirm("Continue?", abort=True)

        try:
            result = await service.import_records(records)
        except DataAccessError as e:
            echo_error(str(e))
            ctx.exit(1)
        label = store_label(service)

    echo_success(result.message)
    echo_info(f"Workouts are stored on {label}")

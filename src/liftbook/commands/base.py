"""Shared CLI utilities."""

import asyncio
from contextlib import asynccontextmanager
from functools import wraps
from pathlib import Path

import click

from ..config import get_data_dir, get_db_path
from ..services.workout_data import WorkoutDataService, open_workout_data


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def data_dir_from(ctx: click.Context) -> Path:
    """Get the data directory chosen on the command line."""
    obj = ctx.find_root().obj or {}
    return get_data_dir(obj.get("data_dir"))


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    db_path = get_db_path(data_dir_from(ctx))
    if not db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'liftbook init' first."
        )
        ctx.exit(1)


@asynccontextmanager
async def workout_data(ctx: click.Context):
    """Open the workout data service for the current session.

    Restoring a saved login migrates any local workouts before the
    service is handed out.
    """
    service, _provider = await open_workout_data(data_dir_from(ctx))
    try:
        if service.last_sync and service.last_sync.synced:
            echo_info(service.last_sync.message)
        if service.error:
            echo_warning(service.error)
        yield service
        await service.settled()
    finally:
        service.close()


def store_label(service: WorkoutDataService) -> str:
    """Describe where workouts are being stored."""
    if service.authenticated:
        return f"cloud ({service.user_id})"
    return "this device"


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    # Calculate column widths
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = []

    header_line = ""
    for i, h in enumerate(headers):
        header_line += h.ljust(widths[i] + padding)
    lines.append(header_line.rstrip())

    sep_line = ""
    for w in widths:
        sep_line += "-" * w + " " * padding
    lines.append(sep_line.rstrip())

    for row in rows:
        row_line = ""
        for i, cell in enumerate(row):
            row_line += str(cell).ljust(widths[i] + padding)
        lines.append(row_line.rstrip())

    return "\n".join(lines)

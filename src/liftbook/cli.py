"""CLI entry point for liftbook."""

import logging
from pathlib import Path

import click

from .commands import (
    add,
    delete,
    edit,
    export,
    import_data,
    init,
    list_workouts,
    login,
    logout,
    serve,
    show,
    stats,
    whoami,
)


@click.group()
@click.version_option(version="0.1.0", prog_name="liftbook")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="LIFTBOOK_DATA_DIR",
    help="Directory holding liftbook data",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, data_dir: Path | None, verbose: bool):
    """liftbook: a personal workout log.

    Workouts are kept on this device until you sign in. On login they are
    moved to your cloud log, skipping any that are already there.

    Example usage:

        # Initialize the project
        liftbook init

        # Record a workout
        liftbook add -b 80 -e Squat:100x5 -e "Bench Press:70x8"

        # Sign in and sync
        liftbook login alice

        # Review progress
        liftbook list
        liftbook stats
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir


# Register commands
main.add_command(init)
main.add_command(add)
main.add_command(list_workouts)
main.add_command(show)
main.add_command(edit)
main.add_command(delete)
main.add_command(login)
main.add_command(logout)
main.add_command(whoami)
main.add_command(stats)
main.add_command(export)
main.add_command(import_data)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()

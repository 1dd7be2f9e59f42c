"""Initialize project command."""

import click

from ..config import get_db_path
from ..db import init_db
from .base import async_command, data_dir_from, echo_info, echo_success


@click.command()
@click.pass_context
@async_command
async def init(ctx):
    """Initialize the liftbook data directory and database.

    This creates the data directory and the SQLite database backing the
    cloud workout log.
    """
    data_dir = data_dir_from(ctx)
    db_path = get_db_path(data_dir)

    echo_info(f"Initializing liftbook in {data_dir}")

    await init_db(db_path)
    echo_success("Database initialized")

    click.echo()
    click.echo("liftbook is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Record a workout:")
    click.echo('     liftbook add -b 80 -e Squat:100x5 -e "Bench Press:70x8"')
    click.echo()
    click.echo("  2. Sign in to keep your log in the cloud:")
    click.echo("     liftbook login <user-id>")

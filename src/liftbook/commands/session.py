"""Login session commands."""

import click

from ..config import get_local_storage_dir
from ..db.kv import FileKeyValueStorage
from ..services.auth import SessionFileProvider
from .base import (
    async_command,
    data_dir_from,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    store_label,
    workout_data,
)


@click.command()
@click.argument("user_id")
@click.pass_context
@async_command
async def login(ctx, user_id):
    """Sign in and move workouts from this device to the cloud.

    USER_ID is the stable id issued by your identity provider. Workouts
    recorded while signed out are copied to your cloud log once per login;
    ones already there are skipped.
    """
    ensure_initialized(ctx)

    async with workout_data(ctx) as service:
        if service.user_id == user_id:
            echo_info(f"Already signed in as {user_id}")
            return

        await service.provider.sign_in(user_id)

        if service.error:
            echo_warning(service.error)
        elif service.last_sync:
            echo_info(service.last_sync.message)
        echo_success(f"Signed in as {user_id}")


@click.command()
@click.pass_context
@async_command
async def logout(ctx):
    """Sign out; new workouts are stored on this device again."""
    ensure_initialized(ctx)

    storage = FileKeyValueStorage(get_local_storage_dir(data_dir_from(ctx)))
    provider = SessionFileProvider(storage)
    user_id = provider.stored_user
    if user_id is None:
        echo_info("Not signed in.")
        return

    await provider.sign_out()
    echo_success(f"Signed out {user_id}")


@click.command()
@click.pass_context
@async_command
async def whoami(ctx):
    """Show the signed-in user and where workouts are stored."""
    ensure_initialized(ctx)

    async with workout_data(ctx) as service:
        if service.authenticated:
            click.echo(f"Signed in as {service.user_id}")
        else:
            click.echo("Not signed in")
        click.echo(f"Workouts are stored on {store_label(service)}")

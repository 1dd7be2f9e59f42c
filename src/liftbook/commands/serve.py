"""Web server command."""

import click

from .base import data_dir_from, ensure_initialized


@click.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind to (default: 8000)")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int):
    """Start the JSON API server.

    Serves the workout log over HTTP on the specified host and port.

    Examples:

        # Start on default port (8000)
        liftbook serve

        # Expose to network (all interfaces)
        liftbook serve --host 0.0.0.0
    """
    ensure_initialized(ctx)

    import uvicorn

    from ..web import create_app

    click.echo()
    click.echo(click.style("Starting liftbook API server...", fg="green"))
    click.echo()
    click.echo(f"  Local:   http://{host}:{port}")
    if host == "0.0.0.0":
        import socket
        hostname = socket.gethostname()
        try:
            local_ip = socket.gethostbyname(hostname)
            click.echo(f"  Network: http://{local_ip}:{port}")
        except socket.gaierror:
            pass
    click.echo()
    click.echo("Press Ctrl+C to stop the server.")
    click.echo()

    app = create_app(data_dir_from(ctx))

    uvicorn.run(app, host=host, port=port)

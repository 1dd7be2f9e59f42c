"""FastAPI application for the liftbook JSON API."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from ..services.workout_data import open_workout_data
from .routers import session, stats, workouts


def create_app(data_dir: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the workout stores on startup and close them on shutdown."""
        service, provider = await open_workout_data(data_dir)
        app.state.service = service
        app.state.auth = provider
        yield
        service.close()
        service.remote_store.close()

    app = FastAPI(
        title="liftbook",
        description="Personal workout log with cloud sync",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(workouts.router)
    app.include_router(session.router)
    app.include_router(stats.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": "0.1.0"}

    return app

"""Request dependencies shared by the API routers."""

from fastapi import Request

from ..services.workout_data import WorkoutDataService


def get_service(request: Request) -> WorkoutDataService:
    """Get the workout data service from app state."""
    return request.app.state.service

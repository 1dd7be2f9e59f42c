"""Workout CRUD routes."""

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from ...errors import DataAccessError, PermissionDeniedError, WorkoutNotFoundError
from ...models.workout import WorkoutRecord
from ..deps import get_service

router = APIRouter(prefix="/workouts", tags=["workouts"])


def error_response(error: Exception) -> JSONResponse:
    """Map a data error to an HTTP response."""
    status_code = 502
    if isinstance(error.__cause__, WorkoutNotFoundError):
        status_code = 404
    elif isinstance(error.__cause__, PermissionDeniedError):
        status_code = 403
    return JSONResponse({"error": str(error)}, status_code=status_code)


def parse_workout(payload: dict) -> WorkoutRecord | JSONResponse:
    try:
        return WorkoutRecord.from_dict(payload, id=None)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=422)


@router.get("")
async def list_workouts(request: Request):
    """List workouts, newest first."""
    service = get_service(request)
    await service.settled()
    workouts = await service.list()
    return {
        "workouts": [w.to_dict() for w in workouts],
        "authenticated": service.authenticated,
        "error": service.error or None,
    }


@router.post("", status_code=201)
async def create_workout(request: Request, payload: dict = Body(...)):
    """Record a new workout."""
    record = parse_workout(payload)
    if isinstance(record, JSONResponse):
        return record

    try:
        created = await get_service(request).create(record)
    except DataAccessError as e:
        return error_response(e)
    return created.to_dict()


@router.get("/{workout_id}")
async def get_workout(request: Request, workout_id: str):
    """Get a single workout."""
    try:
        record = await get_service(request).get_by_id(workout_id)
    except DataAccessError as e:
        return error_response(e)

    if record is None:
        return JSONResponse({"error": "Workout not found"}, status_code=404)
    return record.to_dict()


@router.put("/{workout_id}")
async def update_workout(request: Request, workout_id: str, payload: dict = Body(...)):
    """Replace a workout."""
    record = parse_workout(payload)
    if isinstance(record, JSONResponse):
        return record

    try:
        updated = await get_service(request).update(workout_id, record)
    except DataAccessError as e:
        return error_response(e)
    return updated.to_dict()


@router.delete("/{workout_id}")
async def delete_workout(request: Request, workout_id: str):
    """Delete a workout."""
    try:
        deleted_id = await get_service(request).delete(workout_id)
    except DataAccessError as e:
        return error_response(e)
    return {"status": "deleted", "id": deleted_id}

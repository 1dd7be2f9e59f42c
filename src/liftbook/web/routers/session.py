"""Login session routes."""

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from ..deps import get_service

router = APIRouter(prefix="/session", tags=["session"])


@router.get("")
async def session_state(request: Request):
    """Current user and migration state."""
    service = get_service(request)
    return {
        "user_id": service.user_id,
        "sync_state": service.session.state.value,
        "last_sync": service.last_sync.to_dict() if service.last_sync else None,
        "error": service.error or None,
    }


@router.post("")
async def login(request: Request, payload: dict = Body(...)):
    """Sign in; local workouts are migrated before this returns."""
    user_id = str(payload.get("user_id") or "").strip()
    if not user_id:
        return JSONResponse({"error": "user_id is required"}, status_code=422)

    service = get_service(request)
    await request.app.state.auth.sign_in(user_id)
    return {
        "user_id": service.user_id,
        "sync_state": service.session.state.value,
        "sync": service.last_sync.to_dict() if service.last_sync else None,
        "error": service.error or None,
    }


@router.delete("")
async def logout(request: Request):
    """Sign out; workouts are stored locally again."""
    await request.app.state.auth.sign_out()
    return {"status": "signed_out"}

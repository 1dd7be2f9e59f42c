"""Statistics, export and import routes."""

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse, Response

from ...errors import DataAccessError, ImportValidationError
from ...services.export import (
    default_export_filename,
    export_csv,
    export_json,
    parse_import_data,
)
from ...services.stats import bodyweight_series, personal_records, summarize
from ..deps import get_service

router = APIRouter(tags=["stats"])

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json",
}


@router.get("/stats")
async def workout_stats(request: Request):
    """Summary, personal records and bodyweight history."""
    service = get_service(request)
    await service.settled()
    workouts = await service.list()
    summary = summarize(workouts)
    return {
        "summary": summary.to_dict() if summary else None,
        "personal_records": {
            name: pr.to_dict() for name, pr in personal_records(workouts).items()
        },
        "bodyweight": [
            {"date": day.date().isoformat(), "bodyweight": weight}
            for day, weight in bodyweight_series(workouts)
        ],
    }


@router.get("/export/{fmt}")
async def export_workouts(request: Request, fmt: str):
    """Download workouts as CSV or JSON."""
    if fmt not in MEDIA_TYPES:
        return JSONResponse({"error": f"Unsupported format: {fmt}"}, status_code=404)

    service = get_service(request)
    await service.settled()
    workouts = await service.list()
    try:
        content = export_csv(workouts) if fmt == "csv" else export_json(workouts)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=404)

    filename = default_export_filename(fmt)
    return Response(
        content,
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import")
async def import_workouts(request: Request, payload=Body(...)):
    """Import a JSON export or an array of workouts."""
    try:
        records = parse_import_data(payload)
    except ImportValidationError as e:
        return JSONResponse({"error": str(e)}, status_code=422)

    try:
        result = await get_service(request).import_records(records)
    except DataAccessError as e:
        return JSONResponse({"error": str(e)}, status_code=502)
    return result.to_dict()

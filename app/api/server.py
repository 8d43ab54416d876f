from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.models.server import ServerSnapshot
from app.services import server_monitor

router = APIRouter()


@router.get(
    "/server-status",
    response_model=ServerSnapshot,
    response_model_exclude_none=True,
    summary="Server health snapshot",
)
async def server_status():
    """
    Return the current server health snapshot.

    If the collector fails as a whole, a zero-valued snapshot with status
    'error' and errorCode 500 is returned with HTTP 500, so the dashboard
    always receives the same structure.
    """
    try:
        return server_monitor.get_server_snapshot()
    except server_monitor.CollectionError:
        snapshot = server_monitor.degraded_snapshot()
        return JSONResponse(
            status_code=500,
            content=snapshot.model_dump(mode="json", by_alias=True, exclude_none=True),
        )

from fastapi import APIRouter

router = APIRouter()


@router.get("/", summary="Liveness")
async def health() -> dict:
    """Liveness probe; does not query the operating system."""
    return {"status": "ok"}

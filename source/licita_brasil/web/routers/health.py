"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Status dictionary with the current UTC time.
    """
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

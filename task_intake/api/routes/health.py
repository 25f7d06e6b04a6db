"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

from task_intake import __version__

router = APIRouter()

# Track startup time
_startup_time = datetime.now(timezone.utc)


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if the service is running. No authentication.
    """
    now = datetime.now(timezone.utc)
    return {
        "status": "healthy",
        "service": "task-intake",
        "version": __version__,
        "timestamp": now.isoformat(),
        "uptime_seconds": (now - _startup_time).total_seconds(),
    }


@router.get("/live")
async def liveness_check():
    """Liveness check. Returns 200 if the process is alive."""
    return {"status": "alive"}

"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request

from storysmith import __version__
from storysmith.api.dependencies import get_data_service
from storysmith.services.data_service import DataService

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Basic health check for load balancers."""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health/detailed")
async def health_detailed(
    request: Request,
    data_service: DataService = Depends(get_data_service),
) -> dict[str, object]:
    """Detailed health check with component-level status.

    Vendor credentials are reported as configured or missing, never
    checked against the vendor (that would cost a relay call).
    """
    settings = request.app.state.settings
    db_healthy = await data_service.check_connection()

    components = {
        "database": {
            "status": "connected" if db_healthy else "disconnected"
        },
        "openai": {
            "status": (
                "configured" if settings.openai_api_key else "missing_key"
            )
        },
        "gemini": {
            "status": (
                "configured" if settings.gemini_api_key else "missing_key"
            )
        },
    }

    all_healthy = db_healthy and any(
        c["status"] == "configured"
        for name, c in components.items()
        if name != "database"
    )

    return {
        "status": "healthy" if all_healthy else "degraded",
        "version": __version__,
        "components": components,
        "timestamp": datetime.now(UTC).isoformat(),
    }

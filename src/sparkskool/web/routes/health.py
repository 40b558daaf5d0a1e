"""Health check endpoint."""

from fastapi import APIRouter

from sparkskool import __version__
from sparkskool.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check API health status."""
    return HealthResponse(status="ok", version=__version__)

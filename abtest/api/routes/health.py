"""Health check endpoint."""

from fastapi import APIRouter

from abtest.api.config import get_api_settings
from abtest.api.schemas.experiments import HealthResponse

router = APIRouter(tags=["health"])
api_settings = get_api_settings()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=api_settings.api_version)

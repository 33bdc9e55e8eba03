"""Health check API endpoint."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dig_runner.api.routes import RouteDependencies, get_dependencies

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    dig_available: bool
    timeout_strategy: str


@router.get("/healthcheck", response_model=HealthResponse)
async def health_check(
    deps: RouteDependencies = Depends(get_dependencies),
) -> HealthResponse:
    """
    Health check endpoint (no auth required).

    Reports whether dig can be found and how timeouts are enforced.
    """
    runner = deps.runner
    dig_available = runner.which(deps.settings.dig_binary) is not None

    return HealthResponse(
        status="ok" if dig_available else "degraded",
        dig_available=dig_available,
        timeout_strategy=runner.strategy.name,
    )

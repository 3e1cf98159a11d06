"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from variant_beacon import __version__
from variant_beacon.platform.config import get_beacon_config
from variant_beacon.platform.errors import InvalidConfigError
from variant_beacon.platform.logging import get_logger
from variant_beacon.transport.http.schemas import HealthResponse

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


def _health(status: str) -> HealthResponse:
    return HealthResponse(
        status=status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check - is the service running?"""
    return _health("healthy")


@router.get(
    "/health/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def readiness_check() -> HealthResponse | JSONResponse:
    """Readiness check - is the beacon configured to answer queries?

    BigQuery itself is not probed; each query opens its own client.
    """
    try:
        get_beacon_config()
    except InvalidConfigError as exc:
        logger.warning("Beacon not ready", error=exc.detail)
        return JSONResponse(
            status_code=503,
            content=_health("misconfigured").model_dump(mode="json"),
        )
    return _health("healthy")

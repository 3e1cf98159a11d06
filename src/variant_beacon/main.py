"""FastAPI application entrypoint."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import cast
from uuid import uuid4

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response

from variant_beacon import __version__
from variant_beacon.platform.config import get_beacon_config, get_settings
from variant_beacon.platform.context import request_id_ctx
from variant_beacon.platform.errors import (
    AppError,
    InvalidConfigError,
    app_error_handler,
    http_exception_handler,
)
from variant_beacon.platform.logging import get_logger, setup_logging
from variant_beacon.transport.http.routers import beacon, health

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan handler."""
    settings = get_settings()

    # Startup
    setup_logging()
    logger.info(
        "Starting Variant Beacon",
        version=__version__,
        env=settings.api_env,
        auth_mode=settings.beacon_auth_mode,
    )
    try:
        config = get_beacon_config()
    except InvalidConfigError as exc:
        # Queries answer 412 until the environment is fixed.
        logger.error("Beacon configuration is invalid", error=exc.detail)
    else:
        logger.info("Beacon table", project=config.project_id, table=config.table_id)

    yield

    # Shutdown
    logger.info("Shutting down Variant Beacon")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Variant Beacon",
        description="GA4GH Beacon backed by a BigQuery variants table",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.api_docs_enabled else None,
        redoc_url="/redoc" if settings.api_docs_enabled else None,
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(
        request: StarletteRequest,
        call_next: Callable[[StarletteRequest], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request_id_ctx.set(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # Exception handlers
    app.add_exception_handler(
        AppError,
        cast(
            Callable[[StarletteRequest, Exception], Awaitable[Response]],
            app_error_handler,
        ),
    )
    app.add_exception_handler(
        StarletteHTTPException,
        cast(
            Callable[[StarletteRequest, Exception], Awaitable[Response]],
            http_exception_handler,
        ),
    )

    # Routers
    app.include_router(health.router)
    app.include_router(beacon.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "variant_beacon.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=bool(settings.is_development),
    )

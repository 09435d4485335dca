"""FastAPI application factory for blobworks.

Creates the application with:
- Blob storage endpoints under the configured base route
- Health probes and the Prometheus metrics endpoint
- Lifecycle management for connectors and the entry store
- Result/Message error handling for API and domain errors
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from blobworks.api.errors import (
    ApiError,
    api_exception_handler,
    blob_storage_exception_handler,
    generic_exception_handler,
)
from blobworks.api.middleware import CorrelationMiddleware
from blobworks.api.routers import blob_storage, health
from blobworks.api.routers import metrics as metrics_router
from blobworks.config import Settings, settings
from blobworks.errors import BlobStorageError
from blobworks.factory import ServiceComponents, build_components
from blobworks.observability import configure_logging
from blobworks.observability.metrics import MetricsMiddleware, get_metrics

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup:
    - Configure structured logging
    - Initialize Prometheus metrics
    - Build the service from settings, unless components were injected
    - Bootstrap the entry store and connectors

    On shutdown:
    - Close connector clients and the entry store
    """
    app_settings: Settings = app.state.settings
    configure_logging(
        json_format=app_settings.env != "dev",
        level=app_settings.log_level,
    )
    if app_settings.enable_metrics:
        get_metrics()

    logger.info(f"Starting blobworks ({app_settings.env})")
    components: ServiceComponents | None = app.state.components
    owned = components is None
    if components is None:
        components = build_components(app_settings)
        app.state.components = components

    app.state.bootstrap_results = await components.bootstrap()
    app.state.blob_storage_service = components.service
    app.state.entry_storage = components.entry_storage
    logger.info("blobworks startup complete")

    yield

    logger.info("Shutting down blobworks")
    if owned:
        await components.close()
    logger.info("blobworks shutdown complete")


def create_app(
    app_settings: Settings | None = None,
    components: ServiceComponents | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use, defaults to the environment's
        components: Prebuilt service components; built from settings at
            startup when omitted

    Returns:
        The configured application
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="blobworks",
        description="Content-addressed blob storage with JSON-LD metadata",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = app_settings
    app.state.components = components
    if components is not None:
        app.state.blob_storage_service = components.service
        app.state.entry_storage = components.entry_storage

    # Order: Metrics (outer) -> Correlation (inner)
    app.add_middleware(CorrelationMiddleware)
    if app_settings.enable_metrics:
        app.add_middleware(MetricsMiddleware, base_route=app_settings.base_route)

    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_exception_handler))
    app.add_exception_handler(
        BlobStorageError, cast(ExceptionHandler, blob_storage_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    if app_settings.enable_metrics:
        app.include_router(metrics_router.router)
    app.include_router(blob_storage.router, prefix=app_settings.base_route.rstrip("/"))

    return app

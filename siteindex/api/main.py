"""
FastAPI Application Factory

Creates and configures FastAPI application
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from siteindex.api.error_handlers import register_exception_handlers
from siteindex.core.config import settings
from siteindex.core.container import Container, build_container
from siteindex.core.logging import configure_logging, get_logger, get_metric
from siteindex.routers import indexing

logger = get_logger(__name__)


def create_app(container: Container | None = None) -> FastAPI:
    """
    Create FastAPI application

    Args:
        container: Pre-built dependency container. When omitted, one is
            built from settings at startup and closed at shutdown.

    Usage:
        app = create_app()
        uvicorn.run(app, host="0.0.0.0", port=8000)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Startup: configure logging, build the container
        Shutdown: close clients and database connections
        """
        configure_logging()
        logger.info("application_startup", environment=settings.environment)

        owns_container = container is None
        app.state.container = container or build_container(settings)

        # Load local models before the first request
        embedding_client = app.state.container.embedding_client
        if hasattr(embedding_client, "warmup"):
            await embedding_client.warmup()

        yield

        logger.info("application_shutdown")
        if owns_container:
            await app.state.container.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Content indexing and vector-store synchronization",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    if container is not None:
        app.state.container = container

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(indexing.router, prefix=settings.api_v1_prefix)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        return {
            "status": "ok",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "reindex_runs": {
                "completed": get_metric("reindex_runs", outcome="completed"),
                "failed": get_metric("reindex_runs", outcome="failed"),
            },
        }

    logger.info("fastapi_app_created", routes=len(app.routes))

    return app

"""Main FastAPI application for the Relay Proxy API."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .dependencies import get_upstream_client
from .errors import register_exception_handlers
from .errors.problem_details import ServiceUnavailableError
from .middleware import RequestLoggingMiddleware
from .routes import resources_router
from .upstream import UpstreamClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Relay Proxy API"
SERVICE_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting {SERVICE_NAME}")
    settings = get_settings()

    # Configure logging level from settings
    logging.getLogger().setLevel(getattr(logging, settings.log_level))

    owns_client = getattr(app.state, "upstream_client", None) is None
    if owns_client:
        app.state.upstream_client = UpstreamClient.from_settings(settings)
        logger.info(f"Upstream client created for {settings.upstream_base_url}")

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")
    if owns_client:
        try:
            await app.state.upstream_client.close()
            logger.info("Upstream connections closed")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")
        app.state.upstream_client = None


def create_app(upstream_client: Optional[UpstreamClient] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        upstream_client: Client to use instead of one built from settings
    """
    settings = get_settings()

    app = FastAPI(
        title=SERVICE_NAME,
        description="Cursor-based connections and batched link resolution over a page-oriented REST API",
        version=SERVICE_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.upstream_client = upstream_client

    app.add_middleware(
        RequestLoggingMiddleware,
        skip_paths=["/health", "/live", "/docs", "/redoc", "/openapi.json"]
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app)

    # Register API routes with version prefix
    app.include_router(resources_router, prefix="/v1")

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request) -> Dict[str, Any]:
        """Health check endpoint with upstream connectivity test."""
        client = get_upstream_client(request)
        if not await client.ping():
            raise ServiceUnavailableError(
                detail="Upstream API is not reachable",
                upstream=client.base_url
            )

        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "upstream": "connected"
        }

    @app.get("/live", tags=["Health"])
    async def liveness_check() -> Dict[str, str]:
        """Liveness check endpoint."""
        return {
            "status": "alive",
            "service": SERVICE_NAME
        }

    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, str]:
        """Root endpoint with API information."""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "relay_proxy.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )

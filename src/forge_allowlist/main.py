"""
Forge Allowlist - Main Entry Point

Provides an HTTP service for computing allowlist roots, generating proofs
and verifying proofs.
"""

import signal
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app
from starlette.responses import Response

from forge_allowlist.api.v1 import router as api_v1_router
from forge_allowlist.core.config import settings
from forge_allowlist.core.logging import setup_logging
from forge_allowlist.metrics import get_allowlist_metrics
from forge_allowlist.services.allowlist_service import AllowlistService

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(
        "Starting Forge Allowlist Service",
        version=settings.VERSION,
        environment=settings.ENV,
        algorithm=settings.HASH_ALGORITHM.value,
        odd_layer_policy=settings.ODD_LAYER_POLICY.value,
        sort_leaves=settings.SORT_LEAVES,
    )

    app.state.allowlist_service = AllowlistService(
        options=settings.tree_options,
        deduplicate=settings.DEDUPLICATE_ADDRESSES,
    )

    if settings.METRICS_ENABLED:
        get_allowlist_metrics().set_service_info(
            version=settings.VERSION,
            environment=settings.ENV,
            algorithm=settings.HASH_ALGORITHM.value,
            odd_layer_policy=settings.ODD_LAYER_POLICY.value,
        )

    yield

    logger.info("Forge Allowlist Service shutdown complete")


def create_application() -> FastAPI:
    """Create FastAPI application."""
    app = FastAPI(
        title="Forge Allowlist API",
        description="Merkle allowlist roots and inclusion proofs",
        version=settings.VERSION,
        docs_url="/docs" if settings.ENV != "production" else None,
        redoc_url="/redoc" if settings.ENV != "production" else None,
        lifespan=lifespan,
    )

    app.include_router(api_v1_router, prefix="/api/v1")

    if settings.METRICS_ENABLED:
        app.mount("/metrics", make_asgi_app())

    @app.get("/health")
    async def health() -> dict:
        """Overall service health check."""
        return {
            "status": "healthy",
            "service": "forge-allowlist",
            "version": settings.VERSION,
            "algorithm": settings.HASH_ALGORITHM.value,
            "odd_layer_policy": settings.ODD_LAYER_POLICY.value,
            "sort_leaves": settings.SORT_LEAVES,
        }

    @app.get("/live")
    async def live() -> Response:
        """Liveness probe for Kubernetes."""
        return Response(status_code=200, content="alive")

    return app


app = create_application()


def handle_signal(signum: int, frame: object) -> None:
    """Handle shutdown signals."""
    logger.info(f"Received signal {signum}, initiating shutdown")
    sys.exit(0)


def main() -> None:
    """Run the service."""
    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    logger.info(
        "Starting Forge Allowlist service",
        host=settings.HOST,
        port=settings.PORT,
    )

    uvicorn.run(
        "forge_allowlist.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()

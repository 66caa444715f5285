"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from payrelay.api.router import api_router
from payrelay.config import settings
from payrelay.core.exceptions import AppException
from payrelay.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from payrelay.services.payment_service import build_callback_url, is_public_server_url

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    callback_url = build_callback_url(settings.server_url, settings.api_prefix)
    logger.info(f"{settings.app_name} {settings.app_version} starting ({settings.environment})")
    logger.info(f"Payment status callback URL: {callback_url}")

    if not settings.client_id or not settings.client_secret:
        logger.warning("CLIENT_ID and CLIENT_SECRET must be set to create payments")
    if not is_public_server_url(settings.server_url):
        logger.warning(
            "SERVER_URL must be publicly accessible (not localhost); "
            "payment creation will be refused. Expose the server with e.g. "
            f"`ngrok http {settings.port}` and set SERVER_URL to the HTTPS URL"
        )
    if not settings.callback_secret:
        logger.warning("CALLBACK_SECRET is not set; status callbacks are not authenticated")

    yield

    logger.info(f"{settings.app_name} stopped")


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Backend relay for Dapp Portal payments",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Exception handlers
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle custom application exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=exc.headers,
        )

    # Middleware (order matters - first added = last executed)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Include API routes
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get("/")
    async def root() -> dict:
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "payment_timeout_seconds": settings.payment_timeout_seconds,
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "payrelay.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

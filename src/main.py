"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory (create_app) so tests can build an app
against their own settings.

For local development:
    uvicorn src.main:app --reload

For production:
    gunicorn src.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.dependencies import check_admin_header, route_requires_admin
from .api.routes import admin, health, uploads, videos
from .config.settings import Settings, get_settings
from .core.catalog import CatalogError, UnauthorizedError, UpstreamUnavailableError
from .infrastructure.snowflake.client import SnowflakeConnectionError
from .infrastructure.storage.client import StorageError

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _is_json_decode_error(exc: RequestValidationError) -> bool:
    return any(error.get("type") == "json_invalid" for error in exc.errors())


def _describe_validation_error(exc: RequestValidationError) -> str:
    """First offending field, e.g. 'sizeBytes: Input should be a valid integer'."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "body: invalid JSON"
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location) or "body"
    return f"{field}: {first.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map errors to `{"error": ...}` JSON responses.

    Upstream failures are logged with full detail where they happen; the
    client only gets a generic message.
    """

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        if exc.status_code >= 500:
            logger.error(
                "Upstream failure",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "operation": getattr(exc, "operation", None),
                },
            )
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Undecodable bodies fail before require_admin runs
        if _is_json_decode_error(exc) and route_requires_admin(request):
            try:
                check_admin_header(request)
            except UnauthorizedError as auth_error:
                return _error(auth_error.status_code, auth_error.message)
        return _error(400, _describe_validation_error(exc))

    @app.exception_handler(SnowflakeConnectionError)
    @app.exception_handler(StorageError)
    async def adapter_error_handler(request: Request, exc: Exception):
        logger.error(
            "Adapter unavailable",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )
        return _error(502, UpstreamUnavailableError.public_message)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. The full error is
        logged server-side.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )
        return _error(500, "Internal server error")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Passing `settings` overrides the environment-derived settings for
    every dependency (used by tests).
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Video API starting",
            extra={
                "version": settings.api_version,
                "mock_mode": {
                    "snowflake": settings.snowflake_mock_mode,
                    "storage": settings.storage_mock_mode,
                },
            }
        )

        missing_fields = settings.validate_required_fields()
        if missing_fields:
            # Keep serving; the readiness probe reports the gap
            logger.error(
                "Missing required configuration",
                extra={"missing_fields": missing_fields}
            )

        yield

        logger.info("Video API shutting down")

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Video hosting API.

        ## Workflow

        1. **Get an upload target**: `POST /upload-target` (admin)
        2. **Upload the file** with a PUT straight to the returned URL
        3. **Record metadata**: `POST /videos` (admin) - starts unpublished
        4. **Publish**: `POST /video/{id}/publish` (admin)
        5. **Watch**: `GET /videos` (public) - each entry has a signed `url`

        ## Authentication

        Admin endpoints require the shared secret in the `X-Admin-Token`
        header (or an `adminToken` field in the JSON body).
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(uploads.router, tags=["Uploads"])
    app.include_router(videos.router, tags=["Videos"])
    app.include_router(admin.router, prefix="/admin", tags=["Admin"])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    register_exception_handlers(app)

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


# For debugging/development
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )

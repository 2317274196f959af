"""
CampFinder Backend — FastAPI Application Factory
==================================================

What:  Builds the FastAPI app: logging, lifespan, middleware, exception handlers
       and routers.
Who:   uvicorn (`uvicorn app.main:app`) and the test client.

Exception → response mapping (body is always ErrorResponse):
    ValidationError          400  validation_error
    RequestValidationError   400  validation_error   (body/params failed pydantic)
    AuthenticationError      401  not_authenticated
    AuthorizationError       403  forbidden
    NotFoundError            404  not_found
    FileStorageError         500  server_error
    DatabaseError            500  server_error        (message replaced, details logged)
    GeocodingError           503  geocoder_unavailable
    Exception                500  internal_server_error

Lifecycle:
    startup:   logging → config check (logged, not fatal) → upload directory
    shutdown:  dispose the engine's connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    FileStorageError,
    GeocodingError,
    NotFoundError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import bootcamps, health, uploads

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Root logger to stdout at LOG_LEVEL.

    Format: 2024-01-15T12:00:00 [INFO] app.services.bootcamp_service: Bootcamp created: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("CampFinder Backend %s starting up", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks and public reads still work.
        logger.error("Configuration error: %s", str(e))

    upload_path = settings.upload_config.upload_path
    upload_path.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", upload_path.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("CampFinder Backend shutting down")
    await dispose_engine()
    logger.info("Shutdown complete")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "success": False,
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to status codes and the shared error body.

    5xx responses never echo exception context; it is logged instead.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        messages = []
        for err in errors:
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), "; ".join(messages))
        return error_response(
            400,
            "validation_error",
            ", ".join(messages) or "Invalid request",
            {"errors": [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in errors]},
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return error_response(401, "not_authenticated", exc.message)

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        logger.info("[%s] Forbidden for role %s: %s", request_id_var.get(""), exc.role, request.url.path)
        return error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(GeocodingError)
    async def handle_geocoding_error(request: Request, exc: GeocodingError):
        logger.error("[%s] Geocoding error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
        return error_response(503, "geocoder_unavailable", exc.message, headers=headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="CampFinder API",
        description=(
            "Bootcamp directory: filtered and paginated listings, radius search by "
            "zipcode, publisher-managed bootcamps and photos."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → RateLimit → RequestLogging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(bootcamps.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


app = create_app()

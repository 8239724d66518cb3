"""
Swagger Manager Backend - FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires settings, the Database, artifact storage, the
       publisher and the services onto app.state, then registers middleware,
       exception handlers and routers.
Who:   uvicorn (`uvicorn swagger_manager.main:app`) and the test suite, which
       calls create_app() with an in-memory database and a temp directory.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │  ┌──────────────┐ ┌───────────────┐ ┌─────────────────┐  │
    │  │/api/projects │ │/api/endpoints │ │ /swagger-files  │  │
    │  └──────────────┘ └───────────────┘ │ /api-docs       │  │
    │                                     └─────────────────┘  │
    │  app.state: settings, database, artifact_storage,        │
    │             publisher, project_service, endpoint_service │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ Auth→401 │ Access→403 │ NotFound→404   │
    │  Persistence/Storage→500 │ Consistency→503               │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   logging, configuration check, artifact directory check,
               optional table creation
    Shutdown:  dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from swagger_manager import __version__
from swagger_manager.config import Settings, settings as default_settings
from swagger_manager.database import Database
from swagger_manager.exceptions import (
    AccessDeniedError,
    ArtifactNotFoundError,
    ArtifactStorageError,
    AuthenticationError,
    ConsistencyError,
    NotFoundError,
    PersistenceError,
    SwaggerManagerError,
    ValidationError,
)
from swagger_manager.middleware.logging import RequestLoggingMiddleware
from swagger_manager.middleware.request_id import RequestIDMiddleware, request_id_var
from swagger_manager.routes import endpoints, health, projects, swagger
from swagger_manager.services.artifact_publisher import ArtifactPublisher
from swagger_manager.services.artifact_storage import LocalArtifactStorage
from swagger_manager.services.endpoint_service import EndpointService
from swagger_manager.services.project_service import ProjectService
from swagger_manager.services.storage_base import ArtifactStorage

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Swagger Manager Backend %s starting up...", __version__)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health reports the broken dependency
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    if not await app.state.artifact_storage.health_check():
        logger.error("Artifact storage is not writable; Swagger files cannot be saved")

    if config.auto_create_tables:
        await app.state.database.create_all()
        logger.info("Database tables ensured (AUTO_CREATE_TABLES=true)")

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("API docs: http://%s:%d/docs", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Swagger Manager Backend shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and one error body format.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        AuthenticationError                      → 401
        AccessDeniedError                        → 403
        NotFoundError / ArtifactNotFoundError    → 404
        PersistenceError / ArtifactStorageError  → 500 (generic message)
        ConsistencyError                         → 503 + Retry-After
        SwaggerManagerError / Exception          → 500

    500-class bodies never contain internal context unless
    EXPOSE_ERROR_DETAILS is enabled; it is always logged server-side.
    """
    expose = app.state.settings.expose_error_details

    def internal_details(exc: SwaggerManagerError) -> Optional[Dict[str, Any]]:
        return exc.context if expose else None

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        first = errors[0] if errors else None
        message = "Invalid request"
        if first:
            message = f"{'.'.join(first['loc'])}: {first['msg']}"
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", message, {"errors": errors}),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body("authentication_required", exc.message, exc.context),
        )

    @app.exception_handler(AccessDeniedError)
    async def handle_access_denied(request: Request, exc: AccessDeniedError):
        return JSONResponse(
            status_code=403,
            content=_error_body("access_denied", exc.message, exc.context),
        )

    @app.exception_handler(ArtifactNotFoundError)
    async def handle_artifact_not_found(request: Request, exc: ArtifactNotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message, {"hint": exc.hint}),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error(
            "[%s] Persistence error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error",
                "An internal error occurred. Please try again later.",
                internal_details(exc),
            ),
        )

    @app.exception_handler(ArtifactStorageError)
    async def handle_artifact_storage_error(request: Request, exc: ArtifactStorageError):
        logger.error(
            "[%s] Artifact storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message, internal_details(exc)),
        )

    @app.exception_handler(ConsistencyError)
    async def handle_consistency_error(request: Request, exc: ConsistencyError):
        logger.error(
            "[%s] Consistency error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=503,
            content=_error_body(
                "service_unavailable",
                exc.message,
                {"retry_after": exc.retry_after},
            ),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(SwaggerManagerError)
    async def handle_application_error(request: Request, exc: SwaggerManagerError):
        logger.error(
            "[%s] Unhandled application error %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error",
                "An internal error occurred. Please try again later.",
                internal_details(exc),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = "not_found" if exc.status_code == 404 else "http_error"
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(error, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        details = {"error_type": type(exc).__name__, "error": str(exc)} if expose else None
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
                details,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    artifact_storage: Optional[ArtifactStorage] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:         Defaults to the environment-driven singleton
        database:         Defaults to Database.from_settings(settings)
        artifact_storage: Defaults to LocalArtifactStorage(settings.artifact_root)
    """
    config = settings or default_settings

    app = FastAPI(
        title="Swagger Manager API",
        description=(
            "Manage projects and their API endpoints; every change regenerates "
            "the project's OpenAPI 3 document, served as JSON and in Swagger UI."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Shared State ──────────────────────────────────────────────────────
    # Set here, not in the lifespan: ASGI test transports skip lifespan events
    storage = artifact_storage or LocalArtifactStorage(config.artifact_root)
    publisher = ArtifactPublisher(
        storage,
        server_url=config.swagger_server_url,
        document_version=config.document_version,
        retry_attempts=config.regen_retry_attempts,
        retry_min_wait=config.regen_retry_min_wait,
        retry_max_wait=config.regen_retry_max_wait,
    )
    app.state.settings = config
    app.state.database = database or Database.from_settings(config)
    app.state.artifact_storage = storage
    app.state.publisher = publisher
    app.state.project_service = ProjectService(publisher)
    app.state.endpoint_service = EndpointService(publisher)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware, principal_header=config.principal_header)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(projects.router)
    app.include_router(endpoints.router)
    app.include_router(swagger.router)
    app.include_router(health.router)

    @app.get("/", include_in_schema=False)
    async def index() -> Dict[str, str]:
        return {
            "service": "Swagger Manager API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# uvicorn entry point: swagger_manager.main:app
app = create_app()

"""TaskMaster API - Main Application Module.

This module initializes the FastAPI application with proper configuration,
middleware, routing, and lifecycle management for the task planning service.
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import ConfigValidator, settings
from app.core.container import ServiceContainer
from app.core.logging import configure_logging
from app.database import AsyncSessionLocal, engine
from models import Base

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def _error_body(request: Request, message: str, error_code: str, details=None) -> dict:
    return {
        "status": "error",
        "message": message,
        "error_code": error_code,
        "details": details,
        "timestamp": _timestamp(),
        "request_id": getattr(request.state, "request_id", None),
    }


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifecycle events."""
    logger.info(f"Starting {settings.app_name} {settings.version}")
    if settings.is_production:
        ConfigValidator.validate_required_settings(settings)

    # Development mode: Auto-create tables if they don't exist
    # Production: Use Alembic migrations (alembic upgrade head)
    if settings.is_development:
        logger.info("Development mode: creating/updating database tables")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    else:
        logger.info("Use 'alembic upgrade head' to manage the database schema")

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Hierarchical task planning with AI-assisted scheduling",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.services = ServiceContainer.build(settings)

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware."""
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, message, error_code, details),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Convert errors to JSON-serializable format
        errors = []
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", []) if part not in ("body", "query", "path")]
            error_dict = {
                "loc": loc,
                "msg": str(error.get("msg", "Validation error")),
                "type": error.get("type", "value_error"),
            }
            # Handle custom input if present
            if "input" in error:
                error_dict["input"] = str(error["input"])
            errors.append(error_dict)

        first = errors[0] if errors else {"loc": [], "msg": "Validation error"}
        field = ".".join(first["loc"])
        message = f"{field}: {first['msg']}" if field else first["msg"]

        return JSONResponse(
            status_code=400,
            content=_error_body(request, message, "VALIDATION_ERROR", errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        details = None if settings.is_production else {"error": str(exc)}
        return JSONResponse(
            status_code=500,
            content=_error_body(request, "Internal server error", "INTERNAL_ERROR", details),
        )


def setup_routers(app: FastAPI):
    """Configure application routers."""
    # Import routers
    from app.domains.ai.controller import router as ai_router
    from app.domains.analytics.controller import router as analytics_router
    from app.domains.category.controller import router as category_router
    from app.domains.cron.controller import router as cron_router
    from app.domains.notification.controller import router as notification_router
    from app.domains.scheduling.controller import router as scheduling_router
    from app.domains.task.controller import router as task_router
    from app.domains.user.controller import router as user_router

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check with database and AI gateway status."""
        db_status = "healthy"
        try:
            async with AsyncSessionLocal() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning(f"Database health check failed: {str(e)}")
            db_status = "unhealthy"

        gateway = app.state.services.ai_gateway
        ai_status = "healthy" if gateway.is_available else "not_configured"

        return {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "version": settings.version,
            "environment": settings.environment,
            "timestamp": _timestamp(),
            "services": {
                "database": db_status,
                "ai_service": ai_status,
            },
            "features": ConfigValidator.get_feature_status(settings),
        }

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "description": "Hierarchical task planning with AI assistance",
            "docs_url": "/docs" if settings.is_development else None,
        }

    # Include domain routers
    app.include_router(user_router)
    app.include_router(task_router)
    app.include_router(category_router)
    app.include_router(scheduling_router)
    app.include_router(ai_router)
    app.include_router(analytics_router)
    app.include_router(notification_router)
    app.include_router(cron_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()

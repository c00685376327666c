"""Field config API - FastAPI with SQLAlchemy."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from . import routers
from .config import Settings, get_settings
from .db import create_db_engine, create_session_factory, run_migrations
from .exceptions import AppException
from .logging_config import setup_logging

logger = structlog.get_logger()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())[1:]) or "body"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "Invalid payload. " + "; ".join(parts) if parts else "Invalid payload."


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if exc.status_code >= 500:
            logger.error("request_failed", error=exc.message, error_type=type(exc).__name__)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse({"error": _validation_message(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return JSONResponse({"error": str(exc) or "Internal server error."}, status_code=500)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app with its own engine and session factory."""
    settings = settings or get_settings()
    engine = create_db_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(
            service_name=settings.service_name,
            log_format=settings.log_format,
            log_level=settings.log_level,
        )
        if settings.auto_migrate:
            run_migrations(settings.database_url)
        yield
        engine.dispose()

    app = FastAPI(title="Fieldboard API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID", f"req_{uuid.uuid4().hex[:8]}")
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id, method=request.method, path=request.url.path
        )

        start = time.time()
        try:
            response = await call_next(request)
            duration_ms = round((time.time() - start) * 1000, 2)
            if response.status_code >= 500:
                logger.error(
                    "http_request_failed",
                    status_code=response.status_code,
                    duration_ms=duration_ms,
                )
            else:
                logger.info(
                    "http_request", status_code=response.status_code, duration_ms=duration_ms
                )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        except Exception as e:
            logger.error(
                "http_request_exception",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.time() - start) * 1000, 2),
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars("correlation_id", "method", "path")

    _register_exception_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(routers.field_configs.router, prefix=settings.api_prefix)
    app.include_router(routers.projects.router, prefix=settings.api_prefix)
    app.include_router(routers.users.router, prefix=settings.api_prefix)

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("fieldboard.main:create_app", factory=True, host=settings.host, port=settings.port)


def migrate() -> None:
    """Console entry point: apply schema migrations and exit."""
    settings = get_settings()
    setup_logging(
        service_name=settings.service_name,
        log_format=settings.log_format,
        log_level=settings.log_level,
    )
    run_migrations(settings.database_url)

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlink_app.api.v1 import redirect, shorturls
from shortlink_app.config import Settings, get_settings
from shortlink_app.database.connection import Database, utcnow
from shortlink_app.dependencies import get_store
from shortlink_app.logging_config import LOGGER_NAME, setup_logging
from shortlink_app.schemas.url import HealthResponse
from shortlink_app.storage.strategies import ShortUrlStore


def _app_logger(app: FastAPI) -> logging.Logger:
    # Only the lifespan sets app.state.logger
    return getattr(app.state, "logger", logging.getLogger(LOGGER_NAME))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: logging, database, tables. Shutdown: dispose the engine."""
    settings: Settings = app.state.settings
    logger = setup_logging(settings.log_level, settings.log_json, settings.log_file)
    app.state.logger = logger

    logger.info("Starting %s (%s)", settings.app_name, settings.environment)
    database = Database(settings.database_url, echo=settings.database_echo)
    try:
        database.create_tables()
        database.ping()
    except Exception:
        logger.exception("Database connection failed")
        database.dispose()
        raise
    app.state.database = database
    logger.info("Database connection established")

    try:
        yield
    finally:
        logger.info("Shutting down, closing database connection")
        database.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="A URL shortener service with expiring links and click analytics",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            _app_logger(app).warning("Route not found: %s %s", request.method, request.url.path)
            content = {
                "error": "Route not found",
                "message": "The requested endpoint does not exist",
            }
        else:
            content = {"error": str(exc.detail), "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Request body could not be parsed")
        if location:
            message = f"{location}: {message}"
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "message": message},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        _app_logger(app).error(
            "Unhandled application error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": "An unexpected error occurred"},
        )

    @app.get("/")
    def read_root():
        """Root endpoint with API information"""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
        }

    @app.get("/health", response_model=HealthResponse)
    def health_check(store: ShortUrlStore = Depends(get_store)):
        """Health check endpoint"""
        database_ok = store.ping()
        return HealthResponse(
            status="OK" if database_ok else "DEGRADED",
            timestamp=utcnow(),
            service=settings.app_name,
            database="OK" if database_ok else "ERROR",
        )

    ######## Include routers
    # The catch-all redirect router goes last
    app.include_router(shorturls.router)
    app.include_router(redirect.router)

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)

"""Main FastAPI application for the Knowledge Base Matcher."""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from .api import entries_router, health_router, matches_router
from .config import Settings, get_settings
from .core.engine import MatchingEngine
from .exceptions import NoEntriesAvailableError
from .models.response import ErrorResponse


def configure_logging(settings: Settings) -> None:
    """Configure structured logging."""
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())
    
    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.log_format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    logger.info("Starting Knowledge Base Matcher service", version=settings.app_version)
    
    if getattr(app.state, "engine", None) is None:
        app.state.engine = MatchingEngine.from_settings(settings)
    engine: MatchingEngine = app.state.engine
    
    try:
        snapshot = await engine.ensure_loaded()
        logger.info(
            "Knowledge base ready",
            total_entries=len(snapshot.entries),
            source=snapshot.source
        )
    except NoEntriesAvailableError as e:
        logger.error("No knowledge-base entries available", error=str(e))
        raise
    
    yield
    
    logger.info("Shutting down Knowledge Base Matcher service")
    await engine.close()


def create_app(
    engine: Optional[MatchingEngine] = None,
    settings: Optional[Settings] = None
) -> FastAPI:
    """
    Create the FastAPI application.
    
    Args:
        engine: Pre-built engine (built from settings at startup when None)
        settings: Application settings
    """
    settings = settings or get_settings()
    
    app = FastAPI(
        title=settings.app_name,
        description="Layered matching of free-text questions against a knowledge base",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.engine = engine
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    
    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        """Log all HTTP requests."""
        start_time = time.time()
        
        logger.info(
            "Request started",
            method=request.method,
            url=str(request.url),
            client_ip=request.client.host if request.client else None
        )
        
        response = await call_next(request)
        
        logger.info(
            "Request completed",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            process_time_ms=round((time.time() - start_time) * 1000, 2)
        )
        
        return response
    
    @app.exception_handler(NoEntriesAvailableError)
    async def no_entries_handler(request: Request, exc: NoEntriesAvailableError) -> JSONResponse:
        logger.error("No entries available", url=str(request.url), error=str(exc))
        return JSONResponse(
            status_code=503,
            content=ErrorResponse(
                error="Service Unavailable",
                message="No knowledge-base entries are available"
            ).model_dump(mode="json")
        )
    
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle global exceptions."""
        logger.error(
            "Unhandled exception",
            method=request.method,
            url=str(request.url),
            error=str(exc),
            exc_info=True
        )
        
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal Server Error",
                message="An unexpected error occurred",
                details={"exception": str(exc)} if settings.debug else None
            ).model_dump(mode="json")
        )
    
    app.include_router(matches_router)
    app.include_router(entries_router)
    app.include_router(health_router)
    
    @app.get("/", summary="Root endpoint", description="Get basic information about the API")
    async def root() -> dict:
        """Root endpoint with basic API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "description": "Layered matching of free-text questions against a knowledge base",
            "docs_url": "/docs",
            "health_url": "/api/v1/health",
            "status": "running"
        }
    
    return app


configure_logging(get_settings())
app = create_app()


if __name__ == "__main__":
    import uvicorn
    
    settings = get_settings()
    uvicorn.run(
        "kb_matcher.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
        log_level=settings.log_level.lower()
    )

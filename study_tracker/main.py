"""
Main FastAPI application
Study progress tracker: curriculum catalog, progress rollups and daily task tracker
"""
from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
import logging
import time

from study_tracker.config import Settings, settings as default_settings
from study_tracker.database import Database
from study_tracker.exceptions import StudyTrackerError
from study_tracker.api import chapters, data, subjects, tasks, topics
from study_tracker.utils.lock import RolloverLock
from study_tracker.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# Paths exempt from rate limiting
UNLIMITED_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


def _validation_errors(exc: RequestValidationError):
    """Flatten pydantic errors into [{field, message, type}]"""
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        errors.append({
            "field": ".".join(location) or None,
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        })
    return errors


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application with its own database handle, lock and limiter
    """
    settings = settings or default_settings

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Study progress tracker: subjects, chapters, topics and daily task points",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.settings = settings
    app.state.database = Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    app.state.rollover_lock = RolloverLock(
        settings.REDIS_URL if settings.REDIS_ENABLED else None,
        ttl=settings.ROLLOVER_LOCK_TTL
    )
    app.state.rate_limiter = RateLimiter(
        requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
        requests_per_hour=settings.RATE_LIMIT_PER_HOUR
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting middleware
    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next):
        """Apply rate limiting to all requests"""

        if not settings.RATE_LIMIT_ENABLED or request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        try:
            await request.app.state.rate_limiter.check_rate_limit(request)
        except HTTPException as e:
            return JSONResponse(
                status_code=e.status_code,
                content=e.detail
            )

        return await call_next(request)

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing"""

        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Duration: {duration:.3f}s"
        )

        return response

    # Domain errors: not found, conflict, store failure
    @app.exception_handler(StudyTrackerError)
    async def tracker_exception_handler(request: Request, exc: StudyTrackerError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error}: {exc.message}", exc_info=exc.__cause__)

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error,
                "message": exc.message
            }
        )

    # Payload / query validation
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Validation failed.",
                "errors": _validation_errors(exc)
            }
        )

    # HTTP exception handler
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Format HTTP exceptions consistently"""

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "http_error",
                "message": exc.detail,
                "status_code": exc.status_code
            }
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors gracefully"""

        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "detail": str(exc) if settings.DEBUG else None
            }
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check(request: Request):
        """
        Health check endpoint for monitoring

        Returns service status and dependencies
        """
        database_ok = request.app.state.database.ping()
        return {
            "status": "healthy" if database_ok else "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "database": database_ok,
            "rollover_lock": request.app.state.rollover_lock.enabled,
            "timestamp": time.time()
        }

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "Study Progress Tracker API",
            "version": settings.APP_VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    # Include routers
    app.include_router(subjects.router)
    app.include_router(chapters.router)
    app.include_router(topics.router)
    app.include_router(data.router)
    app.include_router(tasks.router)

    # Startup event
    @app.on_event("startup")
    async def startup_event():
        """Initialize database on startup"""
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

        try:
            app.state.database.create_all()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {str(e)}")
            raise

        logger.info("Application startup complete")

    # Shutdown event
    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        logger.info("Shutting down application")
        app.state.database.dispose()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "study_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG
    )

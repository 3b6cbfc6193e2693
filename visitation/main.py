"""
Visitation Scheduling API
Main application file
"""

from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import uvicorn

from visitation.core.config import settings
from visitation.core.database import check_database_connection
from visitation.core.exceptions import (
    DisallowedTime,
    InvalidOperation,
    ResourceNotFound,
    SchedulingConflict,
    SchedulingError,
    ValidationError,
)
from visitation.core.init_db import init_db, seed_initial_data
from visitation.routers import appointment, status as status_router

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.log_format
)
logger = logging.getLogger(__name__)

# ============================================================================
# FastAPI Application
# ============================================================================

docs_url = "/docs" if settings.ENVIRONMENT != "production" else None
redoc_url = "/redoc" if settings.ENVIRONMENT != "production" else None

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Scheduling of visits between custodied persons and their visitors",
    docs_url=docs_url,
    redoc_url=redoc_url,
)

# ============================================================================
# CORS Configuration
# ============================================================================

if settings.API_CORS_ORIGINS and settings.API_CORS_ORIGINS.strip() == "*":
    # Allow all origins (credentials must be False)
    origins = ["*"]
    allow_credentials = False
else:
    origins = list(settings.cors_origins)
    if settings.API_CORS_ORIGINS:
        origins.extend(o.strip() for o in settings.API_CORS_ORIGINS.split(",") if o.strip())
    allow_credentials = True

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Error Handlers
# ============================================================================

ERROR_STATUS_CODES = {
    ResourceNotFound: status.HTTP_404_NOT_FOUND,
    DisallowedTime: status.HTTP_400_BAD_REQUEST,
    SchedulingConflict: status.HTTP_409_CONFLICT,
    InvalidOperation: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def _error_body(status_code: int, error: str, detail: str) -> dict:
    return {
        "status": status_code,
        "error": error,
        "detail": detail,
        "timestamp": datetime.now().isoformat(),
    }


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, (SchedulingConflict, ValidationError, DisallowedTime)):
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    else:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content=_error_body(status_code, exc.error_code, exc.message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Internal server error"),
    )

# ============================================================================
# Root & Health Endpoints
# ============================================================================


@app.get("/", tags=["Root"])
def root():
    """Root endpoint - API information"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "documentation": docs_url,
        "visit_window_policy": settings.visit_window_policy,
        "endpoints": {
            "health": "/health",
            "appointments": "/api/appointments",
            "statuses": "/api/statuses",
        }
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for API monitoring"""
    database_ok = check_database_connection()
    return {
        "status": "ok" if database_ok else "degraded",
        "database": "up" if database_ok else "down",
        "version": settings.app_version,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.utcnow().isoformat(),
    }

# ============================================================================
# Event Handlers
# ============================================================================


@app.on_event("startup")
def startup_event():
    """Actions to perform on application startup"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Visit window policy: {settings.visit_window_policy}")
    logger.info(f"Daily visit limit: {settings.daily_visit_limit}")
    logger.info(f"Conflict window: {settings.conflict_window_minutes} minutes")
    logger.info("=" * 60)

    try:
        init_db()
        seed_initial_data()
        logger.info("✓ Database tables ready")
    except Exception as e:
        logger.error(f"✗ Database initialization failed: {e}")
        logger.warning("Application will continue, but database operations may fail")


@app.on_event("shutdown")
def shutdown_event():
    """Actions to perform on application shutdown"""
    logger.info(f"Shutting down {settings.app_name}")

# ============================================================================
# Router Registration
# ============================================================================

app.include_router(appointment.router)  # Visit scheduling
app.include_router(status_router.router)  # Status lookup

if __name__ == "__main__":
    uvicorn.run(
        "visitation.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.LOG_LEVEL.lower()
    )

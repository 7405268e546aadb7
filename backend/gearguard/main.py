"""FastAPI application."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .domain_errors import DomainError
from .problem_details import domain_error_handler
from .routers import equipment, reporting, requests, teams, work_centers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create app
app = FastAPI(
    title="GearGuard Maintenance",
    version="1.0.0",
    description="Backend API for GearGuard maintenance tracking"
)

# Production safety checks.
if settings.ENV.lower() == "production" and not settings.cors_origins:
    raise RuntimeError("ALLOWED_ORIGINS must be set in production (explicit frontend origin required).")
if settings.ENV.lower() == "production" and any(origin.strip() == "*" for origin in settings.cors_origins):
    raise RuntimeError("ALLOWED_ORIGINS must be explicit in production (no wildcard when using credentials).")
if settings.ENV.lower() == "production" and settings.EQUIPMENT_LOCK_BACKEND == "local":
    logging.getLogger(__name__).warning(
        "EQUIPMENT_LOCK_BACKEND=local only serializes transitions within one process; "
        "use redis when running several API workers."
    )

# CORS
cors_methods = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
cors_headers = ["Content-Type"]
if settings.ENV.lower() != "production":
    cors_headers = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=cors_methods,
    allow_headers=cors_headers,
)

app.add_exception_handler(DomainError, domain_error_handler)

# Include routers
app.include_router(requests.router, prefix="/api/v1")
app.include_router(equipment.router, prefix="/api/v1")
app.include_router(teams.router, prefix="/api/v1")
app.include_router(work_centers.router, prefix="/api/v1")
app.include_router(reporting.router, prefix="/api/v1")


@app.get("/api/v1/system/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
        "lock_backend": settings.EQUIPMENT_LOCK_BACKEND,
    }


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "GearGuard Maintenance API",
        "version": "1.0.0",
        "docs": "/docs"
    }

# school_api/main.py
import logging
import psutil # For system metrics in health check
import time   # For uptime calculation
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict, Any
from datetime import datetime, timedelta, timezone
from fastapi import status

from school_api.core.config import settings, missing_required_settings, PROJECT_NAME, API_PREFIX, VERSION
from school_api.core.errors import register_exception_handlers
from school_api.core.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from school_api.core.security_headers import SecurityHeadersMiddleware
from school_api.db.database import (
    connect_to_mongo,
    close_mongo_connection,
    check_database_health,
    ensure_indexes,
    get_database,
)

from school_api.api.endpoints.auth import router as auth_router
from school_api.api.endpoints.schools import router as schools_router
from school_api.api.endpoints.classrooms import router as classrooms_router
from school_api.api.endpoints.students import router as students_router

logger = logging.getLogger(__name__)

# Track application start time for uptime calculation
APP_START_TIME = time.time()

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    description="Multi-tenant management of schools, classrooms and students",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One limiter per process; kept on app.state so it can be inspected and reset
app.state.rate_limiter = FixedWindowRateLimiter(
    window_ms=settings.RATE_LIMIT_WINDOW_MS,
    max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
)
app.add_middleware(RateLimitMiddleware, limiter=app.state.rate_limiter, path_prefix=API_PREFIX)

# Outermost, so 429s and preflight responses carry the headers too
app.add_middleware(SecurityHeadersMiddleware, csp_exempt_paths=(app.docs_url, app.redoc_url))

register_exception_handlers(app)

# --- Event Handlers for DB Connection ---
@app.on_event("startup")
async def startup_event():
    """Refuse to start without required settings, then connect to MongoDB and ensure indexes."""
    missing = missing_required_settings(settings)
    if missing:
        logger.critical(f"FATAL: Missing required environment variables: {', '.join(missing)}")
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("Executing startup event: Connecting to database...")
    connected = await connect_to_mongo()
    if not connected:
        logger.critical("FATAL: Database connection failed on startup.")
        raise RuntimeError("Database connection failed on startup")

    logger.info("Ensuring database indexes...")
    await ensure_indexes(get_database())
    logger.info("Database indexes ensured.")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Executing shutdown event: Disconnecting from database...")
    await close_mongo_connection()

# --- API Endpoints ---
@app.get("/", tags=["Root"], include_in_schema=False)
async def read_root():
    """Root endpoint welcome message."""
    return {"message": f"Welcome to {PROJECT_NAME}"}

@app.get("/health", status_code=200, tags=["Health Check"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint reporting:
    - Application status and metrics (uptime, memory)
    - Database connectivity and collections
    """
    db_health = await check_database_health()

    process = psutil.Process()
    memory_info = process.memory_info()

    uptime_seconds = time.time() - APP_START_TIME
    uptime = str(timedelta(seconds=int(uptime_seconds)))

    health_info = {
        "status": "OK",
        "application": {
            "name": PROJECT_NAME,
            "version": VERSION,
            "environment": settings.ENVIRONMENT,
            "status": "OK",
            "uptime": uptime,
            "memory_usage": {
                "rss_bytes": memory_info.rss,
                "vms_bytes": memory_info.vms,
                "percent": f"{process.memory_percent():.2f}%"
            }
        },
        "database": db_health,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

    # Overall status follows the database
    if db_health.get("status") == "ERROR":
        health_info["status"] = "ERROR"
    elif db_health.get("status") == "WARNING":
        health_info["status"] = "WARNING"

    return health_info

# --- Liveness and Readiness Probes ---
@app.get("/healthz", tags=["Probes"], status_code=status.HTTP_200_OK)
async def liveness_probe():
    """Liveness probe: the process is running and responsive."""
    return {"status": "live"}

@app.get("/readyz", tags=["Probes"])
async def readiness_probe(response: Response):
    """Readiness probe: the database is reachable."""
    db_health = await check_database_health()
    # Collections appear lazily, so a WARNING still means ready
    if db_health.get("status") in ("OK", "WARNING"):
        response.status_code = status.HTTP_200_OK
        return {"status": "ready", "database": db_health}
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "not_ready", "database": db_health}

# --- Include API Routers ---
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(schools_router, prefix=API_PREFIX)
app.include_router(classrooms_router, prefix=API_PREFIX)
app.include_router(students_router, prefix=API_PREFIX)

# app/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, all routers,
and the background sensor simulation task.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import favorites, health, locations, plans, sensors, sync, users
from app.database import create_tables
from app.config import settings
from app.utils.exceptions import StudySpotError
from app.utils.logger import get_logger
import time
import asyncio

logger = get_logger(__name__)

app = FastAPI(
    title="Ghent Study Spots API",
    description="Find quiet, available study spaces: live noise & occupancy, favorites and study plans.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (the web frontend runs on a different origin) ──────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the frontend origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional shared API key between the frontend and this backend.
    Health, docs and cron endpoints are excluded: cron jobs use CRON_SECRET.
    Set API_KEY in .env. Leave empty to disable.
    """
    open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
    open_prefixes = ("/api/v1/cron/",)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in self.open_paths or path.startswith(self.open_prefixes) or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(StudySpotError)
async def domain_error_handler(request: Request, exc: StudySpotError):
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(locations.router, prefix="/api/v1", tags=["📍 Locations"])
app.include_router(sensors.router,   prefix="/api/v1", tags=["📡 Sensors"])
app.include_router(favorites.router, prefix="/api/v1", tags=["⭐ Favorites"])
app.include_router(plans.router,     prefix="/api/v1", tags=["📅 Study Plans"])
app.include_router(sync.router,      prefix="/api/v1", tags=["🔄 Open Data Sync"])
app.include_router(users.router,     prefix="/api/v1", tags=["👤 Users"])
app.include_router(health.router,    prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
_simulation_task = None


@app.on_event("startup")
async def startup():
    global _simulation_task
    logger.info("🚀 Study Spots backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")

    if settings.SIMULATION_ENABLED:
        from app.services.sensor_scheduler import start_simulation_loop
        _simulation_task = asyncio.create_task(
            start_simulation_loop(settings.SIMULATION_INTERVAL_SECONDS), name="sensor-simulation"
        )
    else:
        logger.info("📡 Sensor simulation disabled (SIMULATION_ENABLED=false)")

    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Study Spots backend shutting down...")
    if _simulation_task:
        _simulation_task.cancel()

"""
LiftLog FastAPI server main entrypoint.
Handles CORS, error handling, health checks, and API routers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from urllib.parse import urlparse

import psutil
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import SETTINGS
from ..db import repo
from ..errors import LiftLogError, NotFoundError
from ..logging_setup import setup_logging
from .routes.drafts import router as r_drafts
from .routes.exercises import router as r_exercises
from .routes.progress import router as r_progress
from .routes.suggestion import router as r_suggestion
from .routes.templates import router as r_templates
from .routes.users import router as r_users
from .routes.workouts import router as r_workouts


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    try:
        await repo.init_db()
        logging.info("FastAPI server startup completed")
    except Exception as e:
        logging.exception("FastAPI startup failed: %s", e)
        raise

    yield

    try:
        await repo.close_db()
        logging.info("FastAPI server shutdown completed")
    except Exception as e:
        logging.exception("FastAPI shutdown failed: %s", e)


app = FastAPI(
    title="LiftLog API",
    description="Workout templates, logging, progress and weight suggestions",
    version=__version__,
    lifespan=lifespan,
)

# CORS setup: allow the web app plus local development origins
allowed: set[str] = set()
try:
    u = urlparse(SETTINGS.WEBAPP_URL)
    if u.scheme and u.netloc:
        allowed.add(f"{u.scheme}://{u.netloc}")
except ValueError:
    logging.warning("Ignoring malformed WEBAPP_URL %r", SETTINGS.WEBAPP_URL)
allowed.add("http://localhost:3000")
allowed.add("http://localhost:5173")
allowed.add("http://127.0.0.1:5173")

app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(allowed),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse({"ok": False, "error": "not_found", "message": str(exc)}, status_code=404)


@app.exception_handler(LiftLogError)
async def app_error_handler(request: Request, exc: LiftLogError) -> JSONResponse:
    return JSONResponse({"ok": False, "error": "bad_request", "message": str(exc)}, status_code=400)


@app.exception_handler(Exception)
async def global_exc_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler: log and return a generic error response.
    """
    logging.exception("Unhandled error in %s: %s", request.url.path, exc)
    return JSONResponse(
        {"ok": False, "error": "internal_error", "message": "Internal server error"},
        status_code=500,
    )


@app.get("/healthz")
async def healthz() -> dict:
    """
    Health check endpoint with system and database status.
    """
    memory = psutil.virtual_memory()
    cpu_percent = psutil.cpu_percent(interval=0.1)
    db_ok = await repo.ping()

    is_healthy = memory.percent < 90 and cpu_percent < 95 and db_ok

    return {
        "ok": is_healthy,
        "status": "healthy" if is_healthy else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "system": {
            "memory_percent": round(memory.percent, 1),
            "memory_available_mb": round(memory.available / 1024 / 1024, 1),
            "cpu_percent": round(cpu_percent, 1),
        },
        "database": {"status": "up" if db_ok else "down"},
    }


@app.get("/")
async def root() -> dict:
    """
    Root endpoint with API information.
    """
    return {
        "ok": True,
        "name": "LiftLog API",
        "version": __version__,
        "description": "Workout tracking with double-progression weight suggestions",
    }


# Routers for API endpoints
app.include_router(r_users, prefix="/api/v1", tags=["users"])
app.include_router(r_exercises, prefix="/api/v1", tags=["exercises"])
app.include_router(r_templates, prefix="/api/v1", tags=["templates"])
app.include_router(r_workouts, prefix="/api/v1", tags=["workouts"])
app.include_router(r_drafts, prefix="/api/v1", tags=["drafts"])
app.include_router(r_progress, prefix="/api/v1", tags=["progress"])
app.include_router(r_suggestion, prefix="/api/v1", tags=["suggestion"])

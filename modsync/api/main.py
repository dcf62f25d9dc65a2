"""
modsync.api.main — FastAPI application entry point
===================================================

Run with::

    uvicorn modsync.api.main:app --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from modsync.api.deps import get_engine  # noqa: E402
from modsync.api.routes.config import router as config_router  # noqa: E402
from modsync.api.routes.events import router as events_router  # noqa: E402
from modsync.api.routes.realtime import router as realtime_router  # noqa: E402
from modsync.api.routes.transcripts import router as transcripts_router  # noqa: E402
from modsync.database.engine import init_db  # noqa: E402
from modsync.errors import BadRequest, Unauthorized  # noqa: E402
from modsync.services.broadcast import ConnectionManager  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


def _peer(conn) -> str:
    client = getattr(conn, "client", None)
    return f"{client.host}:{client.port}" if client else "unknown"


def _build_hub() -> ConnectionManager:
    drop = os.getenv("MODSYNC_DROP_ON_SEND_FAILURE", "").strip().lower() in ("1", "true", "yes")
    return ConnectionManager(
        on_connect=lambda conn: logger.info("Dashboard connected from %s", _peer(conn)),
        on_disconnect=lambda conn: logger.info("Dashboard disconnected from %s", _peer(conn)),
        on_send_failure=lambda conn, exc: logger.warning(
            "Push to dashboard %s failed: %s", _peer(conn), exc,
        ),
        drop_on_failure=drop,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine, ensure tables."""
    engine = get_engine()
    init_db(engine)
    logger.info("ModSync API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("ModSync API shutting down (%d dashboards connected)", len(app.state.hub))


app = FastAPI(
    title="ModSync API",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.hub = _build_hub()

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error mapping — every error body is {"error": "..."}
# ---------------------------------------------------------------------------
@app.exception_handler(BadRequest)
async def _bad_request(request: Request, exc: BadRequest):
    return JSONResponse({"error": str(exc) or "Bad request"}, status_code=400)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": "Malformed request"}, status_code=400)


@app.exception_handler(Unauthorized)
async def _unauthorized(request: Request, exc: Unauthorized):
    return JSONResponse({"error": "Unauthorized"}, status_code=401)


# Mount routers
app.include_router(config_router, prefix="/api")
app.include_router(events_router, prefix="/api")
app.include_router(transcripts_router, prefix="/api")
app.include_router(realtime_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}

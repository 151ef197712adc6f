from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from src.tracker.api.routers import auth_router, charts_router, data_points_router, subscriptions_router
from src.tracker.core.logging_config import setup_logging
from src.tracker.infra.db import engine

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()
NO_CACHE = {"Cache-Control": "no-cache, no-store, must-revalidate"}

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("tracker api starting")
    yield
    logger.info("tracker api stopping")

app = FastAPI(
    title="HappyStats",
    version="0.1.0",
    docs_url="/docs",
    redoc_url=None,
    lifespan=lifespan,
)

app.include_router(auth_router)
app.include_router(charts_router)
app.include_router(data_points_router)
app.include_router(subscriptions_router)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _db_healthy() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("database health check failed")
        return False


@app.get("/health")
def health():
    started = time.monotonic()
    db_ok = _db_healthy()
    body = {
        "status": "healthy" if db_ok else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "response_time_ms": round((time.monotonic() - started) * 1000, 2),
        "checks": {"database": "healthy" if db_ok else "unhealthy"},
    }
    return JSONResponse(body, status_code=200 if db_ok else 503, headers=NO_CACHE)


@app.get("/ready")
def ready():
    return {"status": "ready"}

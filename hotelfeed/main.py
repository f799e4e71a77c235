"""HOTELFEED — FastAPI Application Entry Point.

Activity feed backend for the hotel admin console.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotelfeed.database import init_db, test_connection, db_url, _mask_url
from hotelfeed.scheduler.jobs import start_scheduler, stop_scheduler
from hotelfeed.api.feed_routes import router as feed_router, get_feed_session
from hotelfeed.api.guest_routes import router as guest_router
from hotelfeed.core.logging import get_logger

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("HOTELFEED starting up...")
    db_ok = test_connection()
    if db_ok:
        try:
            init_db()
        except Exception as e:
            logger.error(f"Table creation failed: {e}")
    else:
        logger.error("Database NOT connected — endpoints will fail")
    start_scheduler(get_feed_session())
    yield
    stop_scheduler()
    logger.info("HOTELFEED shut down")


app = FastAPI(
    title="HOTELFEED",
    description="Hotel admin activity feed — merged employee activity and payments with cheap change polling.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(feed_router)
app.include_router(guest_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "hotelfeed",
        "version": "1.0.0",
    }


@app.get("/debug/db", tags=["System"])
async def debug_db():
    """Debug endpoint — check database connectivity."""
    error = None
    connected = False
    try:
        connected = test_connection()
    except Exception as e:
        error = str(e)

    backend = "sqlite" if db_url.startswith("sqlite") else "server"
    return {
        "connected": connected,
        "backend": backend,
        "url": _mask_url(db_url),
        "error": error,
    }

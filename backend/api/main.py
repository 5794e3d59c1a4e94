import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tracker.price_adjust import __version__
from backend.core.config import settings
from backend.core.db import init_db, get_stats
from backend.api.routers import (
    receipts_router,
    coupons_router,
    settings_router,
    adjustments_router,
    backup_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    # Startup
    init_db()
    logger.info("Database initialized")

    yield  # Application runs here


app = FastAPI(title="Price Adjustment Tracker", version=__version__, lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "version": __version__}


@app.get("/api/stats")
def database_stats():
    """Record counts."""
    return get_stats()


app.include_router(receipts_router)
app.include_router(coupons_router)
app.include_router(settings_router)
app.include_router(adjustments_router)
app.include_router(backup_router)

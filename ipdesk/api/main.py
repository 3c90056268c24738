"""
FastAPI application for the ipdesk HTTP console.

Run with:
    uvicorn ipdesk.api.main:app --port 8090
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ipdesk import __version__
from ipdesk.api.deps import get_console
from ipdesk.api.routers import (
    choices_router,
    devices_router,
    export_router,
    ipam_router,
    session_router,
    views_router,
)
from ipdesk.core.config import settings

logger = logging.getLogger(__name__)


def start_console():
    """Start the refresh tick job; logs in when a token is configured."""
    console = get_console()
    if settings.INVENTORY_TOKEN:
        try:
            console.login(settings.INVENTORY_URL, settings.INVENTORY_TOKEN)
        except Exception as e:
            logger.warning(f"Startup login to {settings.INVENTORY_URL} failed: {e}")
    console.start()


def stop_console():
    get_console().stop()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    # Startup
    try:
        start_console()
    except Exception as e:
        logger.warning(f"Failed to start refresh scheduler: {e}")

    yield  # Application runs here

    # Shutdown
    stop_console()


app = FastAPI(title="ipdesk IPAM Console", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(session_router)
app.include_router(choices_router)
app.include_router(devices_router)
app.include_router(ipam_router)
app.include_router(export_router)
app.include_router(views_router)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "version": __version__}

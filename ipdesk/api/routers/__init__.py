"""
API Routers package.

Each module contains a FastAPI router for a specific area of the console.
"""

from .session import router as session_router
from .choices import router as choices_router
from .devices import router as devices_router
from .ipam import router as ipam_router
from .export import router as export_router
from .views import router as views_router

"""
Views API router - active view, forced refresh, modal freeze and scheduler status.
"""
from fastapi import APIRouter, Depends

from ipdesk.api.deps import get_console
from ipdesk.api.models import ModalRequest
from ipdesk.core.console import InventoryConsole
from ipdesk.core.scheduler import View

router = APIRouter(prefix="/api", tags=["Views"])


def _view_state(console: InventoryConsole, view: View) -> dict:
    return console.scheduler.status()["views"][view.value]


@router.post("/views/{view}/activate")
def activate_view(view: View, console: InventoryConsole = Depends(get_console)):
    """Switch the visible view; it refreshes on the next tick."""
    console.activate(view)
    return {"view": view.value, **_view_state(console, view)}


@router.post("/views/{view}/refresh")
def refresh_view(view: View, console: InventoryConsole = Depends(get_console)):
    """Refresh button: make the view due on the next tick."""
    console.scheduler.force(view)
    return {"view": view.value, **_view_state(console, view)}


@router.put("/views/{view}/modal")
def set_modal(view: View, body: ModalRequest, console: InventoryConsole = Depends(get_console)):
    """Freeze the countdown while an input dialog is open."""
    console.set_modal(view, body.open)
    return {"view": view.value, **_view_state(console, view)}


@router.get("/scheduler")
def scheduler_status(console: InventoryConsole = Depends(get_console)):
    return console.scheduler.status()

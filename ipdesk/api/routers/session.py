"""
Session API router - login, logout and session status.
"""
from fastapi import APIRouter, Depends, HTTPException

from ipdesk.api.deps import get_console, http_error
from ipdesk.api.models import LoginRequest
from ipdesk.core.console import InventoryConsole
from ipdesk.core.errors import InventoryError

router = APIRouter(prefix="/api/session", tags=["Session"])


@router.post("/login")
def login(body: LoginRequest, console: InventoryConsole = Depends(get_console)):
    """Check the token against the backend and start loading the caches."""
    if not body.token:
        raise HTTPException(status_code=400, detail="Token is required")
    try:
        status = console.login(body.base_url, body.token)
    except InventoryError as e:
        raise http_error(e)
    return {"success": True, "backend": status, **console.session()}


@router.post("/logout")
def logout(console: InventoryConsole = Depends(get_console)):
    console.logout()
    return {"success": True}


@router.get("")
def get_session(console: InventoryConsole = Depends(get_console)):
    return console.status()

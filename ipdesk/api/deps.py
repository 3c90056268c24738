"""
Shared dependencies: the console instance and error translation.
"""
from typing import Optional

from fastapi import HTTPException

from ipdesk.core.console import InventoryConsole
from ipdesk.core.errors import (
    AuthRejected,
    BadStatus,
    InventoryError,
    NotLoggedIn,
    UnresolvedReference,
)

# Created on first use; main.py's lifespan starts and stops its scheduler
_console: Optional[InventoryConsole] = None


def get_console() -> InventoryConsole:
    global _console
    if _console is None:
        _console = InventoryConsole()
    return _console


def http_error(e: Exception) -> HTTPException:
    """Map a console error to the HTTP status the client sees."""
    if isinstance(e, (AuthRejected, NotLoggedIn)):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, BadStatus):
        return HTTPException(status_code=502, detail={"status_code": e.status_code, "body": e.body})
    if isinstance(e, UnresolvedReference):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, IndexError):
        return HTTPException(status_code=409, detail="Selection is stale, reload the choices")
    if isinstance(e, InventoryError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))

"""
Choices API router - dropdown entries, selections and resolution preview.
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from ipdesk.api.deps import get_console
from ipdesk.api.models import SelectionRequest
from ipdesk.core.cache import ReferenceCache
from ipdesk.core.console import InventoryConsole
from ipdesk.core.models import ReferenceKind
from ipdesk.core.resolver import UNRESOLVED, resolve

router = APIRouter(prefix="/api", tags=["Choices"])


def _entries(cache: ReferenceCache) -> list[dict]:
    return [
        {"index": e.local_index, "id": e.remote_id, "name": e.display_name}
        for e in cache.all()
    ]


@router.get("/choices/{kind}")
def get_choices(kind: ReferenceKind, console: InventoryConsole = Depends(get_console)):
    """Dropdown entries for a kind; index 0 is always the "None" entry."""
    cache = console.cache(kind)
    return {
        "kind": kind.value,
        "selected": console.caches.selection(kind),
        "entries": _entries(cache),
        "skipped": cache.skipped,
    }


@router.put("/choices/{kind}")
def set_choice(
    kind: ReferenceKind,
    body: SelectionRequest,
    console: InventoryConsole = Depends(get_console),
):
    try:
        entry = console.select(kind, body.index)
    except IndexError:
        raise HTTPException(status_code=409, detail=f"No {kind.value} at index {body.index}")
    return {"kind": kind.value, "selected": entry.local_index, "name": entry.display_name}


@router.get("/resolve/{kind}")
def resolve_preview(
    kind: ReferenceKind,
    q: str = Query("", description="Free text to match against display names"),
    console: InventoryConsole = Depends(get_console),
):
    """What an import cell with this text would resolve to."""
    cache = console.cache(kind)
    index = resolve(cache, q)
    entry = cache.get(index)
    return {
        "kind": kind.value,
        "query": q,
        "resolved": index != UNRESOLVED,
        "index": index,
        "id": entry.remote_id,
        "name": entry.display_name,
    }

"""
Export API router.
"""
import re
from datetime import datetime
from io import BytesIO
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from ipdesk.api.deps import get_console, http_error
from ipdesk.core.console import InventoryConsole
from ipdesk.core.errors import InventoryError, NotLoggedIn

router = APIRouter(prefix="/api/export", tags=["Export"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe use in Content-Disposition header."""
    safe = re.sub(r'[^\w\s\-\.]', '_', filename)
    return quote(safe, safe='')


def _xlsx_response(buffer: BytesIO, filename: str) -> StreamingResponse:
    safe_filename = sanitize_filename(filename)

    def iterfile():
        yield buffer.getvalue()

    return StreamingResponse(
        iterfile(),
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename=\"{safe_filename}\"; filename*=UTF-8''{safe_filename}"
        }
    )


@router.get("/devices")
def export_devices(
    search: str = Query("", description="Display-name filter"),
    console: InventoryConsole = Depends(get_console),
):
    """Devices snapshot from the device cache."""
    buffer = console.devices_workbook(search)
    filename = f"devices_data_{datetime.now().strftime('%Y%m%d')}.xlsx"
    return _xlsx_response(buffer, filename)


@router.get("/prefixes")
def export_prefixes(console: InventoryConsole = Depends(get_console)):
    """Prefixes snapshot, fetched live from the backend."""
    try:
        buffer = console.prefixes_workbook()
    except (InventoryError, NotLoggedIn) as e:
        raise http_error(e)
    filename = f"prefixes_{datetime.now().strftime('%Y%m%d')}.xlsx"
    return _xlsx_response(buffer, filename)

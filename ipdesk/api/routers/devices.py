"""
Devices API router - browse, detail, create and bulk import.
"""
import logging
import tempfile
from pathlib import Path
from zipfile import BadZipFile

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from openpyxl.utils.exceptions import InvalidFileException

from ipdesk.api.deps import get_console, http_error
from ipdesk.api.models import DeviceCreateForm
from ipdesk.api.security import require_api_key
from ipdesk.core.console import InventoryConsole
from ipdesk.core.errors import InventoryError, NotLoggedIn, UnresolvedReference
from ipdesk.core.tables import DEVICE_COLUMNS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/devices", tags=["Devices"])

IMPORT_SUFFIXES = (".xlsx", ".xlsm", ".csv")


@router.get("")
def list_devices(
    search: str = Query("", description="Display-name filter"),
    console: InventoryConsole = Depends(get_console),
):
    rows = console.device_rows(search)
    return {"columns": DEVICE_COLUMNS, "rows": rows, "count": len(rows)}


@router.get("/{device_id}")
def get_device(device_id: int, console: InventoryConsole = Depends(get_console)):
    try:
        return console.device_detail(device_id)
    except (InventoryError, NotLoggedIn) as e:
        raise http_error(e)


@router.post("", dependencies=[Depends(require_api_key)])
def create_device(body: DeviceCreateForm, console: InventoryConsole = Depends(get_console)):
    """Create one device from dropdown selections."""
    try:
        created = console.create_device(
            name=body.name,
            device_type=body.device_type,
            role=body.role,
            site=body.site,
            manufacturer=body.manufacturer,
            tenant=body.tenant,
            serial=body.serial,
            status=body.status,
        )
    except (InventoryError, NotLoggedIn, UnresolvedReference, IndexError) as e:
        raise http_error(e)
    return {"success": True, "device": created}


@router.post("/import", dependencies=[Depends(require_api_key)])
def import_devices(
    file: UploadFile = File(...),
    dry_run: bool = Query(False),
    console: InventoryConsole = Depends(get_console),
):
    """Bulk-import devices from an uploaded .xlsx or .csv sheet."""
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in IMPORT_SUFFIXES:
        raise HTTPException(status_code=400, detail=f"Unsupported file format: {suffix or 'none'}")

    # Sync handler: the sequential POSTs run on the threadpool, not the event loop
    content = file.file.read()
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / f"import{suffix}"
        path.write_bytes(content)
        try:
            summary = console.import_rows(path, dry_run=dry_run)
        except NotLoggedIn as e:
            raise http_error(e)
        except (ValueError, BadZipFile, InvalidFileException) as e:
            logger.warning(f"Unreadable import file {file.filename}: {e}")
            raise HTTPException(status_code=400, detail=f"Unreadable import file: {e}")

    logger.info(f"Import of {file.filename}: {summary.as_dict()}")
    return {
        "success": True,
        "dry_run": dry_run,
        "summary": summary.as_dict(),
        "rows": [
            {
                "row": r.row.row_number,
                "name": r.row.name,
                "outcome": r.outcome.value,
                "reason": r.reason,
                "missing": r.missing,
            }
            for r in summary.results
        ],
    }

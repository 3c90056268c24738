"""
XLSX Export Module - snapshot workbooks of inventory data.

Two one-way dumps, each a single sheet with headers in row 1 and data from row 2:
- Devices snapshot: built from the cached device records
- Prefixes snapshot: built from a live prefixes fetch

These are not read back by the import; the import sheet has its own layout.
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Iterable, List

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .cache import ReferenceCache
from .tables import nested

logger = logging.getLogger(__name__)

DEVICES_FILENAME = "devices_data.xlsx"
PREFIXES_FILENAME = "prefixes.xlsx"

DEVICE_EXPORT_COLUMNS = [
    "Name",
    "Serial Number",
    "Type",
    "Manufacturer",
    "Role",
    "Site",
    "Tenant",
    "Status",
]

PREFIX_EXPORT_COLUMNS = [
    "ID",
    "URL",
    "Display URL",
    "Display",
    "Family Value",
    "Family Label",
    "Prefix",
    "Tenant Name",
    "Created",
    "Last Updated",
]


def _write_sheet(
    title: str,
    columns: List[str],
    rows: Iterable[List[Any]],
    column_widths: List[int],
) -> BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = title

    # Header row (row 1)
    ws.append(columns)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    # Data rows starting at row 2
    for row in rows:
        ws.append(row)

    for col_idx, width in enumerate(column_widths, 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer


def extract_device_row(display_name: str, device: Dict[str, Any]) -> List[Any]:
    """One devices-sheet row from a device record."""
    return [
        display_name,
        nested(device, "serial", default=""),
        nested(device, "device_type", "display", default=""),
        nested(device, "device_type", "manufacturer", "display", default=""),
        # NetBox 4 calls it role, older releases device_role
        nested(device, "role", "display", default="")
        or nested(device, "device_role", "display", default=""),
        nested(device, "site", "display", default=""),
        nested(device, "tenant", "display", default=""),
        nested(device, "status", "label", default=""),
    ]


def create_devices_workbook(devices: ReferenceCache, search: str = "") -> BytesIO:
    """
    Devices snapshot from the device cache.

    Args:
        devices: Device cache generation (sentinel is not exported)
        search: Optional display-name filter, same as the device view

    Returns:
        BytesIO buffer containing the Excel file
    """
    rows = [
        extract_device_row(e.display_name, e.raw)
        for e in devices.all()[1:]
        if search in e.display_name
    ]
    logger.info(f"Exporting {len(rows)} devices")
    return _write_sheet("Devices", DEVICE_EXPORT_COLUMNS, rows, [30, 20, 25, 20, 18, 20, 20, 12])


def extract_prefix_row(prefix: Dict[str, Any]) -> List[Any]:
    """One prefixes-sheet row from a prefix record."""
    return [
        prefix.get("id"),
        prefix.get("url", ""),
        prefix.get("display_url", ""),
        prefix.get("display", ""),
        nested(prefix, "family", "value", default=""),
        nested(prefix, "family", "label", default=""),
        prefix.get("prefix", ""),
        nested(prefix, "tenant", "name", default=""),
        prefix.get("created", ""),
        prefix.get("last_updated", ""),
    ]


def create_prefixes_workbook(prefixes: Iterable[Dict[str, Any]]) -> BytesIO:
    """Prefixes snapshot, one row per prefix record."""
    rows = [extract_prefix_row(p) for p in prefixes]
    logger.info(f"Exporting {len(rows)} prefixes")
    return _write_sheet(
        "Prefixes", PREFIX_EXPORT_COLUMNS, rows, [8, 45, 45, 20, 12, 12, 20, 25, 28, 28]
    )


def save_workbook(buffer: BytesIO, path: str | Path) -> Path:
    """Write an export buffer to disk, creating the directory if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(buffer.getvalue())
    logger.info(f"Excel file created successfully: {path}")
    return path

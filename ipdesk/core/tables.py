"""
Browse tables - turn raw inventory records into display rows.

Used by the IP address, VLAN and device views and by the CLI. Nested fields
are read structurally; a missing nested object shows as "Nil".
"""

from typing import Any, Iterable

from .cache import ReferenceCache
from .resolver import search as search_entries

IP_COLUMNS = ["ID", "Address", "Role", "Status", "Tenant", "Assigned", "DNS Name"]
VLAN_COLUMNS = ["ID", "VID", "Name", "Status", "Tenant", "Site"]
DEVICE_COLUMNS = ["Name", "Serial Number", "Tenant", "Site", "Manufacturer"]

MISSING = "Nil"


def nested(record: Any, *path: str, default: Any = MISSING) -> Any:
    """Walk nested dicts; any missing/None step yields default."""
    value = record
    for key in path:
        if not isinstance(value, dict):
            return default
        value = value.get(key)
        if value is None:
            return default
    if value == "":
        return default
    return value


def ip_row(record: dict) -> list[str]:
    assigned = record.get("assigned_object_id") or record.get("assigned_object")
    return [
        str(record.get("id", "")),
        str(record.get("address", "")),
        str(nested(record, "role", "label")),
        str(nested(record, "status", "label")),
        str(nested(record, "tenant", "name")),
        "True" if assigned else "False",
        str(nested(record, "dns_name")),
    ]


def ip_rows(records: Iterable[dict], search: str = "") -> list[list[str]]:
    """Rows for IP addresses whose address contains search."""
    return [ip_row(r) for r in records if search in str(r.get("address", ""))]


def vlan_row(record: dict) -> list[str]:
    return [
        str(record.get("id", "")),
        str(record.get("vid", "")),
        str(record.get("name", "")),
        str(nested(record, "status", "label")),
        str(nested(record, "tenant", "name")),
        str(nested(record, "site", "name")),
    ]


def vlan_rows(records: Iterable[dict], search: str = "") -> list[list[str]]:
    """Rows for VLANs whose name or VID contains search."""
    return [
        vlan_row(r) for r in records
        if search in str(r.get("name", "")) or search in str(r.get("vid", ""))
    ]


def device_row(display_name: str, record: dict) -> list[str]:
    return [
        display_name,
        str(nested(record, "serial")),
        str(nested(record, "tenant", "display")),
        str(nested(record, "site", "display")),
        str(nested(record, "device_type", "manufacturer", "display")),
    ]


def device_rows(devices: ReferenceCache, search: str = "") -> list[list[str]]:
    """Rows for cached devices whose display name contains search."""
    return [device_row(e.display_name, e.raw) for e in search_entries(devices, search)]


def format_table(columns: list[str], rows: list[list[str]], width: int = 18) -> str:
    """Fixed-width text table for console output."""
    if not rows:
        return "No rows.\n"

    def fmt(values: list[str]) -> str:
        return " ".join(f"{v[:width]:<{width}}" for v in values).rstrip()

    lines = [fmt(columns), "-" * min(len(columns) * (width + 1), 120)]
    lines.extend(fmt(r) for r in rows)
    lines.append(f"\n{len(rows)} row(s)")
    return "\n".join(lines)

"""
Data models for the reference cache, bulk import and write requests.

All structured data uses dataclasses for type hints, __eq__, and __repr__.
Remote identifiers are the backend's integer ids; local indices are
positions inside one cache generation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence


class ReferenceKind(str, Enum):
    """Slow-changing reference collections cached by the console."""
    TENANT = "tenant"
    DEVICE_TYPE = "device_type"
    DEVICE_ROLE = "device_role"
    SITE = "site"
    MANUFACTURER = "manufacturer"
    DEVICE = "device"

    @property
    def endpoint(self) -> str:
        """Collection name understood by InventoryClient.fetch_collection."""
        return _KIND_ENDPOINTS[self]

    @property
    def display_field(self) -> str:
        """Record field shown in dropdowns and matched by the resolver."""
        return _KIND_DISPLAY_FIELDS[self]


_KIND_ENDPOINTS = {
    ReferenceKind.TENANT: "tenants",
    ReferenceKind.DEVICE_TYPE: "device-types",
    ReferenceKind.DEVICE_ROLE: "device-roles",
    ReferenceKind.SITE: "sites",
    ReferenceKind.MANUFACTURER: "manufacturers",
    ReferenceKind.DEVICE: "devices",
}

_KIND_DISPLAY_FIELDS = {
    ReferenceKind.TENANT: "name",
    ReferenceKind.DEVICE_TYPE: "model",
    ReferenceKind.DEVICE_ROLE: "name",
    ReferenceKind.SITE: "name",
    ReferenceKind.MANUFACTURER: "name",
    ReferenceKind.DEVICE: "display",
}

SENTINEL_NAME = "None"


@dataclass(frozen=True)
class ReferenceEntry:
    """
    One cached item of a reference kind.

    The entry at local_index 0 is the synthetic "None" sentinel and has
    no remote_id. raw is the decoded record, opaque to the cache.
    """
    local_index: int
    remote_id: Optional[int]
    display_name: str
    raw: dict = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def is_sentinel(self) -> bool:
        return self.local_index == 0

    @property
    def slug(self) -> Optional[str]:
        return self.raw.get("slug")


# Fixed column order of the bulk import sheet
IMPORT_COLUMNS = (
    "name",
    "serial",
    "tenant",
    "manufacturer",
    "role",
    "site",
    "device_type",
)


@dataclass
class ImportRow:
    """
    A single spreadsheet row for bulk device import.

    Cells are position-addressed by IMPORT_COLUMNS. Reference cells hold
    free text that is resolved against the caches.
    """
    name: str
    serial: str = ""
    tenant: str = ""
    manufacturer: str = ""
    role: str = ""
    site: str = ""
    device_type: str = ""
    row_number: Optional[int] = None  # 1-based position in the source sheet

    @classmethod
    def from_cells(cls, cells: Sequence[Any], row_number: Optional[int] = None) -> "ImportRow":
        """Build a row from raw cells; missing trailing cells read as ''."""
        values = [_cell_text(c) for c in list(cells)[:len(IMPORT_COLUMNS)]]
        values += [""] * (len(IMPORT_COLUMNS) - len(values))
        return cls(*values, row_number=row_number)

    def reference_text(self, kind: ReferenceKind) -> str:
        """Text of the cell that references the given kind."""
        return getattr(self, _ROW_REFERENCE_FIELDS[kind])


# Which row cell feeds which reference cache
_ROW_REFERENCE_FIELDS = {
    ReferenceKind.TENANT: "tenant",
    ReferenceKind.MANUFACTURER: "manufacturer",
    ReferenceKind.DEVICE_ROLE: "role",
    ReferenceKind.SITE: "site",
    ReferenceKind.DEVICE_TYPE: "device_type",
}

IMPORT_REFERENCE_KINDS = tuple(_ROW_REFERENCE_FIELDS)


def _cell_text(value: Any) -> str:
    """Render a spreadsheet cell as text; integral floats lose their '.0'."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class DeviceCreateRequest:
    """
    Write payload for a new device. All references are remote ids.

    Bulk import always fills every reference; the single-device form may
    leave tenant and manufacturer unset (the type implies the manufacturer).
    """
    name: str
    device_type: int
    role: int
    site: int
    manufacturer: Optional[int] = None
    tenant: Optional[int] = None
    serial: str = ""
    status: str = "active"

    def to_payload(self) -> dict:
        payload = {
            "name": self.name,
            "device_type": self.device_type,
            "role": self.role,
            "site": self.site,
            "status": self.status,
        }
        if self.manufacturer:
            payload["manufacturer"] = self.manufacturer
        if self.tenant:
            payload["tenant"] = self.tenant
        if self.serial:
            payload["serial"] = self.serial
        return payload


@dataclass
class IPAddressCreateRequest:
    """Write payload for a new IP address (CIDR notation)."""
    address: str
    status: str = "active"
    tenant: Optional[int] = None
    dns_name: str = ""
    description: str = ""

    def to_payload(self) -> dict:
        payload = {"address": self.address, "status": self.status}
        if self.tenant:
            payload["tenant"] = self.tenant
        if self.dns_name:
            payload["dns_name"] = self.dns_name
        if self.description:
            payload["description"] = self.description
        return payload


@dataclass
class VLANCreateRequest:
    """Write payload for a new VLAN."""
    vid: int
    name: str
    status: str = "active"
    tenant: Optional[int] = None
    site: Optional[int] = None
    description: str = ""

    def to_payload(self) -> dict:
        payload = {"vid": self.vid, "name": self.name, "status": self.status}
        if self.tenant:
            payload["tenant"] = self.tenant
        if self.site:
            payload["site"] = self.site
        if self.description:
            payload["description"] = self.description
        return payload


class RowOutcome(str, Enum):
    """What happened to one import row."""
    SUBMITTED = "submitted"
    SKIPPED_BLANK = "skipped_blank"            # a reference cell was empty
    SKIPPED_UNRESOLVED = "skipped_unresolved"  # text matched no cache entry
    FAILED = "failed"                          # the create request was refused


@dataclass
class RowResult:
    """Outcome of a single import row."""
    row: ImportRow
    outcome: RowOutcome
    reason: str = ""
    missing: list[str] = field(default_factory=list)  # reference kinds left at 0


@dataclass
class ImportSummary:
    """Counts for one bulk import run, plus per-row detail."""
    results: list[RowResult] = field(default_factory=list)

    def _count(self, *outcomes: RowOutcome) -> int:
        return sum(1 for r in self.results if r.outcome in outcomes)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def submitted(self) -> int:
        return self._count(RowOutcome.SUBMITTED)

    @property
    def skipped(self) -> int:
        return self._count(RowOutcome.SKIPPED_BLANK, RowOutcome.SKIPPED_UNRESOLVED)

    @property
    def failed(self) -> int:
        return self._count(RowOutcome.FAILED)

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "submitted": self.submitted,
            "skipped": self.skipped,
            "skipped_blank": self._count(RowOutcome.SKIPPED_BLANK),
            "skipped_unresolved": self._count(RowOutcome.SKIPPED_UNRESOLVED),
            "failed": self.failed,
        }

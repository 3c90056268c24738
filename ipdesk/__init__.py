# ipdesk - IPAM desk console
# Reference-data cache and entity resolution over a NetBox-style inventory API

from .core.models import (
    ReferenceKind,
    ReferenceEntry,
    ImportRow,
    ImportSummary,
    RowOutcome,
    DeviceCreateRequest,
)
from .core.errors import (
    InventoryError,
    NetworkFailure,
    AuthRejected,
    BadStatus,
    DecodeFailure,
    UnresolvedReference,
    PartialRecordSkipped,
    NotLoggedIn,
)
from .core.client import InventoryClient
from .core.cache import ReferenceCache, CacheSet, rebuild
from .core.resolver import resolve, search
from .core.scheduler import RefreshScheduler, View
from .core.importer import import_all
from .core.console import InventoryConsole

__version__ = "1.0.0"

__all__ = [
    # Models
    "ReferenceKind",
    "ReferenceEntry",
    "ImportRow",
    "ImportSummary",
    "RowOutcome",
    "DeviceCreateRequest",
    # Errors
    "InventoryError",
    "NetworkFailure",
    "AuthRejected",
    "BadStatus",
    "DecodeFailure",
    "UnresolvedReference",
    "PartialRecordSkipped",
    "NotLoggedIn",
    # Engine
    "InventoryClient",
    "ReferenceCache",
    "CacheSet",
    "rebuild",
    "resolve",
    "search",
    "RefreshScheduler",
    "View",
    "import_all",
    # Service
    "InventoryConsole",
]

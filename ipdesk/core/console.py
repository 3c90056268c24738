"""
Console service - the state behind the desk console.

InventoryConsole owns the session client, the reference caches, the browse
records and the refresh scheduler. The HTTP console and the CLI both drive
one instance of it; nothing here is a module-level global.

Refresh cycle per view:
- IP list: tenants and devices, plus the IP address and VLAN browse records
- Device list: manufacturers, sites, device types, device roles, tenants, devices

A failed fetch of one kind is logged and leaves that kind's previous cache
in place; the other kinds of the cycle still refresh.
"""
import logging
import threading
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional

from .cache import CacheSet, ReferenceCache, rebuild
from .client import InventoryClient
from .config import Settings, settings as default_settings
from .errors import AuthRejected, InventoryError, NotLoggedIn, UnresolvedReference
from .importer import import_all
from .models import (
    DeviceCreateRequest,
    ImportSummary,
    IPAddressCreateRequest,
    ReferenceEntry,
    ReferenceKind,
    VLANCreateRequest,
)
from .scheduler import VIEW_KINDS, RefreshScheduler, View
from .sources import RowSource, open_source
from .tables import device_rows, ip_rows, vlan_rows
from .xlsx_export import (
    DEVICES_FILENAME,
    PREFIXES_FILENAME,
    create_devices_workbook,
    create_prefixes_workbook,
    save_workbook,
)

logger = logging.getLogger(__name__)

# Non-reference collections shown by the IP list view
BROWSE_COLLECTIONS = ("ip-addresses", "vlans")


class InventoryConsole:
    """
    One operator session against one inventory backend.

    Args:
        settings: Console settings (defaults to the environment-backed singleton)
        client_factory: Builds a client from (base_url, token); tests inject fakes
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Optional[Callable[[str, str], InventoryClient]] = None,
    ):
        self.settings = settings or default_settings
        self._client_factory = client_factory or self._default_client
        self._client: Optional[InventoryClient] = None
        self.caches = CacheSet()
        self.scheduler = RefreshScheduler(
            self.refresh_view,
            interval=self.settings.REFRESH_INTERVAL,
            tick_seconds=self.settings.TICK_SECONDS,
        )
        self._records_lock = threading.Lock()
        self._records: dict[str, list[dict]] = {name: [] for name in BROWSE_COLLECTIONS}
        # Views that completed a cycle in the current session
        self._loaded: set[View] = set()

    def _default_client(self, base_url: str, token: str) -> InventoryClient:
        return InventoryClient(
            base_url,
            token,
            page_size=self.settings.PAGE_SIZE,
            timeout=self.settings.REQUEST_TIMEOUT,
        )

    # ---- session ----

    @property
    def logged_in(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> InventoryClient:
        client = self._client
        if client is None:
            raise NotLoggedIn()
        return client

    def login(self, base_url: str, token: str) -> dict:
        """
        Probe the backend with the token and start a session.

        Every login starts from empty caches and forces every view, so
        nothing fetched under a previous session survives it.

        Returns:
            The backend status document

        Raises:
            AuthRejected: token refused; no session is kept
            InventoryError: backend unreachable or not an inventory API
        """
        client = self._client_factory(base_url, token)
        try:
            status = client.check_status()
        except AuthRejected:
            logger.warning(f"Login to {base_url} rejected")
            self.logout()
            raise

        self._clear()
        self._client = client
        logger.info(f"Logged in to {base_url}")
        for view in View:
            self.scheduler.force(view)
        return status

    def logout(self) -> None:
        """Drop the session and every cached record."""
        self._client = None
        self._clear()

    def _clear(self) -> None:
        self.caches.reset()
        self._loaded.clear()
        with self._records_lock:
            for name in self._records:
                self._records[name] = []

    def session(self) -> dict:
        client = self._client
        return {
            "logged_in": client is not None,
            "base_url": client.base_url if client is not None else None,
        }

    # ---- refresh ----

    def refresh_view(self, view: View) -> None:
        """One refresh cycle for a view. No-op without a session."""
        client = self._client
        if client is None:
            logger.debug(f"Skipping refresh of {view.value}: not logged in")
            return

        for kind in VIEW_KINDS[view]:
            self.refresh_kind(kind, client)

        if view == View.IP_LIST:
            for name in BROWSE_COLLECTIONS:
                try:
                    records = client.fetch_collection(name)
                except InventoryError as e:
                    logger.error(f"Refresh of {name} failed, keeping previous records: {e}")
                    continue
                with self._records_lock:
                    self._records[name] = records

        if client is self._client:
            self._loaded.add(view)

    def ensure_loaded(self, view: View) -> None:
        """Run the view's first cycle of this session synchronously if it has not run yet."""
        if self._client is None or view in self._loaded:
            return
        if not self.scheduler.run_now(view):
            logger.warning(f"First refresh of {view.value} already running, using current caches")

    def load_all(self) -> None:
        """Run one synchronous refresh cycle for every view (CLI start-up)."""
        for view in View:
            self.scheduler.run_now(view)

    def refresh_kind(self, kind: ReferenceKind, client: Optional[InventoryClient] = None) -> bool:
        """
        Fetch and rebuild one reference kind.

        Returns:
            True if a new generation was swapped in
        """
        client = client or self.client
        try:
            raw = client.fetch(kind)
        except InventoryError as e:
            logger.error(f"Refresh of {kind.value} failed, keeping previous cache: {e}")
            return False
        self.caches.replace(rebuild(kind, raw))
        return True

    def active_view(self) -> View:
        for view in View:
            if self.scheduler.state(view).active:
                return view
        return View.IP_LIST

    def activate(self, view: View) -> None:
        self.scheduler.activate(view)

    def set_modal(self, view: View, open_: bool) -> None:
        self.scheduler.set_modal(view, open_)

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    def status(self) -> dict:
        snapshot = self.caches.snapshot()
        return {
            **self.session(),
            "caches": {
                kind.value: {"entries": len(cache) - 1, "skipped": cache.skipped}
                for kind, cache in snapshot.items()
            },
            "scheduler": self.scheduler.status(),
        }

    # ---- dropdowns ----

    def cache(self, kind: ReferenceKind) -> ReferenceCache:
        return self.caches.get(kind)

    def select(self, kind: ReferenceKind, local_index: int) -> ReferenceEntry:
        return self.caches.select(kind, local_index)

    # ---- browse ----

    def records(self, name: str) -> list[dict]:
        with self._records_lock:
            return list(self._records[name])

    def ip_rows(self, search: str = "") -> list[list[str]]:
        return ip_rows(self.records("ip-addresses"), search)

    def vlan_rows(self, search: str = "") -> list[list[str]]:
        return vlan_rows(self.records("vlans"), search)

    def device_rows(self, search: str = "") -> list[list[str]]:
        return device_rows(self.caches.get(ReferenceKind.DEVICE), search)

    def device_detail(self, device_id: int) -> dict:
        return self.client.get_device(device_id)

    # ---- single-entity create ----

    def _remote_id(
        self,
        caches: dict[ReferenceKind, ReferenceCache],
        kind: ReferenceKind,
        local_index: int,
        required: bool,
    ) -> Optional[int]:
        # IndexError here means the dropdown was rendered from an older generation
        entry = caches[kind].get(local_index)
        if entry.is_sentinel or entry.remote_id is None:
            if required:
                raise UnresolvedReference(kind, "")
            return None
        return entry.remote_id

    def create_device(
        self,
        name: str,
        device_type: int,
        role: int,
        site: int,
        manufacturer: int = 0,
        tenant: int = 0,
        serial: str = "",
        status: str = "active",
    ) -> dict:
        """
        Create one device from dropdown selections (local indices).

        Raises:
            UnresolvedReference: type, role or site left at the sentinel
            IndexError: a selection is outside the current cache generation
            BadStatus: the backend refused the request
            NotLoggedIn: no session
        """
        client = self.client
        self.ensure_loaded(View.DEVICE_LIST)
        caches = self.caches.snapshot()
        request = DeviceCreateRequest(
            name=name,
            device_type=self._remote_id(caches, ReferenceKind.DEVICE_TYPE, device_type, True),
            role=self._remote_id(caches, ReferenceKind.DEVICE_ROLE, role, True),
            site=self._remote_id(caches, ReferenceKind.SITE, site, True),
            manufacturer=self._remote_id(caches, ReferenceKind.MANUFACTURER, manufacturer, False),
            tenant=self._remote_id(caches, ReferenceKind.TENANT, tenant, False),
            serial=serial,
            status=status,
        )
        created = client.create_device(request)
        self.scheduler.force(View.DEVICE_LIST)
        return created

    def create_ip_address(
        self,
        address: str,
        tenant: int = 0,
        status: str = "active",
        dns_name: str = "",
        description: str = "",
    ) -> dict:
        client = self.client
        caches = self.caches.snapshot()
        request = IPAddressCreateRequest(
            address=address,
            status=status,
            tenant=self._remote_id(caches, ReferenceKind.TENANT, tenant, False),
            dns_name=dns_name,
            description=description,
        )
        created = client.create_ip_address(request)
        self.scheduler.force(View.IP_LIST)
        return created

    def create_vlan(
        self,
        vid: int,
        name: str,
        tenant: int = 0,
        site: int = 0,
        status: str = "active",
        description: str = "",
    ) -> dict:
        client = self.client
        caches = self.caches.snapshot()
        request = VLANCreateRequest(
            vid=vid,
            name=name,
            status=status,
            tenant=self._remote_id(caches, ReferenceKind.TENANT, tenant, False),
            site=self._remote_id(caches, ReferenceKind.SITE, site, False),
            description=description,
        )
        created = client.create_vlan(request)
        self.scheduler.force(View.IP_LIST)
        return created

    # ---- bulk import ----

    def import_rows(self, source: RowSource | str | Path, dry_run: bool = False) -> ImportSummary:
        """
        Bulk-import devices from a row source or a spreadsheet path.

        The whole pass resolves against one snapshot of the caches, taken
        after the device list has been loaded at least once this session. A
        device list refresh is forced once at the end (not on dry runs).
        """
        if not isinstance(source, RowSource):
            source = open_source(source, sheet_name=self.settings.IMPORT_SHEET)

        # Dry runs never submit, so they also work without a session
        submit = None if dry_run else self.client.create_device
        self.ensure_loaded(View.DEVICE_LIST)

        return import_all(
            source.rows(),
            self.caches.snapshot(),
            submit,
            refresh=lambda: self.scheduler.force(View.DEVICE_LIST),
            dry_run=dry_run,
        )

    # ---- export ----

    def devices_workbook(self, search: str = "") -> BytesIO:
        return create_devices_workbook(self.caches.get(ReferenceKind.DEVICE), search)

    def prefixes_workbook(self) -> BytesIO:
        """Prefixes are not cached; this fetches them live."""
        return create_prefixes_workbook(self.client.fetch_collection("prefixes"))

    def export_devices(self, path: Optional[str | Path] = None, search: str = "") -> Path:
        path = path or Path(self.settings.EXPORT_DIR) / DEVICES_FILENAME
        return save_workbook(self.devices_workbook(search), path)

    def export_prefixes(self, path: Optional[str | Path] = None) -> Path:
        path = path or Path(self.settings.EXPORT_DIR) / PREFIXES_FILENAME
        return save_workbook(self.prefixes_workbook(), path)

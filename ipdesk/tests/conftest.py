"""
Test configuration and fixtures for the ipdesk test suite.

Provides:
- Sample inventory records (NetBox-shaped)
- FakeInventoryClient serving those records without a network
- Cache builders, a logged-in InventoryConsole and a FastAPI TestClient
- make_response() for driving InventoryClient through a mocked requests session
"""
import copy
from typing import Optional
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from ipdesk.core.cache import CacheSet, ReferenceCache, rebuild
from ipdesk.core.console import InventoryConsole
from ipdesk.core.errors import AuthRejected, BadStatus
from ipdesk.core.models import ReferenceKind


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

SAMPLE_RECORDS = {
    "tenants": [
        {"id": 11, "name": "Tenant A", "slug": "tenant-a"},
        {"id": 12, "name": "Tenant B", "slug": "tenant-b"},
    ],
    "manufacturers": [
        {"id": 21, "name": "Acme", "slug": "acme"},
        {"id": 22, "name": "Juniper", "slug": "juniper"},
    ],
    "device-roles": [
        {"id": 31, "name": "Edge", "slug": "edge"},
        {"id": 32, "name": "Core", "slug": "core"},
    ],
    "sites": [
        {"id": 41, "name": "NYC", "slug": "nyc"},
        {"id": 42, "name": "LON", "slug": "lon"},
    ],
    "device-types": [
        {"id": 51, "model": "Router", "slug": "router"},
        {"id": 52, "model": "Switch 48P", "slug": "switch-48p"},
    ],
    "devices": [
        {
            "id": 61,
            "name": "edge-nyc-01",
            "display": "edge-nyc-01",
            "serial": "FOC1234",
            "device_type": {"id": 51, "display": "Router", "manufacturer": {"id": 21, "display": "Acme"}},
            "role": {"id": 31, "display": "Edge"},
            "site": {"id": 41, "display": "NYC"},
            "tenant": {"id": 11, "display": "Tenant A"},
            "status": {"value": "active", "label": "Active"},
        },
        {
            "id": 62,
            "name": "core-lon-01",
            "display": "core-lon-01",
            "serial": "",
            "device_type": {"id": 52, "display": "Switch 48P", "manufacturer": {"id": 22, "display": "Juniper"}},
            "role": {"id": 32, "display": "Core"},
            "site": {"id": 42, "display": "LON"},
            "tenant": None,
            "status": {"value": "planned", "label": "Planned"},
        },
    ],
    "ip-addresses": [
        {
            "id": 71,
            "address": "10.0.0.1/24",
            "role": None,
            "status": {"value": "active", "label": "Active"},
            "tenant": {"id": 11, "name": "Tenant A"},
            "assigned_object_id": 901,
            "dns_name": "gw.nyc.example.net",
        },
        {
            "id": 72,
            "address": "192.168.5.10/24",
            "role": {"value": "vip", "label": "VIP"},
            "status": {"value": "reserved", "label": "Reserved"},
            "tenant": None,
            "assigned_object_id": None,
            "dns_name": "",
        },
    ],
    "vlans": [
        {"id": 81, "vid": 100, "name": "users", "status": {"label": "Active"},
         "tenant": {"name": "Tenant A"}, "site": {"name": "NYC"}},
        {"id": 82, "vid": 200, "name": "voice", "status": {"label": "Active"},
         "tenant": None, "site": None},
    ],
    "prefixes": [
        {
            "id": 91,
            "url": "https://netbox.test/api/ipam/prefixes/91/",
            "display_url": "https://netbox.test/ipam/prefixes/91/",
            "display": "10.0.0.0/24",
            "family": {"value": 4, "label": "IPv4"},
            "prefix": "10.0.0.0/24",
            "tenant": {"id": 11, "name": "Tenant A"},
            "created": "2025-01-10T09:00:00Z",
            "last_updated": "2025-02-01T12:30:00Z",
        },
    ],
}


class FakeInventoryClient:
    """
    Stands in for InventoryClient.

    records: collection name -> raw records
    fail: collection name -> exception raised by fetch_collection
    refuse: device names whose create_device raises BadStatus
    """

    def __init__(self, base_url: str = "https://netbox.test", token: str = "0123abcd",
                 records: Optional[dict] = None):
        self.base_url = base_url
        self.token = token
        self.records = copy.deepcopy(records if records is not None else SAMPLE_RECORDS)
        self.fail: dict = {}
        self.refuse: set = set()
        self.reject_login = False
        self.fetch_calls: list[str] = []
        self.created: list[tuple[str, dict]] = []

    def check_status(self) -> dict:
        if self.reject_login:
            raise AuthRejected("Inventory API rejected credentials (HTTP 403)", status_code=403)
        return {"netbox-version": "4.1.3"}

    def fetch(self, kind: ReferenceKind) -> list[dict]:
        return self.fetch_collection(kind.endpoint)

    def fetch_collection(self, name: str) -> list[dict]:
        self.fetch_calls.append(name)
        if name in self.fail:
            raise self.fail[name]
        return list(self.records.get(name, []))

    def get_device(self, device_id: int) -> dict:
        for device in self.records["devices"]:
            if device["id"] == device_id:
                return device
        raise BadStatus(404, body='{"detail": "Not found."}')

    def _create(self, name: str, payload: dict) -> dict:
        self.created.append((name, payload))
        return {"id": 1000 + len(self.created), **payload}

    def create_device(self, request) -> dict:
        if request.name in self.refuse:
            raise BadStatus(400, body='{"name": ["Device name must be unique per site."]}')
        return self._create("devices", request.to_payload())

    def create_ip_address(self, request) -> dict:
        return self._create("ip-addresses", request.to_payload())

    def create_vlan(self, request) -> dict:
        return self._create("vlans", request.to_payload())


def make_response(status_code: int = 200, json_data=None, text: Optional[str] = None):
    """A requests.Response look-alike for a mocked Session.request."""
    resp = MagicMock()
    resp.status_code = status_code
    if json_data is None and text is not None:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = json_data
    resp.text = text if text is not None else str(json_data)
    return resp


def page(results: list, next_url: Optional[str] = None) -> dict:
    return {"count": len(results), "next": next_url, "previous": None, "results": results}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def sample_records():
    return copy.deepcopy(SAMPLE_RECORDS)


@pytest.fixture()
def make_cache():
    """Factory: ReferenceCache of a kind from display names (ids 1..n)."""
    def _make(kind: ReferenceKind, names: list[str], first_id: int = 1) -> ReferenceCache:
        records = [
            {"id": first_id + i, kind.display_field: name}
            for i, name in enumerate(names)
        ]
        return rebuild(kind, records)
    return _make


@pytest.fixture()
def caches(sample_records):
    """Snapshot of every reference kind built from the sample records."""
    return {kind: rebuild(kind, sample_records[kind.endpoint]) for kind in ReferenceKind}


@pytest.fixture()
def cache_set(caches):
    cs = CacheSet()
    for cache in caches.values():
        cs.replace(cache)
    return cs


@pytest.fixture()
def fake_client():
    return FakeInventoryClient()


@pytest.fixture()
def console(fake_client):
    """Logged-in console with every view loaded once. The tick job is not started."""
    c = InventoryConsole(client_factory=lambda base_url, token: fake_client)
    c.login(fake_client.base_url, fake_client.token)
    c.load_all()
    return c


@pytest.fixture()
def mock_session():
    return MagicMock()


@pytest.fixture()
def api_client(console):
    """
    Provide a FastAPI TestClient bound to the test console.
    Skips the lifespan side effects (startup login, APScheduler tick job).
    """
    from ipdesk.api.deps import get_console
    from ipdesk.api.main import app

    app.dependency_overrides[get_console] = lambda: console
    with patch("ipdesk.api.main.start_console"), \
         patch("ipdesk.api.main.stop_console"):
        with TestClient(app) as c:
            yield c
    app.dependency_overrides.clear()

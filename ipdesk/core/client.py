"""
Inventory API client.

Thin wrapper over requests for the NetBox-style REST API:
- Collection fetches (with continuation-link pagination)
- Single device detail
- Create requests for devices, IP addresses and VLANs
- Login probe against the status endpoint

Every failure is raised as an InventoryError subclass; nothing is retried here.
"""
import logging
from typing import Any, Optional

import requests

from .config import settings
from .errors import AuthRejected, BadStatus, DecodeFailure, NetworkFailure
from .models import (
    DeviceCreateRequest,
    IPAddressCreateRequest,
    ReferenceKind,
    VLANCreateRequest,
)

logger = logging.getLogger(__name__)

# Collection name -> API path
ENDPOINTS = {
    "devices": "/api/dcim/devices/",
    "tenants": "/api/tenancy/tenants/",
    "device-types": "/api/dcim/device-types/",
    "device-roles": "/api/dcim/device-roles/",
    "sites": "/api/dcim/sites/",
    "manufacturers": "/api/dcim/manufacturers/",
    "ip-addresses": "/api/ipam/ip-addresses/",
    "vlans": "/api/ipam/vlans/",
    "prefixes": "/api/ipam/prefixes/",
}

STATUS_PATH = "/api/status/"


def auth_header(token: str) -> str:
    """v2 tokens (nbt_ prefix) use Bearer, legacy tokens use Token."""
    scheme = "Bearer" if token.startswith("nbt_") else "Token"
    return f"{scheme} {token}"


class InventoryClient:
    """
    Authenticated client for one inventory backend.

    Args:
        base_url: Operator-supplied base URL (not otherwise validated)
        token: API token entered at login
        page_size: Records requested per page
        timeout: Per-request timeout in seconds
        session: Optional requests.Session (tests pass a mock)
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.page_size = page_size or settings.PAGE_SIZE
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self._session = session or requests.Session()

    def _headers(self) -> dict:
        return {
            "Authorization": auth_header(self.token),
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    def _request(self, method: str, url: str, **kwargs) -> Any:
        """Send one request and decode its JSON body, mapping failures."""
        try:
            resp = self._session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise NetworkFailure(str(e)) from e

        if resp.status_code in (401, 403):
            raise AuthRejected(
                f"Inventory API rejected credentials (HTTP {resp.status_code})",
                status_code=resp.status_code,
            )
        if not 200 <= resp.status_code < 300:
            raise BadStatus(resp.status_code, body=resp.text, url=url)

        try:
            return resp.json()
        except ValueError as e:
            raise DecodeFailure(f"Response from {url} is not JSON: {e}") from e

    # ---- reads ----

    def check_status(self) -> dict:
        """Login probe. Raises AuthRejected if the token is refused."""
        data = self._request("GET", self._url(STATUS_PATH))
        if not isinstance(data, dict):
            raise DecodeFailure("Status response is not an object")
        return data

    def fetch(self, kind: ReferenceKind) -> list[dict]:
        """Fetch every raw record of a reference kind."""
        return self.fetch_collection(kind.endpoint)

    def fetch_collection(self, name: str) -> list[dict]:
        """
        Fetch a whole collection, following 'next' links until exhausted.

        Args:
            name: Key of ENDPOINTS (e.g. "tenants", "ip-addresses")

        Returns:
            Raw records in response order
        """
        if name not in ENDPOINTS:
            raise ValueError(f"Unknown collection: {name}")

        url: Optional[str] = self._url(ENDPOINTS[name])
        params: Optional[dict] = {"limit": self.page_size}
        records: list[dict] = []
        seen: set[str] = set()

        while url:
            if url in seen:
                raise DecodeFailure(f"Pagination loop detected at {url}")
            seen.add(url)

            data = self._request("GET", url, params=params)
            if not isinstance(data, dict) or not isinstance(data.get("results"), list):
                raise DecodeFailure(f"Response from {url} has no 'results' list")

            records.extend(data["results"])
            url = data.get("next") or None
            # The next link already carries limit/offset
            params = None

        logger.debug(f"Fetched {len(records)} {name}")
        return records

    def get_device(self, device_id: int) -> dict:
        """Fetch the detail record of one device."""
        data = self._request("GET", self._url(f"{ENDPOINTS['devices']}{device_id}/"))
        if not isinstance(data, dict):
            raise DecodeFailure(f"Device {device_id} response is not an object")
        return data

    # ---- writes ----

    def _create(self, name: str, payload: dict) -> dict:
        data = self._request("POST", self._url(ENDPOINTS[name]), json=payload)
        return data if isinstance(data, dict) else {}

    def create_device(self, request: DeviceCreateRequest) -> dict:
        """Create a device. Raises BadStatus with the response body on refusal."""
        created = self._create("devices", request.to_payload())
        logger.info(f"Created device '{request.name}' (id={created.get('id')})")
        return created

    def create_ip_address(self, request: IPAddressCreateRequest) -> dict:
        created = self._create("ip-addresses", request.to_payload())
        logger.info(f"Created IP address {request.address} (id={created.get('id')})")
        return created

    def create_vlan(self, request: VLANCreateRequest) -> dict:
        created = self._create("vlans", request.to_payload())
        logger.info(f"Created VLAN {request.vid} '{request.name}' (id={created.get('id')})")
        return created

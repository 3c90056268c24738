"""
IPAM API router - IP addresses and VLANs.
"""
from fastapi import APIRouter, Depends, Query

from ipdesk.api.deps import get_console, http_error
from ipdesk.api.models import IPAddressCreateForm, VLANCreateForm
from ipdesk.api.security import require_api_key
from ipdesk.core.console import InventoryConsole
from ipdesk.core.errors import InventoryError, NotLoggedIn
from ipdesk.core.tables import IP_COLUMNS, VLAN_COLUMNS

router = APIRouter(prefix="/api", tags=["IPAM"])


@router.get("/ip-addresses")
def list_ip_addresses(
    search: str = Query("", description="Address filter"),
    console: InventoryConsole = Depends(get_console),
):
    rows = console.ip_rows(search)
    return {"columns": IP_COLUMNS, "rows": rows, "count": len(rows)}


@router.get("/vlans")
def list_vlans(
    search: str = Query("", description="Name or VID filter"),
    console: InventoryConsole = Depends(get_console),
):
    rows = console.vlan_rows(search)
    return {"columns": VLAN_COLUMNS, "rows": rows, "count": len(rows)}


@router.post("/ip-addresses", dependencies=[Depends(require_api_key)])
def create_ip_address(body: IPAddressCreateForm, console: InventoryConsole = Depends(get_console)):
    try:
        created = console.create_ip_address(
            address=body.address,
            tenant=body.tenant,
            status=body.status,
            dns_name=body.dns_name,
            description=body.description,
        )
    except (InventoryError, NotLoggedIn, IndexError) as e:
        raise http_error(e)
    return {"success": True, "ip_address": created}


@router.post("/vlans", dependencies=[Depends(require_api_key)])
def create_vlan(body: VLANCreateForm, console: InventoryConsole = Depends(get_console)):
    try:
        created = console.create_vlan(
            vid=body.vid,
            name=body.name,
            tenant=body.tenant,
            site=body.site,
            status=body.status,
            description=body.description,
        )
    except (InventoryError, NotLoggedIn, IndexError) as e:
        raise http_error(e)
    return {"success": True, "vlan": created}

"""
Pydantic request models for the API.

Reference fields of the create forms are local indices into the current
cache generation; 0 is the "None" entry.
"""
from pydantic import BaseModel


# ============== Session ==============

class LoginRequest(BaseModel):
    base_url: str
    token: str


# ============== Dropdowns / views ==============

class SelectionRequest(BaseModel):
    index: int


class ModalRequest(BaseModel):
    open: bool


# ============== Create forms ==============

class DeviceCreateForm(BaseModel):
    name: str
    device_type: int = 0
    role: int = 0
    site: int = 0
    manufacturer: int = 0
    tenant: int = 0
    serial: str = ""
    status: str = "active"


class IPAddressCreateForm(BaseModel):
    address: str  # CIDR, e.g. 10.0.0.5/24
    tenant: int = 0
    status: str = "active"
    dns_name: str = ""
    description: str = ""


class VLANCreateForm(BaseModel):
    vid: int
    name: str
    tenant: int = 0
    site: int = 0
    status: str = "active"
    description: str = ""

"""
Error taxonomy for talking to the Inventory API and resolving references.

Transport and protocol failures derive from InventoryError so callers that
only need "the request did not work" can catch one type.
"""
from typing import Optional


class InventoryError(Exception):
    """Base class for Inventory API failures."""


class NetworkFailure(InventoryError):
    """The request could not be sent or the response not received."""


class AuthRejected(InventoryError):
    """The API token was refused (HTTP 401/403)."""

    def __init__(self, message: str = "Credentials rejected by inventory API",
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BadStatus(InventoryError):
    """Non-success HTTP status. Carries the response body for the operator."""

    def __init__(self, status_code: int, body: str = "", url: str = ""):
        super().__init__(f"HTTP {status_code} from {url or 'inventory API'}")
        self.status_code = status_code
        self.body = body
        self.url = url


class DecodeFailure(InventoryError):
    """The response body was not the expected JSON structure."""


class UnresolvedReference(Exception):
    """Free text matched no cache entry where a concrete entity was required."""

    def __init__(self, kind, needle: str):
        label = getattr(kind, "value", kind)
        if needle:
            message = f"No {label} matches '{needle}'"
        else:
            message = f"No {label} selected"
        super().__init__(message)
        self.kind = kind
        self.needle = needle


class PartialRecordSkipped(Exception):
    """One raw record was dropped while rebuilding a reference cache."""

    def __init__(self, kind, reason: str):
        label = getattr(kind, "value", kind)
        super().__init__(f"Skipped {label} record: {reason}")
        self.kind = kind
        self.reason = reason


class NotLoggedIn(Exception):
    """An operation needs an authenticated session and there is none."""

    def __init__(self, message: str = "Not logged in to an inventory backend"):
        super().__init__(message)

"""Regional address reservation for load balancers.

- AddressManager: holds, releases and repairs the address of one load balancer
- AddressServiceClient: REST client for the regional address API
"""

from .address_manager import AddressManager, ensure_address_deleted
from .client import AddressServiceClient
from .types import (
    AddressRecord,
    AddressService,
    AddressSession,
    DesiredAddressSpec,
    ErrorClass,
    IPAddressType,
    LbScheme,
    NetworkTier,
    ReleaseState,
)

__all__ = [
    "AddressManager",
    "AddressRecord",
    "AddressService",
    "AddressServiceClient",
    "AddressSession",
    "DesiredAddressSpec",
    "ErrorClass",
    "IPAddressType",
    "LbScheme",
    "NetworkTier",
    "ReleaseState",
    "ensure_address_deleted",
]

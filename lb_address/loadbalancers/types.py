"""Types shared by the address manager and its remote service client."""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


class LbScheme(str, enum.Enum):
    """Address scheme, stored remotely as the address type."""

    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"

    @classmethod
    def parse(cls, value: str) -> "LbScheme":
        try:
            return cls(value.strip().upper())
        except (AttributeError, ValueError):
            raise ValueError(f"Invalid address scheme: {value!r}. Must be INTERNAL or EXTERNAL") from None


class NetworkTier(str, enum.Enum):
    """Network tier of an external address."""

    PREMIUM = "Premium"
    STANDARD = "Standard"

    def to_gce_value(self) -> str:
        """Return the value the address API uses for this tier."""
        return self.value.upper()

    @classmethod
    def parse(cls, value: Optional[str]) -> "NetworkTier":
        """Parse a tier from either spelling.

        An empty value means the service default, which is Premium.
        """
        if not value:
            return cls.PREMIUM
        normalized = value.strip().lower()
        for tier in cls:
            if tier.value.lower() == normalized:
                return tier
        raise ValueError(f"Invalid network tier: {value!r}. Must be Premium or Standard")


class IPAddressType(enum.Enum):
    """Whether an IP address is managed by this controller.

    UNDEFINED means the type could not be determined because of an error in
    address provisioning.
    """

    UNDEFINED = 0
    MANAGED = 1
    UNMANAGED = 2


class ReleaseState(enum.Enum):
    RELEASE_ALLOWED = "release_allowed"
    RELEASE_FORBIDDEN = "release_forbidden"


class ErrorClass(enum.Enum):
    """Classification of errors raised by an AddressService."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    BAD_REQUEST = "bad_request"
    NETWORK_TIER_MISMATCH = "network_tier_mismatch"
    OTHER = "other"


class AddressSession:
    """Release permission carried from hold_address() to release_address().

    The session starts in RELEASE_ALLOWED and can only move to
    RELEASE_FORBIDDEN. It lives as long as the manager instance that owns it.
    """

    def __init__(self):
        self._state = ReleaseState.RELEASE_ALLOWED

    @property
    def state(self) -> ReleaseState:
        return self._state

    @property
    def release_allowed(self) -> bool:
        return self._state is ReleaseState.RELEASE_ALLOWED

    def forbid_release(self) -> None:
        self._state = ReleaseState.RELEASE_FORBIDDEN

    def record_outcome(self, address_type: IPAddressType) -> None:
        """Record the outcome of a hold; unmanaged addresses are never released."""
        if address_type is IPAddressType.UNMANAGED:
            self.forbid_release()

    def __repr__(self):
        return f"AddressSession(state={self._state.value})"


@dataclass
class AddressRecord:
    """Regional address resource as returned by the address API.

    Attributes:
        name: Resource name, unique within the region
        address: IP address literal (empty when the service should assign one)
        address_type: INTERNAL or EXTERNAL
        network_tier: PREMIUM or STANDARD (API value)
        description: Free-form description
        region: Region name or URL
        subnetwork: Subnetwork URL (internal addresses only)
    """

    name: str
    address: str = ""
    address_type: str = ""
    network_tier: str = ""
    description: str = ""
    region: str = ""
    subnetwork: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "AddressRecord":
        return cls(
            name=data.get("name", ""),
            address=data.get("address", ""),
            address_type=data.get("addressType", ""),
            network_tier=data.get("networkTier", ""),
            description=data.get("description", ""),
            region=data.get("region", ""),
            subnetwork=data.get("subnetwork", ""),
        )

    def to_api(self) -> Dict[str, Any]:
        """Build the request body; empty fields are omitted."""
        body = {
            "name": self.name,
            "address": self.address,
            "addressType": self.address_type,
            "networkTier": self.network_tier,
            "description": self.description,
            "subnetwork": self.subnetwork,
        }
        return {key: value for key, value in body.items() if value}


@dataclass(frozen=True)
class DesiredAddressSpec:
    """Desired state of one address for a single reconciliation pass."""

    name: str
    service_name: str
    region: str
    target_ip: str = ""
    scheme: LbScheme = LbScheme.EXTERNAL
    subnet_url: str = ""
    network_tier: NetworkTier = NetworkTier.PREMIUM


class AddressService(ABC):
    """Remote regional address service.

    Lookups and deletes signal a missing resource by raising AddressNotFound.
    """

    @abstractmethod
    def get_region_address(self, name: str, region: str) -> AddressRecord:
        """Get an address by name.

        Raises:
            AddressNotFound: No address with this name in the region
        """

    @abstractmethod
    def get_region_address_by_ip(self, region: str, ip_address: str) -> AddressRecord:
        """Get the address reserving the given IP.

        Raises:
            AddressNotFound: The IP is not reserved in the region
        """

    @abstractmethod
    def reserve_region_address(self, record: AddressRecord, region: str) -> str:
        """Reserve an address.

        Returns:
            The reserved IP if the service echoed it back, otherwise the
            requested IP (empty when the service assigned one)

        Raises:
            AddressConflict: The name or IP is already claimed (internal)
            AddressBadRequest: The name or IP is already claimed (external)
            AddressNetworkTierRejected: The IP belongs to another network tier
        """

    @abstractmethod
    def delete_region_address(self, name: str, region: str) -> None:
        """Delete an address by name.

        Raises:
            AddressNotFound: No address with this name in the region
        """

    @abstractmethod
    def classify_error(self, error: Exception) -> ErrorClass:
        """Classify an error raised by this service."""

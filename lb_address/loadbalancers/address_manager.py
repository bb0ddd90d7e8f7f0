"""Regional address reservation for load balancers.

The address manager reserves the IP address used by a load balancer. The
address is either owned by the controller (named after the load balancer) or
reserved by a user under another name, in which case it is used but never
released. The remote service has no ownership concept, so the resource name
is the only ownership signal.
"""

import json
from typing import Optional, Tuple

from oslo_log import log as logging

from .exceptions import (
    AddressReservationError,
    AddressValidationError,
    NetworkTierError,
)
from .types import (
    AddressRecord,
    AddressService,
    AddressSession,
    DesiredAddressSpec,
    ErrorClass,
    IPAddressType,
    LbScheme,
    NetworkTier,
)

LOG = logging.getLogger(__name__)

SERVICE_NAME_DESCRIPTION_KEY = "kubernetes.io/service-name"


class AddressManager:
    """Holds and releases the address of one load balancer.

    A manager is built per reconciliation pass. All decisions are re-derived
    from the remote service on every call; the only state carried between
    hold_address() and release_address() is the release session.
    """

    def __init__(
        self,
        svc: AddressService,
        service_name: str,
        region: str,
        subnet_url: str,
        name: str,
        target_ip: str,
        address_type: LbScheme,
        network_tier: NetworkTier,
    ):
        """Initialize address manager.

        Args:
            svc: Remote address service
            service_name: Owning service, recorded in the address description
            region: Region the address lives in
            subnet_url: Subnetwork URL (internal addresses only)
            name: Name of the controller-owned address
            target_ip: Desired IP, or empty to accept any IP
            address_type: Address scheme
            network_tier: Desired network tier
        """
        self.svc = svc
        self.log_prefix = f'AddressManager("{name}")'
        self.service_name = service_name
        self.region = region
        self.subnet_url = subnet_url
        self.name = name
        self.target_ip = target_ip or ""
        self.address_type = address_type
        self.network_tier = network_tier
        self.session = AddressSession()

    @classmethod
    def from_spec(cls, svc: AddressService, spec: DesiredAddressSpec) -> "AddressManager":
        return cls(
            svc,
            service_name=spec.service_name,
            region=spec.region,
            subnet_url=spec.subnet_url,
            name=spec.name,
            target_ip=spec.target_ip,
            address_type=spec.scheme,
            network_tier=spec.network_tier,
        )

    def hold_address(self) -> Tuple[str, IPAddressType]:
        """Ensure the IP is reserved, by the controller or by a user.

        If the address reserving the IP is not named after the manager, it is
        assumed to be the user's address.

        Returns:
            Tuple of (IP address, IPAddressType.MANAGED or IPAddressType.UNMANAGED)

        Raises:
            NetworkTierError: The service rejected the desired network tier
            AddressReservationError: The reservation conflict could not be resolved
            LBAddressException: Any other service error
        """
        # Looking the address up by name first costs the fewest API calls in
        # the common case, and tells us whether a delete is needed before
        # reserving. A lookup by IP would not show what our own address holds.
        LOG.debug(
            "%s: attempting hold of IP %r type %s",
            self.log_prefix, self.target_ip, self.address_type.value,
        )
        addr = self._get_address_by_name()

        if addr is not None:
            try:
                self.validate_address(addr)
            except (AddressValidationError, NetworkTierError) as validation_error:
                LOG.info("%s: deleting existing address because %s", self.log_prefix, validation_error)
                self._delete_ignoring_not_found(addr.name)
            else:
                LOG.debug(
                    "%s: address %r already reserves IP %r type %s. No further action required.",
                    self.log_prefix, addr.name, addr.address, addr.address_type,
                )
                return self._finish(addr.address, IPAddressType.MANAGED)

        return self._ensure_address_reservation()

    def release_address(self) -> None:
        """Release the address if it's owned by the controller.

        Only the address named after the load balancer is ever deleted.
        """
        if not self.session.release_allowed:
            LOG.debug("%s: not attempting release of address %r.", self.log_prefix, self.target_ip)
            return

        LOG.debug("%s: releasing address %r named %r", self.log_prefix, self.target_ip, self.name)
        try:
            self.svc.delete_region_address(self.name, self.region)
        except Exception as e:
            if self.svc.classify_error(e) is ErrorClass.NOT_FOUND:
                LOG.warning("%s: address %r was not found. Ignoring.", self.log_prefix, self.name)
                return
            raise

        LOG.info("%s: successfully released IP %r named %r", self.log_prefix, self.target_ip, self.name)

    def tear_down_address_ip_if_network_tier_mismatch(self) -> None:
        """Delete the controller-owned address if it has the wrong network tier.

        The next hold_address() then reserves the IP again with the desired
        tier. A user-owned address with the wrong tier is reported, never
        modified.

        Raises:
            NetworkTierError: A user-owned address has the wrong network tier
            LBAddressException: The lookup by IP failed
        """
        if not self.target_ip:
            return

        try:
            addr = self.svc.get_region_address_by_ip(self.region, self.target_ip)
        except Exception as e:
            if self.svc.classify_error(e) is ErrorClass.NOT_FOUND:
                return
            raise

        if addr.network_tier == self.network_tier.to_gce_value():
            return

        if not self.is_managed_address(addr):
            raise NetworkTierError(
                f"User specific address IP ({self.name})",
                self.network_tier.value,
                addr.network_tier,
            )

        LOG.info("%s: deleting IP address %s because it has wrong network tier", self.log_prefix, self.target_ip)
        try:
            self.svc.delete_region_address(addr.name, self.region)
        except Exception as e:
            if self.svc.classify_error(e) is ErrorClass.NOT_FOUND:
                LOG.debug("%s: address %r was already deleted", self.log_prefix, addr.name)
                return
            # The next hold_address() validates and deletes again.
            LOG.error(
                "%s: unable to delete region address %s with IP %s: %s",
                self.log_prefix, addr.name, self.target_ip, e,
            )

    def validate_address(self, addr: AddressRecord) -> None:
        """Check that an address has the desired IP, scheme and network tier.

        Raises:
            AddressValidationError: IP or scheme mismatch
            NetworkTierError: Network tier mismatch
        """
        if self.target_ip and self.target_ip != addr.address:
            raise AddressValidationError(
                details=f"IP mismatch, expected {self.target_ip!r}, actual: {addr.address!r}"
            )
        if addr.address_type != self.address_type.value:
            raise AddressValidationError(
                details=(
                    f"address type mismatch, expected {self.address_type.value!r}, "
                    f"actual: {addr.address_type!r}"
                )
            )
        if addr.network_tier != self.network_tier.to_gce_value():
            raise NetworkTierError(
                f"Static IP ({self.name})",
                self.network_tier.to_gce_value(),
                addr.network_tier,
            )

    def is_managed_address(self, addr: AddressRecord) -> bool:
        return addr.name == self.name

    def classify_ownership(self, addr: AddressRecord) -> IPAddressType:
        if self.is_managed_address(addr):
            return IPAddressType.MANAGED
        return IPAddressType.UNMANAGED

    def _ensure_address_reservation(self) -> Tuple[str, IPAddressType]:
        # An empty target IP asks the service to assign one.
        new_addr = AddressRecord(
            name=self.name,
            description=json.dumps(
                {SERVICE_NAME_DESCRIPTION_KEY: self.service_name}, separators=(",", ":")
            ),
            address=self.target_ip,
            address_type=self.address_type.value,
            subnetwork=self.subnet_url,
        )
        # Network tier is supported only for external addresses
        if self.address_type is LbScheme.EXTERNAL:
            new_addr.network_tier = self.network_tier.to_gce_value()

        try:
            reserved_ip = self.svc.reserve_region_address(new_addr, self.region)
        except Exception as reserve_error:
            return self._resolve_reservation_failure(reserve_error)

        if reserved_ip:
            LOG.info("%s: successfully reserved IP %r with name %r", self.log_prefix, reserved_ip, new_addr.name)
            return self._finish(reserved_ip, IPAddressType.MANAGED)

        # The service assigned the IP, read it back.
        addr = self.svc.get_region_address(new_addr.name, self.region)
        LOG.info(
            "%s: successfully created address %r which reserved IP %r",
            self.log_prefix, addr.name, addr.address,
        )
        return self._finish(addr.address, IPAddressType.MANAGED)

    def _resolve_reservation_failure(self, reserve_error: Exception) -> Tuple[str, IPAddressType]:
        error_class = self.svc.classify_error(reserve_error)

        if error_class is ErrorClass.NETWORK_TIER_MISMATCH:
            # The service does not report the tier it holds, so assume the
            # opposite of the desired one for the error message.
            received = NetworkTier.STANDARD if self.network_tier is NetworkTier.PREMIUM else NetworkTier.PREMIUM
            raise NetworkTierError(
                f"Reserved static IP ({self.name})",
                self.network_tier.value,
                received.value,
            ) from reserve_error

        # An IP held by an internal address returns a conflict, one held by an
        # external address returns a bad request.
        if error_class not in (ErrorClass.CONFLICT, ErrorClass.BAD_REQUEST):
            raise reserve_error

        # Without a target IP there is no way to find out which IP caused the
        # conflict. If the name was taken, the next sync deletes that address.
        if not self.target_ip:
            raise AddressReservationError(
                details=f"failed to reserve address {self.name!r} with no specific IP, err: {reserve_error}",
                reservation_error=reserve_error,
            ) from reserve_error

        # No address with our name existed a moment ago, so the IP may belong
        # to the user.
        try:
            addr = self.svc.get_region_address_by_ip(self.region, self.target_ip)
        except Exception as e:
            raise AddressReservationError(
                details=(
                    f"failed to get address by IP {self.target_ip!r} after reservation attempt, "
                    f"err: {e}, reservation err: {reserve_error}"
                ),
                reservation_error=reserve_error,
            ) from e

        try:
            self.validate_address(addr)
        except (AddressValidationError, NetworkTierError) as e:
            raise AddressReservationError(
                details=f"address ({addr.name!r}) validation failed, err: {e}",
                reservation_error=reserve_error,
            ) from e

        address_type = self.classify_ownership(addr)
        if address_type is IPAddressType.MANAGED:
            # Checked by name at the start of hold_address() but re-created
            # since. Two controllers may be running.
            LOG.warning(
                "%s: address %r unexpectedly existed with IP %r.",
                self.log_prefix, addr.name, self.target_ip,
            )
        else:
            LOG.info(
                "%s: address %r was already reserved with name: %r, description: %r",
                self.log_prefix, self.target_ip, addr.name, addr.description,
            )
        return self._finish(addr.address, address_type)

    def _get_address_by_name(self) -> Optional[AddressRecord]:
        try:
            return self.svc.get_region_address(self.name, self.region)
        except Exception as e:
            if self.svc.classify_error(e) is ErrorClass.NOT_FOUND:
                return None
            raise

    def _delete_ignoring_not_found(self, name: str) -> None:
        ensure_address_deleted(self.svc, name, self.region)
        LOG.info("%s: previous address %r is deleted", self.log_prefix, name)

    def _finish(self, address: str, address_type: IPAddressType) -> Tuple[str, IPAddressType]:
        self.session.record_outcome(address_type)
        return address, address_type


def ensure_address_deleted(svc: AddressService, name: str, region: str) -> None:
    """Delete an address by name; a missing address is not an error."""
    try:
        svc.delete_region_address(name, region)
    except Exception as e:
        if svc.classify_error(e) is not ErrorClass.NOT_FOUND:
            raise
        LOG.debug("Address %r in region %s already deleted", name, region)

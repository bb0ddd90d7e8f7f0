"""Load balancer address manager exceptions."""


class LBAddressException(Exception):
    """Base exception for address manager errors."""

    message = "An unknown exception occurred."

    def __init__(self, message=None, **kwargs):
        """Initialize exception with optional custom message."""
        self.kwargs = kwargs
        if message:
            self.message = message
        super(LBAddressException, self).__init__(self.message % kwargs)


class AddressAPIError(LBAddressException):
    """Unclassified address API error."""

    message = "Address API error occurred: %(details)s"


class AddressAPIConnectionError(AddressAPIError):
    """API connection error."""

    message = "Failed to connect to address API: %(details)s"


class AddressAPITimeout(AddressAPIError):
    """API timeout error."""

    message = "Address API request timed out after %(timeout)s seconds"


class AddressNotFound(LBAddressException):
    """Address resource not found.

    Raised for HTTP 404 responses and for lookups by IP that match no
    address in the region.
    """

    message = "Address %(name)s not found in region %(region)s"


class AddressConflict(LBAddressException):
    """Address name or IP already claimed (HTTP 409).

    Returned when the IP is already reserved by an internal address.
    """

    message = "Address conflict: %(details)s"


class AddressBadRequest(LBAddressException):
    """Address request rejected (HTTP 400).

    Returned when the IP is already reserved by an external address.
    """

    message = "Bad address request: %(details)s"


class AddressNetworkTierRejected(AddressBadRequest):
    """The service rejected a reservation because of the network tier."""

    message = "Network tier rejected: %(details)s"


class NetworkTierError(LBAddressException):
    """Network tier of a resource differs from the desired one.

    Attributes:
        resource: Human readable description of the resource
        desired: Network tier the caller asked for
        received: Network tier the resource actually has
    """

    message = "Network tier mismatch for resource %(resource)s, want: %(desired)s, got: %(received)s"

    def __init__(self, resource, desired, received):
        self.resource = resource
        self.desired = desired
        self.received = received
        super(NetworkTierError, self).__init__(
            resource=resource, desired=desired, received=received
        )


class AddressValidationError(LBAddressException):
    """Existing address does not match the desired IP or scheme."""

    message = "Address validation failed: %(details)s"


class AddressReservationError(LBAddressException):
    """Address could not be reserved and ownership could not be resolved.

    Attributes:
        reservation_error: The exception raised by the reservation attempt, if any
    """

    message = "Address reservation failed: %(details)s"

    def __init__(self, message=None, reservation_error=None, **kwargs):
        self.reservation_error = reservation_error
        super(AddressReservationError, self).__init__(message, **kwargs)


class AddressConfigurationError(LBAddressException):
    """Address manager configuration error.

    This is a non-retryable error; the operator must fix the configuration.
    """

    message = "Address manager configuration error: %(details)s"

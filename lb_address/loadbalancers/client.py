"""REST API client for regional address resources."""

import time
from typing import Any, Dict, Optional

import requests
from oslo_log import log as logging
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import (
    AddressAPIConnectionError,
    AddressAPIError,
    AddressAPITimeout,
    AddressBadRequest,
    AddressConflict,
    AddressNetworkTierRejected,
    AddressNotFound,
    NetworkTierError,
)
from .types import AddressRecord, AddressService, ErrorClass

LOG = logging.getLogger(__name__)

# Substrings of 400 error messages caused by a network tier mismatch
NETWORK_TIER_ERROR_PATTERNS = [
    "network tier",
    "networktier",
]


class AddressServiceClient(AddressService):
    """REST API client for regional address operations.

    Talks to a compute-style API:
    ``{endpoint}/compute/v1/projects/{project}/regions/{region}/addresses``.
    Mutating calls return an operation which is polled until done.
    """

    def __init__(
        self,
        api_endpoint: str,
        project: str,
        timeout: int = 30,
        retry_count: int = 3,
        verify_ssl: bool = True,
        auth_type: Optional[str] = None,
        api_token: Optional[str] = None,
        ca_bundle: Optional[str] = None,
        operation_timeout: int = 120,
        operation_poll_interval: float = 2.0,
    ):
        """Initialize address API client.

        Args:
            api_endpoint: API URL (e.g., https://compute.example.com)
            project: Project owning the addresses
            timeout: HTTP request timeout in seconds
            retry_count: Number of retries for failed GET requests
            verify_ssl: Whether to verify SSL certificates
            auth_type: Authentication type ('token' or None)
            api_token: Bearer token for token authentication
            ca_bundle: Path to CA bundle file for SSL verification
            operation_timeout: Seconds to wait for an operation to finish
            operation_poll_interval: Seconds between operation polls

        Raises:
            ValueError: If authentication configuration is invalid
        """
        self.base_url = api_endpoint.rstrip("/")
        self.project = project
        self.timeout = timeout
        self.retry_count = retry_count
        self.operation_timeout = operation_timeout
        self.operation_poll_interval = operation_poll_interval

        if ca_bundle:
            self.verify_ssl = ca_bundle
        else:
            self.verify_ssl = verify_ssl

        self.session = requests.Session()

        if auth_type == "token":
            if not api_token:
                raise ValueError("api_token is required when auth_type='token'")
            self.session.headers.update({"Authorization": f"Bearer {api_token}"})
        elif auth_type and auth_type != "none":
            raise ValueError(f"Invalid auth_type: {auth_type}. Must be 'token' or 'none'")

        # Only GET is retried; a retried insert or delete could act twice
        retry_strategy = Retry(
            total=retry_count,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _region_path(self, region: str) -> str:
        return f"/compute/v1/projects/{self.project}/regions/{region}"

    def _make_request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        resource: Optional[str] = None,
        region: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Make HTTP request to the address API.

        Args:
            method: HTTP method (GET, POST, DELETE)
            path: API path below the endpoint
            json_data: Request body as JSON
            params: Query parameters
            resource: Resource name, used in not found errors
            region: Region, used in not found errors

        Returns:
            Response data dictionary (empty dict for 204 No Content)

        Raises:
            AddressAPIConnectionError: Connection failed
            AddressAPITimeout: Request timed out
            AddressNotFound: HTTP 404
            AddressConflict: HTTP 409
            AddressNetworkTierRejected: HTTP 400 caused by the network tier
            AddressBadRequest: Other HTTP 400
            AddressAPIError: Other API errors
        """
        url = self.base_url + path

        LOG.debug("Making %s request to %s with params=%s, json_data=%s", method, path, params, json_data)

        try:
            response = self.session.request(
                method=method,
                url=url,
                json=json_data,
                params=params,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.exceptions.Timeout:
            LOG.error("Request timeout after %ss: %s", self.timeout, path)
            raise AddressAPITimeout(timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            LOG.error("Connection error: %s, %s", path, e)
            raise AddressAPIConnectionError(details=str(e))
        except requests.exceptions.RequestException as e:
            LOG.error("Request exception: %s, %s", path, e)
            raise AddressAPIError(details=str(e))

        LOG.debug("Response status: %s", response.status_code)

        if response.status_code >= 400:
            error_msg = self._error_message(response)
            self._raise_for_status(response.status_code, error_msg, path, resource, region)

        if response.status_code == 204:
            return {}

        return response.json()

    @staticmethod
    def _error_message(response) -> str:
        # {"error": {"code": 400, "message": "...", "errors": [...]}}
        try:
            error_data = response.json()
            error = error_data.get("error", {})
            if isinstance(error, dict):
                error_msg = error.get("message") or response.text
            else:
                error_msg = str(error) or response.text
        except Exception:
            error_msg = response.text
        return str(error_msg)

    def _raise_for_status(
        self,
        status_code: int,
        error_msg: str,
        path: str,
        resource: Optional[str] = None,
        region: Optional[str] = None,
    ) -> None:
        if status_code == 404:
            LOG.debug("Resource not found: %s, error: %s", path, error_msg)
            raise AddressNotFound(name=resource or path, region=region or "unknown")
        if status_code == 409:
            LOG.warning("Conflict error: %s, error: %s", path, error_msg)
            raise AddressConflict(details=error_msg)
        if status_code == 400:
            error_lower = error_msg.lower()
            if any(pattern in error_lower for pattern in NETWORK_TIER_ERROR_PATTERNS):
                LOG.warning("Network tier rejected: %s, error: %s", path, error_msg)
                raise AddressNetworkTierRejected(details=error_msg)
            LOG.warning("Bad request: %s, error: %s", path, error_msg)
            raise AddressBadRequest(details=error_msg)

        LOG.error("API error: HTTP %s, %s", status_code, error_msg)
        raise AddressAPIError(details=f"HTTP {status_code}: {error_msg}")

    def _wait_for_operation(self, operation: Dict[str, Any], region: str, resource: str) -> None:
        """Poll a regional operation until it is done.

        Raises:
            AddressAPITimeout: Operation did not finish in operation_timeout
            LBAddressException: Operation finished with an error
        """
        deadline = time.monotonic() + self.operation_timeout
        while operation.get("status") != "DONE":
            if time.monotonic() >= deadline:
                LOG.error("Operation %s on %s did not finish in %ss", operation.get("name"), resource, self.operation_timeout)
                raise AddressAPITimeout(timeout=self.operation_timeout)
            time.sleep(self.operation_poll_interval)
            operation = self._make_request(
                "GET",
                f"{self._region_path(region)}/operations/{operation['name']}",
                resource=resource,
                region=region,
            )

        error = operation.get("error")
        if not error:
            return
        errors = error.get("errors") or [{}]
        error_msg = "; ".join(e.get("message", "") for e in errors) or str(error)
        status_code = operation.get("httpErrorStatusCode") or 500
        self._raise_for_status(status_code, error_msg, resource, resource, region)

    def _finish_mutation(self, response: Dict[str, Any], region: str, resource: str) -> Dict[str, Any]:
        if response.get("kind", "").endswith("#operation") or "operationType" in response:
            self._wait_for_operation(response, region, resource)
        return response

    def get_region_address(self, name: str, region: str) -> AddressRecord:
        data = self._make_request(
            "GET",
            f"{self._region_path(region)}/addresses/{name}",
            resource=name,
            region=region,
        )
        return AddressRecord.from_api(data)

    def get_region_address_by_ip(self, region: str, ip_address: str) -> AddressRecord:
        """Find the address reserving an IP.

        The filter is applied by the service, but the result is matched
        exactly since filters may match by prefix.
        """
        data = self._make_request(
            "GET",
            f"{self._region_path(region)}/addresses",
            params={"filter": f'address = "{ip_address}"'},
            resource=ip_address,
            region=region,
        )
        for item in data.get("items", []):
            if item.get("address") == ip_address:
                return AddressRecord.from_api(item)
        raise AddressNotFound(name=ip_address, region=region)

    def reserve_region_address(self, record: AddressRecord, region: str) -> str:
        response = self._make_request(
            "POST",
            f"{self._region_path(region)}/addresses",
            json_data=record.to_api(),
            resource=record.name,
            region=region,
        )
        self._finish_mutation(response, region, record.name)
        reserved = response.get("address") or record.address
        LOG.info("Reserved address %s in region %s (IP %r)", record.name, region, reserved)
        return reserved

    def delete_region_address(self, name: str, region: str) -> None:
        response = self._make_request(
            "DELETE",
            f"{self._region_path(region)}/addresses/{name}",
            resource=name,
            region=region,
        )
        self._finish_mutation(response, region, name)
        LOG.info("Deleted address %s in region %s", name, region)

    def classify_error(self, error: Exception) -> ErrorClass:
        return classify_error(error)


def classify_error(error: Exception) -> ErrorClass:
    """Map an address API exception onto an ErrorClass.

    The tier check comes first since a tier rejection is also a bad request.
    """
    if isinstance(error, AddressNotFound):
        return ErrorClass.NOT_FOUND
    if isinstance(error, (AddressNetworkTierRejected, NetworkTierError)):
        return ErrorClass.NETWORK_TIER_MISMATCH
    if isinstance(error, AddressConflict):
        return ErrorClass.CONFLICT
    if isinstance(error, AddressBadRequest):
        return ErrorClass.BAD_REQUEST
    return ErrorClass.OTHER

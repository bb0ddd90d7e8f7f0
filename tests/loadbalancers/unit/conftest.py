"""Pytest configuration and fixtures for address manager unit tests."""

from unittest.mock import Mock

import pytest

from lb_address.loadbalancers.address_manager import AddressManager
from lb_address.loadbalancers.client import classify_error
from lb_address.loadbalancers.exceptions import AddressNotFound
from lb_address.loadbalancers.types import (
    AddressRecord,
    AddressService,
    LbScheme,
    NetworkTier,
)

LB_NAME = "a1b2c3d4"
REGION = "us-central1"
TARGET_IP = "203.0.113.10"


@pytest.fixture
def mock_address_service():
    """Create a mock address service with no addresses reserved."""
    svc = Mock(spec=AddressService)
    svc.classify_error.side_effect = classify_error

    svc.get_region_address.side_effect = AddressNotFound(name=LB_NAME, region=REGION)
    svc.get_region_address_by_ip.side_effect = AddressNotFound(name=TARGET_IP, region=REGION)
    svc.reserve_region_address.return_value = TARGET_IP
    svc.delete_region_address.return_value = None
    return svc


@pytest.fixture
def managed_address():
    """Address owned by the controller, matching the default manager."""
    return AddressRecord(
        name=LB_NAME,
        address=TARGET_IP,
        address_type="EXTERNAL",
        network_tier="PREMIUM",
        description='{"kubernetes.io/service-name":"default/web"}',
        region=REGION,
    )


@pytest.fixture
def user_address():
    """Address reserved by a user under their own name."""
    return AddressRecord(
        name="my-static-ip",
        address=TARGET_IP,
        address_type="EXTERNAL",
        network_tier="PREMIUM",
        description="reserved by hand",
        region=REGION,
    )


@pytest.fixture
def make_manager(mock_address_service):
    """Factory for managers with overridable desired state."""

    def _make(
        target_ip=TARGET_IP,
        address_type=LbScheme.EXTERNAL,
        network_tier=NetworkTier.PREMIUM,
        subnet_url="",
        name=LB_NAME,
    ):
        return AddressManager(
            mock_address_service,
            service_name="default/web",
            region=REGION,
            subnet_url=subnet_url,
            name=name,
            target_ip=target_ip,
            address_type=address_type,
            network_tier=network_tier,
        )

    return _make


@pytest.fixture
def manager(make_manager):
    return make_manager()

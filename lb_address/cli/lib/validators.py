"""
Input validation functions.
"""

import ipaddress
import re


def validate_name(name: str) -> None:
    """
    Validate an address resource name.

    Names are lowercase RFC 1035 labels: 1-63 characters, starting with a
    letter and not ending with a hyphen.

    Args:
        name: Name to validate

    Raises:
        ValueError: If name is invalid
    """
    if not name:
        raise ValueError("Name cannot be empty")

    if len(name) > 63:
        raise ValueError("Name must be between 1 and 63 characters")

    if not re.match(r'^[a-z]([-a-z0-9]*[a-z0-9])?$', name):
        raise ValueError(
            "Name must start with a lowercase letter, contain only lowercase letters, "
            "digits or hyphens, and not end with a hyphen"
        )


def validate_ip(ip: str) -> str:
    """
    Validate an IP address literal.

    Args:
        ip: IPv4 or IPv6 address (e.g., "203.0.113.10")

    Returns:
        The address in canonical form

    Raises:
        ValueError: If the address is invalid
    """
    try:
        return str(ipaddress.ip_address(ip.strip()))
    except ValueError as e:
        raise ValueError(f"Invalid IP address: {e}")


def validate_region(region: str) -> None:
    """
    Validate a region name (e.g., "us-central1").

    Raises:
        ValueError: If region is invalid
    """
    if not region:
        raise ValueError("Region cannot be empty")

    if not re.match(r'^[a-z]+(-[a-z0-9]+)+$', region):
        raise ValueError(f"Invalid region: {region}")

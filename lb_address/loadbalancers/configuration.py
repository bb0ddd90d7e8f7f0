"""Configuration options for the load balancer address manager."""

from oslo_config import cfg

from .client import AddressServiceClient
from .exceptions import AddressConfigurationError

# Configuration group name
CONF_GROUP = "address_manager"


def _get_address_manager_opts():
    """Get address manager configuration options.

    Returns:
        List of oslo_config options
    """
    return [
        # API Configuration
        cfg.StrOpt(
            "api_endpoint",
            default=None,
            help="Address API endpoint URL (e.g., https://compute.googleapis.com)",
        ),
        cfg.StrOpt(
            "project",
            default=None,
            help="Project that owns the load balancer addresses",
        ),
        cfg.StrOpt(
            "region",
            default=None,
            help="Default region for addresses (e.g., us-central1)",
        ),
        cfg.IntOpt(
            "api_timeout",
            default=30,
            min=1,
            max=300,
            help="API request timeout in seconds",
        ),
        cfg.IntOpt(
            "api_retry_count",
            default=3,
            min=0,
            max=10,
            help="Number of retries for failed read requests. Mutating requests are never retried.",
        ),
        cfg.BoolOpt(
            "verify_ssl",
            default=True,
            help="Verify SSL certificates for API requests",
        ),
        # API Authentication Configuration
        cfg.StrOpt(
            "api_auth_type",
            default="none",
            choices=["token", "none"],
            help="API authentication type. Options: 'token' (Bearer token), 'none' (no auth)",
        ),
        cfg.StrOpt(
            "api_token",
            default=None,
            secret=True,
            help="API authentication token (for api_auth_type=token)",
        ),
        cfg.StrOpt(
            "ca_bundle",
            default=None,
            help="Path to CA bundle file for SSL verification (optional)",
        ),
        # Operation polling
        cfg.IntOpt(
            "operation_timeout",
            default=120,
            min=1,
            help="Seconds to wait for an insert or delete operation to finish",
        ),
        cfg.FloatOpt(
            "operation_poll_interval",
            default=2.0,
            min=0.0,
            help="Seconds between polls of a pending operation",
        ),
        # Address defaults
        cfg.StrOpt(
            "default_network_tier",
            default="Premium",
            choices=["Premium", "Standard"],
            help="Network tier for external addresses when none is given",
        ),
        cfg.StrOpt(
            "default_scheme",
            default="EXTERNAL",
            choices=["EXTERNAL", "INTERNAL"],
            help=(
                "Address scheme when none is given. "
                "'EXTERNAL': reachable from the internet. "
                "'INTERNAL': reachable only within the private network."
            ),
        ),
        cfg.StrOpt(
            "subnet_url",
            default=None,
            help="Subnetwork URL for internal addresses",
        ),
    ]


def register_opts(conf, group=None):
    """Register address manager configuration options.

    Args:
        conf: oslo_config.cfg.ConfigOpts instance
        group: Configuration group name (default: CONF_GROUP)
    """
    if group is None:
        group = CONF_GROUP
    conf.register_opts(_get_address_manager_opts(), group=group)


def list_opts():
    """Return a list of options for oslo-config-generator.

    Returns:
        List of (group_name, options) tuples
    """
    return [
        (CONF_GROUP, _get_address_manager_opts()),
    ]


def build_client(conf, group=None) -> AddressServiceClient:
    """Create an address API client from registered options.

    Raises:
        AddressConfigurationError: Endpoint or project is not configured
    """
    opts = conf[group or CONF_GROUP]

    if not opts.api_endpoint:
        raise AddressConfigurationError(details="api_endpoint is required")
    if not opts.project:
        raise AddressConfigurationError(details="project is required")

    try:
        return AddressServiceClient(
            api_endpoint=opts.api_endpoint,
            project=opts.project,
            timeout=opts.api_timeout,
            retry_count=opts.api_retry_count,
            verify_ssl=opts.verify_ssl,
            auth_type=opts.api_auth_type,
            api_token=opts.api_token,
            ca_bundle=opts.ca_bundle,
            operation_timeout=opts.operation_timeout,
            operation_poll_interval=opts.operation_poll_interval,
        )
    except ValueError as e:
        raise AddressConfigurationError(details=str(e))

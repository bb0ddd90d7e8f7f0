"""
LB Address Manager - regional IP address reservation for load balancers.

This package reserves, validates, reuses and releases the IP address of a
load balancer, telling controller-owned addresses apart from user-owned ones.
"""

__version__ = "0.1.0"
__all__ = ["loadbalancers", "cli"]

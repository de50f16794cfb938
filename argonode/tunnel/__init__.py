"""
Tunnel package: public hostname discovery.
"""

from .resolver import QUICK_TUNNEL_PATTERN, DomainResolver, find_quick_tunnel_domain

__all__ = [
    "QUICK_TUNNEL_PATTERN",
    "DomainResolver",
    "find_quick_tunnel_domain",
]

"""
Subscription package: connection link synthesis.
"""

from .links import (
    LinkGenerator,
    NetworkIdentity,
    build_links,
    fetch_network_identity,
    render_subscription_text,
)

__all__ = [
    "LinkGenerator",
    "NetworkIdentity",
    "build_links",
    "fetch_network_identity",
    "render_subscription_text",
]

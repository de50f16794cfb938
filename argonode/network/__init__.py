"""
Network module initialization.

This module provides access to network operations including HTTP client
management and aggregator publishing.
"""

from .http_client import HTTPClientManager
from .publisher import VISIT_URL, PublishClient

__all__ = [
    "HTTPClientManager",
    "PublishClient",
    "VISIT_URL",
]

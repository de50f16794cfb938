"""
Core module initialization.

This module provides access to core functionality including
configuration, models, errors and utilities.
"""

from .config import NodeConfig
from .errors import DomainResolutionError, LinkGenerationError, NodeError, PollTimeoutError
from .models import (
    Architecture,
    BinarySpec,
    ProxyConfigDocument,
    RuntimeConfig,
    TunnelCredential,
    TunnelIngressDocument,
    TunnelMode,
)
from .utils import mask_secret, poll_until, safe_b64decode, setup_logging

__all__ = [
    "NodeConfig",
    "NodeError",
    "PollTimeoutError",
    "DomainResolutionError",
    "LinkGenerationError",
    "Architecture",
    "BinarySpec",
    "ProxyConfigDocument",
    "RuntimeConfig",
    "TunnelCredential",
    "TunnelIngressDocument",
    "TunnelMode",
    "mask_secret",
    "poll_until",
    "safe_b64decode",
    "setup_logging",
]

"""
argonode - Tunneled Proxy Node Bootstrap

Provisions a proxy engine and a tunnel client on an arbitrary host,
discovers the tunnel's public hostname and publishes ready-to-use
connection links.
"""

__version__ = "1.0.0"

from .core.config import NodeConfig
from .core.models import RuntimeConfig, TunnelCredential, TunnelMode
from .orchestrator import NodeOrchestrator

__all__ = [
    "NodeConfig",
    "RuntimeConfig",
    "TunnelCredential",
    "TunnelMode",
    "NodeOrchestrator",
]

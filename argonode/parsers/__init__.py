"""
Parsers module initialization.

This module provides the subscription artifact codec and node entry
extraction.
"""

from .uri_parser import (
    NODE_SCHEMES,
    VMessParser,
    decode_subscription,
    encode_subscription,
    extract_node_entries,
    nodes_from_artifact,
)

__all__ = [
    "NODE_SCHEMES",
    "VMessParser",
    "decode_subscription",
    "encode_subscription",
    "extract_node_entries",
    "nodes_from_artifact",
]

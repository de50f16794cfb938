"""
Subscription artifact and node entry parsing.

A subscription artifact is a base64 blob wrapping a text block of
scheme-prefixed connection links; a node entry is one such link.
"""

import base64
import binascii
import json
import re
from typing import Any, Dict, List, Optional

from argonode.core.utils import safe_b64decode

NODE_SCHEMES = ("vless", "vmess", "trojan", "hysteria2", "tuic")
NODE_PATTERN = re.compile(r"(" + "|".join(NODE_SCHEMES) + r")://")


def encode_subscription(text: str) -> str:
    """Encode a link text block into a subscription artifact."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_subscription(artifact: str) -> Optional[str]:
    """Decode a subscription artifact, or return None if it is not valid base64."""
    try:
        return safe_b64decode(artifact).decode("utf-8")
    except (binascii.Error, ValueError):
        return None


def extract_node_entries(text: str) -> List[str]:
    """Return every line carrying a supported scheme, stripped, in order."""
    return [line.strip() for line in text.split("\n") if NODE_PATTERN.search(line)]


def nodes_from_artifact(artifact: str) -> List[str]:
    """Decode an artifact and extract its node entries; undecodable input yields none."""
    text = decode_subscription(artifact)
    if text is None:
        return []
    return extract_node_entries(text)


class VMessParser:
    """Builds and reads the base64 JSON payload carried by vmess:// links."""

    PREFIX = "vmess://"

    @staticmethod
    def build(payload: Dict[str, Any]) -> str:
        """Serialize with sorted keys and compact separators."""
        raw = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        return VMessParser.PREFIX + base64.b64encode(raw.encode("utf-8")).decode("ascii")

    @staticmethod
    def parse(uri: str) -> Optional[Dict[str, Any]]:
        """Parse VMess URI."""
        if not uri.startswith(VMessParser.PREFIX):
            return None
        try:
            decoded = safe_b64decode(uri[len(VMessParser.PREFIX):]).decode("utf-8")
            data = json.loads(decoded)
        except (binascii.Error, ValueError):
            return None
        return data if isinstance(data, dict) else None

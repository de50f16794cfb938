"""
Connection link synthesis and subscription artifact persistence.

Three links are produced per run (plain vless, vmess and trojan, all over
WebSocket + TLS through the edge address), joined into one text block,
base64-encoded and written over the previous artifact.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, List

import requests

from argonode.core.errors import LinkGenerationError
from argonode.core.models import SUB_FILE, RuntimeConfig
from argonode.core.utils import write_text_atomic
from argonode.network.http_client import HTTPClientManager
from argonode.parsers.uri_parser import VMessParser, encode_subscription

META_URL = "https://speed.cloudflare.com/meta"

VLESS_PATH = "%2Fvless-argo%3Fed%3D2048"
VMESS_PATH = "/vmess-argo?ed=2048"
TROJAN_PATH = "%2Ftrojan-argo%3Fed%3D2048"


@dataclass(frozen=True)
class NetworkIdentity:
    """Where this host appears to sit on the internet."""
    country: str
    as_organization: str

    @property
    def label(self) -> str:
        return f"{self.country}-{self.as_organization}".replace(" ", "_")


def fetch_network_identity(http_manager: HTTPClientManager, url: str = META_URL) -> NetworkIdentity:
    """Look up country and network operator for this host.

    Raises:
        LinkGenerationError: if the lookup fails or returns something unusable.
    """
    try:
        meta = http_manager.get_json(url)
    except (requests.RequestException, ValueError) as e:
        raise LinkGenerationError(f"Failed to get ISP info: {e}") from e
    if not isinstance(meta, dict):
        raise LinkGenerationError(f"Failed to parse ISP info: unexpected payload {type(meta).__name__}")
    return NetworkIdentity(str(meta.get("country", "")), str(meta.get("asOrganization", "")))


def build_links(config: RuntimeConfig, domain: str, identity: NetworkIdentity) -> List[str]:
    """Build the vless, vmess and trojan links for ``domain``."""
    remark = f"{config.name}-{identity.label}"
    edge = f"{config.cf_ip}:{config.cf_port}"

    vless = (
        f"vless://{config.uuid}@{edge}?encryption=none&security=tls&sni={domain}"
        f"&type=ws&host={domain}&path={VLESS_PATH}#{remark}"
    )

    vmess_payload: Dict[str, Any] = {
        "v": "2",
        "ps": remark,
        "add": config.cf_ip,
        "port": config.cf_port,
        "id": config.uuid,
        "aid": "0",
        "scy": "none",
        "net": "ws",
        "type": "none",
        "host": domain,
        "path": VMESS_PATH,
        "tls": "tls",
        "sni": domain,
        "alpn": "",
    }
    vmess = VMessParser.build(vmess_payload)

    trojan = (
        f"trojan://{config.uuid}@{edge}?security=tls&sni={domain}"
        f"&type=ws&host={domain}&path={TROJAN_PATH}#{remark}"
    )
    return [vless, vmess, trojan]


def render_subscription_text(links: List[str]) -> str:
    """Join links into the text block carried by the artifact."""
    return "\n" + "\n\n".join(links) + "\n"


class LinkGenerator:
    """Synthesizes the subscription artifact for a resolved domain."""

    def __init__(self, config: RuntimeConfig, http_manager: HTTPClientManager, echo: bool = True):
        self.config = config
        self.http_manager = http_manager
        self.echo = echo
        self.logger = logging.getLogger(__name__)

    @property
    def artifact_path(self) -> str:
        return self.config.path(SUB_FILE)

    def generate(self, domain: str) -> str:
        """Write a fresh artifact for ``domain`` and return its encoded content.

        Raises:
            LinkGenerationError: if the identity lookup or the write fails.
        """
        identity = fetch_network_identity(self.http_manager)
        text = render_subscription_text(build_links(self.config, domain, identity))
        encoded = encode_subscription(text)

        try:
            write_text_atomic(self.artifact_path, encoded)
        except OSError as e:
            raise LinkGenerationError(f"Failed to save {SUB_FILE}: {e}") from e

        if self.echo:
            sys.stdout.write(f"\n{encoded}\n\n")
            sys.stdout.flush()
        self.logger.info(f"{SUB_FILE} saved successfully in {self.config.file_path}")
        return encoded

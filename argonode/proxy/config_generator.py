"""
Configuration rendering for the proxy engine, tunnel client and monitoring agent.

Every writer here is best-effort: a failure is logged and reported through
the return value so the pipeline can carry on and fail visibly downstream.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from argonode.core.models import (
    AGENT_CONFIG_FILE,
    PROXY_CONFIG_FILE,
    TUNNEL_CONFIG_FILE,
    TUNNEL_CREDENTIALS_FILE,
    Inbound,
    Outbound,
    ProxyConfigDocument,
    RuntimeConfig,
    TunnelCredential,
    TunnelIngressDocument,
    TunnelMode,
)

LOOPBACK = "127.0.0.1"
DNS_SERVERS = ["https+local://8.8.8.8/dns-query"]
SNIFFING = {"enabled": True, "destOverride": ["http", "tls", "quic"], "metadataOnly": False}

# path -> loopback port behind the fallback inbound
FALLBACK_PLAIN_PORT = 3001
WS_ROUTES = [
    ("/vless-argo", 3002),
    ("/vmess-argo", 3003),
    ("/trojan-argo", 3004),
]


def build_proxy_document(config: RuntimeConfig) -> ProxyConfigDocument:
    """Build the proxy engine document for ``config``.

    One public inbound on the tunnel-facing port fans out by path to four
    loopback inbounds, all sharing the same identity token.
    """
    uuid = config.uuid
    fallbacks: List[Dict[str, Any]] = [{"dest": FALLBACK_PLAIN_PORT}]
    fallbacks.extend({"path": path, "dest": port} for path, port in WS_ROUTES)

    vless_path, vless_port = WS_ROUTES[0]
    vmess_path, vmess_port = WS_ROUTES[1]
    trojan_path, trojan_port = WS_ROUTES[2]

    inbounds = [
        Inbound(
            port=config.argo_port,
            protocol="vless",
            settings={
                "clients": [{"id": uuid, "flow": "xtls-rprx-vision"}],
                "decryption": "none",
                "fallbacks": fallbacks,
            },
            stream_settings={"network": "tcp"},
        ),
        Inbound(
            port=FALLBACK_PLAIN_PORT,
            listen=LOOPBACK,
            protocol="vless",
            settings={"clients": [{"id": uuid}], "decryption": "none"},
            stream_settings={"network": "tcp", "security": "none"},
        ),
        Inbound(
            port=vless_port,
            listen=LOOPBACK,
            protocol="vless",
            settings={"clients": [{"id": uuid, "level": 0}], "decryption": "none"},
            stream_settings={"network": "ws", "security": "none", "wsSettings": {"path": vless_path}},
            sniffing=dict(SNIFFING),
        ),
        Inbound(
            port=vmess_port,
            listen=LOOPBACK,
            protocol="vmess",
            settings={"clients": [{"id": uuid, "alterId": 0}]},
            stream_settings={"network": "ws", "wsSettings": {"path": vmess_path}},
            sniffing=dict(SNIFFING),
        ),
        Inbound(
            port=trojan_port,
            listen=LOOPBACK,
            protocol="trojan",
            settings={"clients": [{"password": uuid}]},
            stream_settings={"network": "ws", "security": "none", "wsSettings": {"path": trojan_path}},
            sniffing=dict(SNIFFING),
        ),
    ]

    outbounds = [
        Outbound(protocol="freedom", tag="direct"),
        Outbound(protocol="blackhole", tag="block"),
    ]

    return ProxyConfigDocument(inbounds=inbounds, outbounds=outbounds, dns_servers=list(DNS_SERVERS))


def build_agent_document(config: RuntimeConfig) -> Dict[str, Any]:
    """Pull-mode monitoring agent settings."""
    return {
        "client_secret": config.nezha_key,
        "debug": False,
        "disable_auto_update": True,
        "disable_command_execute": False,
        "disable_force_update": True,
        "disable_nat": False,
        "disable_send_query": False,
        "gpu": False,
        "insecure_tls": False,
        "ip_report_period": 1800,
        "report_delay": 1,
        "server": config.nezha_server,
        "skip_connection_count": False,
        "skip_procs_count": False,
        "temperature": False,
        "tls": False,
        "use_gitee_to_upgrade": False,
        "use_ipv6_country_code": False,
        "uuid": config.uuid,
    }


class ConfigGenerator:
    """Renders the on-disk documents the supervised processes read."""

    def __init__(self, config: RuntimeConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def write_proxy_config(self) -> Optional[str]:
        """Write config.json; return its path, or None on failure."""
        path = self.config.path(PROXY_CONFIG_FILE)
        try:
            document = build_proxy_document(self.config).to_dict()
            with open(path, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Failed to write proxy config {path}: {e}")
            return None
        return path

    def write_tunnel_config(self) -> Optional[str]:
        """Write tunnel.json and tunnel.yml for a structured-secret credential.

        Returns the tunnel.yml path, or None when the credential does not
        call for it or rendering failed.
        """
        if not self.config.fixed_tunnel:
            self.logger.info("ARGO_DOMAIN or ARGO_AUTH is empty, using quick tunnels")
            return None

        credential = TunnelCredential.classify(self.config.argo_auth)
        if credential.mode is not TunnelMode.STRUCTURED_SECRET:
            self.logger.info("ARGO_AUTH doesn't match TunnelSecret format, using token connection")
            return None

        credentials_path = self.config.path(TUNNEL_CREDENTIALS_FILE)
        try:
            with open(credentials_path, "w", encoding="utf-8") as f:
                f.write(credential.value)
        except OSError as e:
            self.logger.error(f"Failed to write {credentials_path}: {e}")
            return None

        try:
            tunnel_id = credential.tunnel_id()
        except ValueError as e:
            self.logger.error(f"Failed to parse tunnel data: {e}")
            return None

        document = TunnelIngressDocument(
            tunnel_id=tunnel_id,
            credentials_file=credentials_path,
            hostname=self.config.argo_domain,
            local_port=self.config.argo_port,
        )
        path = self.config.path(TUNNEL_CONFIG_FILE)
        try:
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(document.to_dict(), f, sort_keys=False, default_flow_style=False)
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to write {path}: {e}")
            return None
        return path

    def write_agent_config(self) -> Optional[str]:
        """Write config.yaml for the pull-mode monitoring agent, if that mode is active."""
        if not self.config.monitoring_enabled or self.config.monitoring_push_mode:
            return None
        path = self.config.path(AGENT_CONFIG_FILE)
        try:
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(build_agent_document(self.config), f, sort_keys=False, default_flow_style=False)
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to write {path}: {e}")
            return None
        return path

    def render_all(self) -> Dict[str, Optional[str]]:
        """Render every document the current configuration needs."""
        os.makedirs(self.config.file_path, exist_ok=True)
        return {
            "proxy": self.write_proxy_config(),
            "tunnel": self.write_tunnel_config(),
            "agent": self.write_agent_config(),
        }

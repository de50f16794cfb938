"""
Core data models and structures for the argonode system.

This module contains the runtime configuration snapshot, the tunnel
credential variants and the typed documents rendered for the proxy
engine and the tunnel client.
"""

import json
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# Fixed file names inside the working directory
SUB_FILE = "sub.txt"
BOOT_LOG = "boot.log"
PROXY_CONFIG_FILE = "config.json"
AGENT_CONFIG_FILE = "config.yaml"
TUNNEL_CREDENTIALS_FILE = "tunnel.json"
TUNNEL_CONFIG_FILE = "tunnel.yml"
LIST_FILE = "list.txt"

# Executable names
PROXY_BIN = "web"
TUNNEL_BIN = "bot"
PUSH_AGENT_BIN = "npm"
PULL_AGENT_BIN = "php"

TOKEN_PATTERN = re.compile(r"^[A-Z0-9a-z=]{120,250}$")
STRUCTURED_SECRET_MARKER = "TunnelSecret"


@dataclass(frozen=True)
class RuntimeConfig:
    """Immutable snapshot of every externally supplied parameter."""
    upload_url: str = ""
    project_url: str = ""
    auto_access: bool = False
    file_path: str = "./tmp"
    sub_path: str = "sub"
    port: int = 3000
    uuid: str = "ba1bea2a-cbb7-41bd-9333-6531ff8a5b31"
    nezha_server: str = ""
    nezha_port: str = ""
    nezha_key: str = ""
    argo_domain: str = ""
    argo_auth: str = ""
    argo_port: int = 8001
    cf_ip: str = "linux.do"
    cf_port: int = 443
    name: str = "encore.app"

    def path(self, name: str) -> str:
        """Return the absolute-or-relative path of a file in the working directory."""
        return os.path.join(self.file_path, name)

    @property
    def monitoring_enabled(self) -> bool:
        return bool(self.nezha_server and self.nezha_key)

    @property
    def monitoring_push_mode(self) -> bool:
        """Push mode needs an explicit port; without one the pull agent is used."""
        return self.monitoring_enabled and bool(self.nezha_port)

    @property
    def fixed_tunnel(self) -> bool:
        """True when the public hostname is known up front."""
        return bool(self.argo_auth and self.argo_domain)


class TunnelMode(Enum):
    """How the tunnel client authenticates against the edge network."""
    TOKEN = "token"
    STRUCTURED_SECRET = "structured_secret"
    QUICK = "quick"


@dataclass(frozen=True)
class TunnelCredential:
    """A tunnel credential classified once into its variant."""
    mode: TunnelMode
    value: str = ""

    @classmethod
    def classify(cls, value: Optional[str]) -> "TunnelCredential":
        value = value or ""
        if TOKEN_PATTERN.match(value):
            return cls(TunnelMode.TOKEN, value)
        if STRUCTURED_SECRET_MARKER in value:
            return cls(TunnelMode.STRUCTURED_SECRET, value)
        return cls(TunnelMode.QUICK, value)

    def tunnel_id(self) -> str:
        """Extract the TunnelID from a structured secret.

        Raises:
            ValueError: if the credential is not a structured secret or
                carries no string TunnelID.
        """
        if self.mode is not TunnelMode.STRUCTURED_SECRET:
            raise ValueError(f"credential is {self.mode.value}, not a structured secret")
        data = json.loads(self.value)
        tunnel_id = data.get("TunnelID") if isinstance(data, dict) else None
        if not isinstance(tunnel_id, str):
            raise ValueError("structured secret has no TunnelID")
        return tunnel_id


class Architecture(Enum):
    ARM = "arm"
    AMD = "amd"


@dataclass(frozen=True)
class BinarySpec:
    """A single executable to fetch: local file name and source URL."""
    file_name: str
    url: str


@dataclass
class LogSettings:
    access: str = "/dev/null"
    error: str = "/dev/null"
    loglevel: str = "none"

    def to_dict(self) -> Dict[str, Any]:
        return {"access": self.access, "error": self.error, "loglevel": self.loglevel}


@dataclass
class Inbound:
    """One proxy engine inbound; empty optional sections are omitted."""
    port: int
    protocol: str
    settings: Dict[str, Any]
    stream_settings: Dict[str, Any] = field(default_factory=dict)
    listen: str = ""
    sniffing: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "port": self.port,
            "protocol": self.protocol,
            "settings": self.settings,
        }
        if self.stream_settings:
            data["streamSettings"] = self.stream_settings
        if self.listen:
            data["listen"] = self.listen
        if self.sniffing:
            data["sniffing"] = self.sniffing
        return data


@dataclass
class Outbound:
    protocol: str
    tag: str = ""
    settings: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"protocol": self.protocol}
        if self.settings:
            data["settings"] = self.settings
        if self.tag:
            data["tag"] = self.tag
        return data


@dataclass
class RoutingSettings:
    domain_strategy: str = "AsIs"
    rules: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"domainStrategy": self.domain_strategy, "rules": self.rules}


@dataclass
class ProxyConfigDocument:
    """Full inbound/outbound/routing/DNS structure for the proxy engine."""
    inbounds: List[Inbound]
    outbounds: List[Outbound]
    dns_servers: List[str]
    log: LogSettings = field(default_factory=LogSettings)
    routing: RoutingSettings = field(default_factory=RoutingSettings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "log": self.log.to_dict(),
            "inbounds": [inbound.to_dict() for inbound in self.inbounds],
            "dns": {"servers": list(self.dns_servers)},
            "outbounds": [outbound.to_dict() for outbound in self.outbounds],
            "routing": self.routing.to_dict(),
        }

    def client_ids(self) -> List[str]:
        """Every identity value used by any inbound client (id or password)."""
        ids = []
        for inbound in self.inbounds:
            for client in inbound.settings.get("clients", []):
                ids.append(client.get("id") or client.get("password"))
        return ids


@dataclass
class TunnelIngressDocument:
    """Named-tunnel ingress: one hostname routed to the local port, then 404."""
    tunnel_id: str
    credentials_file: str
    hostname: str
    local_port: int
    protocol: str = "http2"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tunnel": self.tunnel_id,
            "credentials-file": self.credentials_file,
            "protocol": self.protocol,
            "ingress": [
                {
                    "hostname": self.hostname,
                    "service": f"http://localhost:{self.local_port}",
                    "originRequest": {"noTLSVerify": True},
                },
                {"service": "http_status:404"},
            ],
        }
